"""Utility modules for the workflow runtime."""

from .id import generate_tool_call_id, generate_uuid_with_dashes
from .logging import ColoredFormatter, LogEntry, LogLevel, PrefixLogger, StructuredFormatter, get_logger, setup_logging

__all__ = [
    # ID generation
    "generate_uuid_with_dashes",
    "generate_tool_call_id",
    # Logging
    "setup_logging",
    "get_logger",
    "LogLevel",
    "LogEntry",
    "StructuredFormatter",
    "ColoredFormatter",
    "PrefixLogger",
]
