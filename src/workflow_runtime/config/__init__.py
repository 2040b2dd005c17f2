"""Configuration management for the workflow runtime."""

from .loader import (
    load_config_file,
    load_messages,
    load_project_data,
    load_project_tools,
    load_runtime_config,
    load_workflow_config,
    save_project_config,
)
from .schemas import LLMConfig, RuntimeConfig, validate_runtime_config

__all__ = [
    # Loader
    "load_config_file",
    "load_workflow_config",
    "load_project_tools",
    "load_messages",
    "load_project_data",
    "save_project_config",
    "load_runtime_config",
    # Schemas
    "LLMConfig",
    "RuntimeConfig",
    "validate_runtime_config",
]
