"""CLI module for the workflow runtime.

This module provides the command-line interface for running and inspecting workflows.
"""

from .main import build_services, main

__all__ = ["main", "build_services"]
