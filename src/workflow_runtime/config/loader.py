"""Configuration loader for the workflow runtime.

This module provides functionality for loading YAML and JSON configurations
with environment variable expansion support.
"""

import json
import os
import re
from pathlib import Path
from typing import Any

import yaml

from ..models import DataSource, DataSourceDoc, Message, ProjectConfig, Workflow, WorkflowTool, parse_messages
from .schemas import RuntimeConfig, validate_runtime_config

# Pattern for environment variable substitution: ${VAR_NAME} or ${VAR_NAME:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

# Environment variables that override runtime settings when set
ENV_OVERRIDES = {
    "PROVIDER_BASE_URL": ("llm", "endpoint"),
    "PROVIDER_DEFAULT_MODEL": ("llm", "model"),
    "QDRANT_URL": (None, "qdrant_url"),
}


def _expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in a value.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        value: The value to expand (can be str, dict, list)

    Returns:
        The value with environment variables expanded
    """
    if isinstance(value, str):
        def replace_env_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default)

        return ENV_VAR_PATTERN.sub(replace_env_var, value)

    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]

    return value


def load_yaml_file(file_path: str | Path) -> Any:
    """Load a YAML file and return its contents.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed YAML contents (empty dict for an empty file)

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file is not valid YAML
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return {} if data is None else data


def load_config_file(
    file_path: str | Path,
    config_type: str = "auto",
    expand_env: bool = True,
) -> Any:
    """Load a configuration file (YAML or JSON) with optional environment variable expansion.

    Args:
        file_path: Path to the configuration file
        config_type: Type of config ("yaml", "json", or "auto" to detect from extension)
        expand_env: Whether to expand environment variables

    Returns:
        Parsed configuration

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file type is unsupported or invalid
    """
    path = Path(file_path)

    if config_type == "auto":
        suffix = path.suffix.lower()
        if suffix in [".yaml", ".yml"]:
            config_type = "yaml"
        elif suffix == ".json":
            config_type = "json"
        else:
            raise ValueError(f"Cannot detect config type from extension: {suffix}")

    if config_type == "yaml":
        config = load_yaml_file(path)
    elif config_type == "json":
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    else:
        raise ValueError(f"Unsupported config type: {config_type}")

    if expand_env:
        config = _expand_env_vars(config)

    return config


def load_workflow_config(file_path: str | Path) -> Workflow:
    """Load and validate a workflow definition file.

    Args:
        file_path: Path to the workflow file

    Returns:
        Validated Workflow

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the workflow is invalid
    """
    config_data = load_config_file(file_path)
    if isinstance(config_data, dict) and "workflow" in config_data:
        config_data = config_data["workflow"]
    return Workflow.model_validate(config_data)


def load_project_tools(file_path: str | Path) -> list[WorkflowTool]:
    """Load project-level tool definitions.

    The file holds either a list of tools or a mapping with a ``tools`` key.

    Args:
        file_path: Path to the tools file

    Returns:
        Validated tool definitions
    """
    config_data = load_config_file(file_path)
    if isinstance(config_data, dict):
        config_data = config_data.get("tools", [])
    return [WorkflowTool.model_validate(item) for item in config_data]


def load_messages(file_path: str | Path) -> list[Message]:
    """Load a conversation transcript.

    The file holds either a list of messages or a mapping with a ``messages`` key.
    Environment variables are not expanded inside transcripts.

    Args:
        file_path: Path to the transcript file

    Returns:
        Parsed messages
    """
    config_data = load_config_file(file_path, expand_env=False)
    if isinstance(config_data, dict):
        config_data = config_data.get("messages", [])
    return parse_messages(config_data)


def load_runtime_config(file_path: str | Path | None = None) -> RuntimeConfig:
    """Load runtime configuration, overlaid with provider environment variables.

    Args:
        file_path: Optional path to a runtime config file

    Returns:
        RuntimeConfig object

    Raises:
        FileNotFoundError: If an explicit file doesn't exist
        ValidationError: If the configuration is invalid
    """
    config_data: dict[str, Any] = {}
    if file_path is not None:
        config_data = load_config_file(file_path) or {}

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if not value:
            continue
        if section is None:
            config_data[key] = value
        else:
            config_data.setdefault(section, {})[key] = value

    return validate_runtime_config(config_data)


def load_project_data(file_path: str | Path) -> tuple[ProjectConfig, list[DataSource], list[DataSourceDoc]]:
    """Load a project record with its data sources and documents.

    The file holds a ``project`` mapping plus optional ``dataSources`` and
    ``docs`` lists.

    Args:
        file_path: Path to the project file

    Returns:
        Tuple of (project, data sources, documents)
    """
    config_data = load_config_file(file_path) or {}
    project = ProjectConfig.model_validate(config_data.get("project", {}))
    sources = [DataSource.model_validate(item) for item in config_data.get("dataSources", [])]
    docs = [DataSourceDoc.model_validate(item) for item in config_data.get("docs", [])]
    return project, sources, docs


def save_project_config(file_path: str | Path, project: ProjectConfig) -> None:
    """Write a project record back into its project file.

    Other top-level keys of the file are preserved. Environment variables are
    not expanded when the existing file is read.

    Args:
        file_path: Path to the project file (YAML or JSON)
        project: Project record
    """
    path = Path(file_path)
    data: dict[str, Any] = {}
    if path.exists():
        data = load_config_file(path, expand_env=False) or {}
    data["project"] = project.to_dict()

    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            json.dump(data, f, indent=2)
        else:
            yaml.safe_dump(data, f, sort_keys=False)
