"""Configuration file parsing utilities."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ralli.config.schemas import ProjectConfig

logger = logging.getLogger(__name__)

PROJECT_FILE = "ralli.yaml"


class ConfigError(Exception):
    """Error loading or parsing configuration."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as a dictionary

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if not path.exists():
        raise ConfigError(f"File not found: {path}", path)

    try:
        with open(path, encoding="utf-8") as f:
            result = yaml.safe_load(f)
            if result is None:
                return {}
            if not isinstance(result, dict):
                raise ConfigError(f"YAML file must contain a mapping: {path}", path)
            return result
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", path) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}", path) from e


def save_yaml(path: Path, data: dict[str, Any]) -> None:
    """Save data to a YAML file.

    Args:
        path: Path to write to
        data: Data to serialize
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def _describe_errors(error: ValidationError) -> str:
    """Summarize validation errors as ``field: message`` pairs."""
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "(root)"
        message = detail["msg"].removeprefix("Value error, ")
        problems.append(f"{location}: {message}")
    return "; ".join(problems)


def load_project_config(project_root: Path) -> ProjectConfig:
    """Load project configuration from ralli.yaml.

    Args:
        project_root: Path to the project root directory

    Returns:
        Parsed ProjectConfig

    Raises:
        ConfigError: If the file is missing or invalid
    """
    config_path = project_root / PROJECT_FILE
    data = load_yaml(config_path)
    logger.debug("Loaded %s", config_path)

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid project config in {config_path}: {_describe_errors(e)}", config_path
        ) from e


def save_project_config(project_root: Path, config: ProjectConfig) -> None:
    """Save project configuration to ralli.yaml."""
    config_path = project_root / PROJECT_FILE
    save_yaml(config_path, config.model_dump(exclude_none=True))
    logger.debug("Saved %s", config_path)


def find_project_root(start_path: Path | None = None) -> Path | None:
    """Find the nearest directory at or above start_path holding ralli.yaml."""
    start = (start_path or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        if (directory / PROJECT_FILE).is_file():
            return directory
    return None
