"""Loading workflow configuration from TOML files."""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import ValidationError

from lwm_schemas.config import WorkflowConfig


class ConfigError(ValueError):
    """Configuration file could not be read or validated."""


def load_workflow_config(path: Path | str | None = None) -> WorkflowConfig:
    """Load a workflow configuration.

    The file may hold the settings at the top level or under a ``[workflow]``
    table. Without a path the defaults are returned.

    Args:
        path: Optional path to a TOML file.

    Returns:
        WorkflowConfig: Validated configuration.

    Raises:
        ConfigError: If the file is missing, is not valid TOML or does not
            validate.
    """
    if path is None:
        return WorkflowConfig()
    config_path = Path(path)
    try:
        with open(config_path, "rb") as handle:
            payload = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Cannot read config {config_path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {config_path}: {exc}") from exc

    section = payload.get("workflow", payload)
    try:
        return WorkflowConfig.model_validate(section)
    except ValidationError as exc:
        raise ConfigError(f"Invalid workflow config in {config_path}: {exc}") from exc
