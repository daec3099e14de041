"""Host settings with YAML support."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, field_validator

from assay_core.schemas import BaseSchema

CONFIG_ENV_VAR = "ASSAY_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".assay" / "config.yaml"

_ENV_OVERRIDES = {
    "ASSAY_PROJECTS_ROOT": "projects_root",
    "ASSAY_LOG_LEVEL": "log_level",
}


class AssaySettings(BaseSchema):
    """Settings for the command layer; the core operations take no settings."""

    projects_root: str = str(Path.home() / "AssayProjects")
    max_workers: int = Field(default=4, ge=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


def load_settings(yaml_path: str | Path | None = None) -> AssaySettings:
    """Load settings from YAML, then apply environment overrides.

    Args:
        yaml_path: Explicit settings file. Defaults to ``$ASSAY_CONFIG`` or
            ``~/.assay/config.yaml``; a missing default file means defaults.

    Raises:
        FileNotFoundError: If an explicitly requested file doesn't exist
        ValueError: If the YAML is invalid or has invalid fields
    """
    explicit = yaml_path is not None or CONFIG_ENV_VAR in os.environ
    path = Path(yaml_path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

    data: dict[str, object] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError(f"Settings file must contain a mapping: {path}")
        data.update(loaded or {})
    elif explicit:
        raise FileNotFoundError(f"Settings file not found: {path}")

    for env_var, field_name in _ENV_OVERRIDES.items():
        if env_var in os.environ:
            data[field_name] = os.environ[env_var]

    try:
        return AssaySettings.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid settings in {path}: {e}") from e


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
