"""Configuration for the variable engine.

Settings are resolved with the following precedence (highest first):
1) Environment variables prefixed with ``DOCVARS_``
2) A YAML settings file (explicit path, else ``docvars.yaml`` in the cwd)
3) Defaults declared on the model

Validation is done by Pydantic; invalid values are logged and re-raised.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


DEFAULT_CONFIG_FILE = Path("docvars.yaml")
ENV_PREFIX = "DOCVARS_"
logger = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


class EngineConfig(BaseModel):
    document_number_prefix: str = Field(default="FR")
    max_founder_share_slots: int = Field(default=9, ge=1, le=99)
    log_level: str = Field(default="INFO")

    @field_validator("document_number_prefix")
    @classmethod
    def prefix_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("document_number_prefix must be a non-empty string")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level


def _read_yaml_file(path: Path) -> Dict[str, Any]:
    try:
        if path.exists():
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return data
            if data is not None:
                logger.warning("Ignoring settings file %s: top level is not a mapping", path)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Failed to read settings file %s: %s", path, e)
    return {}


def _env_overrides() -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for name in EngineConfig.model_fields:
        value = os.environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            overrides[name] = value
    return overrides


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """Load engine settings from file and environment, with validation."""
    settings = _read_yaml_file(Path(path) if path is not None else DEFAULT_CONFIG_FILE)
    settings.update(_env_overrides())
    try:
        return EngineConfig(**settings)
    except PydanticValidationError as e:
        logger.error("Invalid engine configuration: %s", e)
        raise


__all__ = ["EngineConfig", "load_config"]
