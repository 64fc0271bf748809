"""Exporter configuration loaded from file, environment and CLI overrides.

Precedence, lowest first:

1. Field defaults on :class:`ExporterConfig`.
2. A YAML or JSON file, from ``path`` or ``$KUBE_JOB_EXPORTER_CONFIG_PATH``.
3. ``KUBE_JOB_EXPORTER_<FIELD>`` environment variables.
4. Explicit overrides (CLI options); ``None`` values are ignored.
"""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kube_job_exporter.errors import ConfigurationError
from kube_job_exporter.jobs import CREATED_BY_ANNOTATION

__all__ = ["ENV_PREFIX", "ExporterConfig", "RefreshMode", "load_config"]

ENV_PREFIX = "KUBE_JOB_EXPORTER_"
CONFIG_PATH_ENV = f"{ENV_PREFIX}CONFIG_PATH"

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class RefreshMode(str, Enum):
    """How the store is kept current."""

    BACKGROUND = "background"
    SCRAPE = "scrape"


class ExporterConfig(BaseModel):
    """Validated runtime settings for the exporter process."""

    host: str = "0.0.0.0"
    port: int = Field(default=9102, ge=0, le=65535)
    endpoint: str = "/metrics"
    mode: RefreshMode = RefreshMode.BACKGROUND
    resync_interval: float = Field(default=30.0, gt=0)
    list_timeout: float = Field(default=20.0, gt=0)
    kubectl_path: str = "kubectl"
    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    namespace: Optional[str] = None
    created_by_annotation: str = Field(default=CREATED_BY_ANNOTATION, min_length=1)
    evict_missing: bool = False
    log_level: str = "INFO"

    model_config = ConfigDict(extra="forbid")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level


def _read_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    try:
        with open(path, encoding="utf-8") as handle:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(handle)
            elif suffix == ".json":
                data = json.load(handle)
            else:
                raise ConfigurationError(f"Unsupported configuration format: {path.suffix}")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Failed to parse configuration file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Error reading configuration file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")

    logger.debug("Loaded configuration from %s", path)
    return data


def _read_environment(environ: Mapping[str, str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for field_name in ExporterConfig.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw is not None and raw != "":
            values[field_name] = raw
    return values


def load_config(
    path: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ExporterConfig:
    """Build an :class:`ExporterConfig` from every configuration layer.

    Raises:
        ConfigurationError: If the file cannot be read or the merged values
            fail validation.
    """
    environ = os.environ if environ is None else environ
    config_path = path or environ.get(CONFIG_PATH_ENV)

    values: Dict[str, Any] = {}
    if config_path:
        values.update(_read_file(Path(config_path)))
    values.update(_read_environment(environ))
    values.update({key: value for key, value in (overrides or {}).items() if value is not None})

    try:
        return ExporterConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
