"""Exception raised when exporter configuration is invalid."""

from __future__ import annotations

from .exporter_error import ExporterError

__all__ = ["ConfigurationError"]


class ConfigurationError(ExporterError):
    """Raised when a config file or override cannot be loaded or validated."""
