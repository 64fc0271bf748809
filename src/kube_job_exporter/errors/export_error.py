"""Exception raised when the metrics endpoint cannot be served."""

from __future__ import annotations

from .exporter_error import ExporterError

__all__ = ["ExportError"]


class ExportError(ExporterError):
    """Raised when the Prometheus transport fails to start or serve."""
