"""Root exception for the job exporter."""

from __future__ import annotations

__all__ = ["ExporterError"]


class ExporterError(Exception):
    """Base class for every error raised by the job exporter."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
