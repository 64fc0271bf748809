"""Exception raised when the job snapshot source cannot be listed."""

from __future__ import annotations

from typing import Optional

from .exporter_error import ExporterError

__all__ = ["SourceUnavailableError"]


class SourceUnavailableError(ExporterError):
    """Raised by snapshot sources when listing jobs fails.

    The error is never fatal: collectors log it and expose either no samples
    (scrape-synchronous mode) or the previously aggregated state.
    """

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source
