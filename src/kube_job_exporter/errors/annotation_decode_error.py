"""Exception raised when an owner annotation payload is malformed."""

from __future__ import annotations

from .exporter_error import ExporterError

__all__ = ["AnnotationDecodeError"]


class AnnotationDecodeError(ExporterError):
    """Raised when a ``created-by`` annotation cannot be decoded."""

    def __init__(self, message: str, annotation: str, payload: str) -> None:
        super().__init__(message)
        self.annotation = annotation
        self.payload = payload
