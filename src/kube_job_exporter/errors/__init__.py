"""Exception hierarchy shared by the exporter packages."""

from .exporter_error import ExporterError
from .configuration_error import ConfigurationError
from .source_unavailable_error import SourceUnavailableError
from .annotation_decode_error import AnnotationDecodeError
from .export_error import ExportError

__all__ = [
    "ExporterError",
    "ConfigurationError",
    "SourceUnavailableError",
    "AnnotationDecodeError",
    "ExportError",
]
