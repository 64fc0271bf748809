"""Metric rendering and the collector facade."""

from .collector import JobsCollector
from .models import MetricDescriptor, MetricSample, MetricType
from .renderer import DESCRIPTORS, LABEL_NAMES, render, render_records

__all__ = [
    "DESCRIPTORS",
    "JobsCollector",
    "LABEL_NAMES",
    "MetricDescriptor",
    "MetricSample",
    "MetricType",
    "render",
    "render_records",
]
