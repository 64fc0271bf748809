"""Value types describing exported metrics."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple

__all__ = ["MetricDescriptor", "MetricSample", "MetricType"]


class MetricType(Enum):
    """Metric kinds the exporter emits."""

    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricDescriptor:
    """Static description of one exported metric family."""

    name: str
    documentation: str
    label_names: Tuple[str, ...]
    metric_type: MetricType = MetricType.GAUGE


@dataclass(frozen=True)
class MetricSample:
    """One labelled value of a metric family."""

    name: str
    labels: Dict[str, str] = field(hash=False)
    value: float
    metric_type: MetricType = MetricType.GAUGE
