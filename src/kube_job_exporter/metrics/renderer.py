"""Render the aggregation store into labelled gauge samples."""

from __future__ import annotations

import logging
from typing import List, Tuple

from kube_job_exporter.jobs import AggregatedRecord, AggregationStore

from .models import MetricDescriptor, MetricSample

__all__ = [
    "COMPLETION_TIME",
    "DESCRIPTORS",
    "LABEL_NAMES",
    "START_TIME",
    "STATUS",
    "render",
    "render_records",
]

logger = logging.getLogger(__name__)

LABEL_NAMES: Tuple[str, ...] = ("namespace", "name")

STATUS = MetricDescriptor(
    name="kube_job_status",
    documentation="The last run status of a job (0=succeeded, 1=failed, 2=running)",
    label_names=LABEL_NAMES,
)
START_TIME = MetricDescriptor(
    name="kube_job_start_time",
    documentation="The start time for a job",
    label_names=LABEL_NAMES,
)
COMPLETION_TIME = MetricDescriptor(
    name="kube_job_completion_time",
    documentation="The completion time for a job",
    label_names=LABEL_NAMES,
)

DESCRIPTORS: Tuple[MetricDescriptor, ...] = (STATUS, START_TIME, COMPLETION_TIME)


def render_records(records: List[AggregatedRecord]) -> List[MetricSample]:
    """Emit the status, start-time and completion-time samples for ``records``."""
    samples: List[MetricSample] = []
    for record in sorted(records, key=lambda r: (r.namespace, r.display_name)):
        labels = {"namespace": record.namespace, "name": record.display_name}
        samples.append(MetricSample(STATUS.name, dict(labels), float(record.status)))
        samples.append(MetricSample(START_TIME.name, dict(labels), float(record.start_time)))
        samples.append(MetricSample(COMPLETION_TIME.name, dict(labels), float(record.completion_time)))
    return samples


def render(store: AggregationStore) -> List[MetricSample]:
    """Render a consistent snapshot of ``store`` without mutating it.

    The records are copied under the store lock first so formatting never
    holds the lock or observes a record mid-update.
    """
    records = list(store.records().values())
    samples = render_records(records)
    logger.debug("Rendered %s samples for %s jobs", len(samples), len(records))
    return samples
