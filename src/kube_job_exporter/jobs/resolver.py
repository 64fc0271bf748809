"""Identity and status resolution for observed job snapshots."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from kube_job_exporter.errors import AnnotationDecodeError

from .models import (
    AggregatedRecord,
    CreatedByAnnotation,
    Resolution,
    StatusCode,
    WorkloadSnapshot,
    to_unix_seconds,
)

__all__ = [
    "CREATED_BY_ANNOTATION",
    "decode_created_by",
    "is_aggregatable",
    "resolve_identity_key",
    "resolve_snapshot",
    "resolve_status",
]

CREATED_BY_ANNOTATION = "kubernetes.io/created-by"

logger = logging.getLogger(__name__)


def resolve_status(snapshot: WorkloadSnapshot) -> StatusCode:
    """Return the coarse status of ``snapshot``.

    Active pods win over failures, failures win over success. A job in
    transition can report stale active and failed counters at once, so the
    order must not change.
    """
    if snapshot.active > 0:
        return StatusCode.RUNNING
    if snapshot.failed > 0:
        return StatusCode.FAILED
    return StatusCode.SUCCEEDED


def decode_created_by(payload: str, annotation: str = CREATED_BY_ANNOTATION) -> CreatedByAnnotation:
    """Decode a serialized owner reference annotation.

    Raises:
        AnnotationDecodeError: If ``payload`` is not a JSON object of the
            expected shape.
    """
    try:
        return CreatedByAnnotation.model_validate_json(payload)
    except ValidationError as exc:
        raise AnnotationDecodeError(
            f"Cannot parse annotation {annotation}: {exc.error_count()} validation error(s)",
            annotation=annotation,
            payload=payload,
        ) from exc


def is_aggregatable(snapshot: WorkloadSnapshot) -> bool:
    """Return ``True`` when the snapshot is annotated and has completed."""
    return bool(snapshot.annotations) and snapshot.completion_time is not None


def resolve_identity_key(
    snapshot: WorkloadSnapshot,
    annotation: str = CREATED_BY_ANNOTATION,
) -> Optional[str]:
    """Return the logical identity of ``snapshot`` or ``None``.

    Jobs created by the same owner in the same namespace share one key, so
    retries and recreations collapse into a single record.
    """
    payload = snapshot.annotations.get(annotation) if snapshot.annotations else None
    if not payload:
        return None

    reference = decode_created_by(payload, annotation).reference
    if not reference.name:
        return None
    return f"{snapshot.namespace}/{reference.name}"


def resolve_snapshot(
    snapshot: WorkloadSnapshot,
    annotation: str = CREATED_BY_ANNOTATION,
) -> Resolution:
    """Turn ``snapshot`` into a keyed candidate record.

    Never raises for bad input: unusable snapshots come back as ``SKIPPED``
    or ``ERROR`` resolutions so one bad job cannot abort a refresh.
    """
    if not is_aggregatable(snapshot):
        logger.debug(
            "Skipping job %s/%s that is either not done or unrecognized",
            snapshot.namespace,
            snapshot.name,
        )
        return Resolution.skipped("not annotated or not completed")

    try:
        key = resolve_identity_key(snapshot, annotation)
    except AnnotationDecodeError as exc:
        logger.warning(
            "Skipping job %s/%s with malformed %s annotation: %s",
            snapshot.namespace,
            snapshot.name,
            annotation,
            exc,
        )
        return Resolution.error(str(exc))

    if key is None:
        logger.debug(
            "Skipping job %s/%s without usable %s annotation",
            snapshot.namespace,
            snapshot.name,
            annotation,
        )
        return Resolution.skipped(f"missing {annotation} annotation")

    record = AggregatedRecord(
        display_name=key.split("/", 1)[1],
        namespace=snapshot.namespace,
        status=resolve_status(snapshot),
        start_time=to_unix_seconds(snapshot.start_time),
        completion_time=to_unix_seconds(snapshot.completion_time),
    )
    return Resolution.resolved(key, record)
