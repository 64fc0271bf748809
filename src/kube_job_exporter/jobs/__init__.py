"""Job snapshot resolution and aggregation."""

from .models import (
    AggregatedRecord,
    CreatedByAnnotation,
    MergeOutcome,
    ObjectReference,
    Resolution,
    ResolutionOutcome,
    StatusCode,
    WorkloadSnapshot,
)
from .resolver import (
    CREATED_BY_ANNOTATION,
    decode_created_by,
    is_aggregatable,
    resolve_identity_key,
    resolve_snapshot,
    resolve_status,
)
from .store import AggregationStore, RefreshReport

__all__ = [
    "AggregatedRecord",
    "AggregationStore",
    "CREATED_BY_ANNOTATION",
    "CreatedByAnnotation",
    "MergeOutcome",
    "ObjectReference",
    "RefreshReport",
    "Resolution",
    "ResolutionOutcome",
    "StatusCode",
    "WorkloadSnapshot",
    "decode_created_by",
    "is_aggregatable",
    "resolve_identity_key",
    "resolve_snapshot",
    "resolve_status",
]
