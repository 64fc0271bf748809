"""Domain models for observed jobs and their aggregated state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "AggregatedRecord",
    "CreatedByAnnotation",
    "MergeOutcome",
    "ObjectReference",
    "Resolution",
    "ResolutionOutcome",
    "StatusCode",
    "WorkloadSnapshot",
    "to_unix_seconds",
]


class StatusCode(IntEnum):
    """Coarse job status. The integer value is the exported gauge value."""

    SUCCEEDED = 0
    FAILED = 1
    RUNNING = 2


@dataclass(frozen=True)
class WorkloadSnapshot:
    """Immutable view of one Job object at observation time."""

    namespace: str
    name: str
    annotations: Mapping[str, str] = field(default_factory=dict)
    active: int = 0
    failed: int = 0
    start_time: Optional[datetime] = None
    completion_time: Optional[datetime] = None


@dataclass
class AggregatedRecord:
    """Durable per-identity state held by the aggregation store."""

    display_name: str
    namespace: str
    status: StatusCode
    start_time: int
    completion_time: int


class ObjectReference(BaseModel):
    """Reference to the controller that created a job."""

    kind: str = ""
    namespace: str = ""
    name: str = ""
    uid: str = ""
    api_version: str = Field(default="", alias="apiVersion")
    resource_version: str = Field(default="", alias="resourceVersion")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CreatedByAnnotation(BaseModel):
    """Serialized reference stored in the ``kubernetes.io/created-by`` annotation."""

    kind: str = ""
    api_version: str = Field(default="", alias="apiVersion")
    reference: ObjectReference = Field(default_factory=ObjectReference)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ResolutionOutcome(Enum):
    """Result tag for resolving one snapshot."""

    RESOLVED = "resolved"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class Resolution:
    """Tagged result of turning a snapshot into a candidate record."""

    outcome: ResolutionOutcome
    key: Optional[str] = None
    record: Optional[AggregatedRecord] = None
    reason: str = ""

    @classmethod
    def resolved(cls, key: str, record: AggregatedRecord) -> "Resolution":
        return cls(ResolutionOutcome.RESOLVED, key=key, record=record)

    @classmethod
    def skipped(cls, reason: str) -> "Resolution":
        return cls(ResolutionOutcome.SKIPPED, reason=reason)

    @classmethod
    def error(cls, reason: str) -> "Resolution":
        return cls(ResolutionOutcome.ERROR, reason=reason)


class MergeOutcome(Enum):
    """What a merge did to the store."""

    INSERTED = "inserted"
    UPDATED = "updated"
    STALE = "stale"


def to_unix_seconds(value: Optional[datetime]) -> int:
    """Return ``value`` as whole unix seconds, ``0`` when it is unset.

    Naive datetimes are interpreted as UTC, matching the API server's
    RFC 3339 timestamps.
    """
    if value is None:
        return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())
