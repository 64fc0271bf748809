"""Parse Kubernetes ``batch/v1`` Job manifests into snapshots."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from kube_job_exporter.jobs import WorkloadSnapshot

__all__ = ["JobList", "JobManifest", "snapshot_from_manifest", "snapshots_from_list"]


class _JobMetadata(BaseModel):
    name: str = ""
    namespace: str = "default"
    annotations: Optional[Dict[str, str]] = None

    model_config = ConfigDict(extra="ignore")


class _JobStatus(BaseModel):
    active: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    completion_time: Optional[datetime] = Field(default=None, alias="completionTime")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class JobManifest(BaseModel):
    """Subset of a Job object the exporter reads."""

    metadata: _JobMetadata = Field(default_factory=_JobMetadata)
    status: _JobStatus = Field(default_factory=_JobStatus)

    model_config = ConfigDict(extra="ignore")

    def to_snapshot(self) -> WorkloadSnapshot:
        return WorkloadSnapshot(
            namespace=self.metadata.namespace,
            name=self.metadata.name,
            annotations=dict(self.metadata.annotations or {}),
            active=self.status.active,
            failed=self.status.failed,
            start_time=self.status.start_time,
            completion_time=self.status.completion_time,
        )


class JobList(BaseModel):
    """A ``JobList`` as returned by ``kubectl get jobs -o json``."""

    items: List[JobManifest] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


def snapshot_from_manifest(manifest: Mapping[str, Any]) -> WorkloadSnapshot:
    """Build a snapshot from one Job manifest mapping."""
    return JobManifest.model_validate(manifest).to_snapshot()


def snapshots_from_list(payload: str) -> List[WorkloadSnapshot]:
    """Build snapshots from a serialized ``JobList``."""
    return [item.to_snapshot() for item in JobList.model_validate_json(payload).items]
