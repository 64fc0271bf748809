"""Sources of observed job snapshots."""

from .base import CallableSnapshotSource, SnapshotSource, StaticSnapshotSource
from .kubectl import KubectlJobSource
from .manifest import JobList, JobManifest, snapshot_from_manifest, snapshots_from_list

__all__ = [
    "CallableSnapshotSource",
    "JobList",
    "JobManifest",
    "KubectlJobSource",
    "SnapshotSource",
    "StaticSnapshotSource",
    "snapshot_from_manifest",
    "snapshots_from_list",
]
