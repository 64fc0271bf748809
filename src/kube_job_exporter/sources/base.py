"""Snapshot source interface and simple in-memory implementations."""

from __future__ import annotations

import abc
import logging
from typing import Callable, Iterable, List

from kube_job_exporter.jobs import WorkloadSnapshot

__all__ = ["CallableSnapshotSource", "SnapshotSource", "StaticSnapshotSource"]

logger = logging.getLogger(__name__)


class SnapshotSource(abc.ABC):
    """Supplies the current set of observed jobs."""

    name: str = "source"

    @abc.abstractmethod
    def list(self) -> List[WorkloadSnapshot]:
        """Return every currently known job.

        Raises:
            SourceUnavailableError: If the jobs cannot be listed.
        """


class StaticSnapshotSource(SnapshotSource):
    """Source backed by an in-memory list that callers can replace."""

    name = "static"

    def __init__(self, snapshots: Iterable[WorkloadSnapshot] = ()) -> None:
        self._snapshots = list(snapshots)

    def set(self, snapshots: Iterable[WorkloadSnapshot]) -> None:
        self._snapshots = list(snapshots)

    def list(self) -> List[WorkloadSnapshot]:
        return list(self._snapshots)


class CallableSnapshotSource(SnapshotSource):
    """Adapt a plain ``() -> list`` function into a snapshot source."""

    def __init__(self, lister: Callable[[], Iterable[WorkloadSnapshot]], name: str = "callable") -> None:
        self._lister = lister
        self.name = name

    def list(self) -> List[WorkloadSnapshot]:
        return list(self._lister())
