"""Aggregation store holding the latest state per logical job."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List

from kube_job_exporter.errors import AnnotationDecodeError

from .models import AggregatedRecord, MergeOutcome, ResolutionOutcome, WorkloadSnapshot
from .resolver import CREATED_BY_ANNOTATION, resolve_identity_key, resolve_snapshot

__all__ = ["AggregationStore", "RefreshReport"]

logger = logging.getLogger(__name__)


@dataclass
class RefreshReport:
    """Per-refresh counters describing what happened to each snapshot."""

    inserted: int = 0
    updated: int = 0
    stale: int = 0
    skipped: int = 0
    errors: int = 0
    evicted: int = 0
    error_reasons: List[str] = field(default_factory=list)

    @property
    def merged(self) -> int:
        """Number of snapshots that changed the store."""
        return self.inserted + self.updated

    def record(self, outcome: MergeOutcome) -> None:
        if outcome is MergeOutcome.INSERTED:
            self.inserted += 1
        elif outcome is MergeOutcome.UPDATED:
            self.updated += 1
        else:
            self.stale += 1


class AggregationStore:
    """Monotonic accumulator mapping identity keys to aggregated records.

    A record for a key is only replaced by an observation whose completion
    time is equal to or later than the stored one, so replaying an older or
    duplicated snapshot stream never regresses visible state.

    Every mutation and every read copy happens under one re-entrant lock so
    the store can be refreshed from a background thread while scrape threads
    render it.
    """

    def __init__(self, annotation: str = CREATED_BY_ANNOTATION) -> None:
        self.annotation = annotation
        self._records: Dict[str, AggregatedRecord] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records

    def get(self, key: str) -> AggregatedRecord | None:
        """Return a copy of the record stored under ``key``."""
        with self._lock:
            record = self._records.get(key)
            return replace(record) if record is not None else None

    def records(self) -> Dict[str, AggregatedRecord]:
        """Return a point-in-time copy of every stored record."""
        with self._lock:
            return {key: replace(record) for key, record in self._records.items()}

    def merge(self, key: str, candidate: AggregatedRecord) -> MergeOutcome:
        """Merge ``candidate`` into the record stored under ``key``."""
        with self._lock:
            existing = self._records.get(key)
            if existing is None:
                self._records[key] = replace(candidate)
                logger.info("Tracking job %s in namespace %s", candidate.display_name, candidate.namespace)
                return MergeOutcome.INSERTED

            if existing.completion_time > candidate.completion_time:
                return MergeOutcome.STALE

            existing.display_name = candidate.display_name
            existing.namespace = candidate.namespace
            existing.status = candidate.status
            existing.start_time = candidate.start_time
            existing.completion_time = candidate.completion_time
            return MergeOutcome.UPDATED

    def refresh(self, snapshots: Iterable[WorkloadSnapshot], evict_missing: bool = False) -> RefreshReport:
        """Resolve and merge every snapshot, isolating per-item failures.

        Args:
            snapshots: Jobs returned by the latest list.
            evict_missing: Drop records whose key no longer appears among the
                resolvable snapshots of this list.
        """
        report = RefreshReport()
        seen: set[str] = set()

        with self._lock:
            for snapshot in snapshots:
                resolution = resolve_snapshot(snapshot, self.annotation)
                if resolution.outcome is ResolutionOutcome.SKIPPED:
                    report.skipped += 1
                    if evict_missing:
                        # A still-running retry keeps its logical job listed.
                        key = self._presence_key(snapshot)
                        if key is not None:
                            seen.add(key)
                    continue
                if resolution.outcome is ResolutionOutcome.ERROR:
                    report.errors += 1
                    report.error_reasons.append(resolution.reason)
                    continue

                seen.add(resolution.key)
                report.record(self.merge(resolution.key, resolution.record))

            if evict_missing:
                report.evicted = self.evict(seen)

        logger.debug(
            "Refreshed job store: inserted=%s updated=%s stale=%s skipped=%s errors=%s evicted=%s",
            report.inserted,
            report.updated,
            report.stale,
            report.skipped,
            report.errors,
            report.evicted,
        )
        return report

    def _presence_key(self, snapshot: WorkloadSnapshot) -> str | None:
        try:
            return resolve_identity_key(snapshot, self.annotation)
        except AnnotationDecodeError:
            return None

    def evict(self, keep_keys: Iterable[str]) -> int:
        """Remove every record whose key is not in ``keep_keys``."""
        keep = set(keep_keys)
        with self._lock:
            missing = [key for key in self._records if key not in keep]
            for key in missing:
                del self._records[key]

        if missing:
            logger.info("Evicted %s job record(s) no longer listed", len(missing))
        return len(missing)

    def clear(self) -> None:
        """Drop all records."""
        with self._lock:
            self._records.clear()
