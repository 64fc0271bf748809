"""Collector facade coupling snapshot listing, aggregation and rendering."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from kube_job_exporter.errors import SourceUnavailableError
from kube_job_exporter.jobs import AggregationStore
from kube_job_exporter.sources import SnapshotSource

from .models import MetricDescriptor, MetricSample
from .renderer import DESCRIPTORS, render

__all__ = ["JobsCollector"]

logger = logging.getLogger(__name__)


class JobsCollector:
    """Expose ``describe``/``collect`` for the metrics transport.

    With a ``source`` attached every ``collect`` call re-lists jobs and
    refreshes the store before rendering (scrape-synchronous mode). Without
    one the store is assumed to be kept current by a background refresher
    and ``collect`` only renders.
    """

    def __init__(
        self,
        store: AggregationStore,
        source: Optional[SnapshotSource] = None,
        evict_missing: bool = False,
    ) -> None:
        self.store = store
        self.source = source
        self.evict_missing = evict_missing
        self._scrape_lock = threading.Lock()

    @property
    def synchronous(self) -> bool:
        return self.source is not None

    def describe(self) -> List[MetricDescriptor]:
        """Return the static descriptors of every exported gauge."""
        return list(DESCRIPTORS)

    def collect(self) -> List[MetricSample]:
        """Return the current samples, listing first in synchronous mode."""
        if self.source is None:
            return render(self.store)

        with self._scrape_lock:
            try:
                snapshots = self.source.list()
            except SourceUnavailableError as exc:
                logger.error("listing jobs failed: %s", exc)
                return []
            except Exception as exc:  # noqa: BLE001 - log and continue
                logger.error("listing jobs failed unexpectedly: %s", exc, exc_info=True)
                return []

            self.store.refresh(snapshots, evict_missing=self.evict_missing)
            return render(self.store)
