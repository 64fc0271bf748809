"""Background resync loop keeping the aggregation store current."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from kube_job_exporter.errors import SourceUnavailableError
from kube_job_exporter.jobs import AggregationStore, RefreshReport
from kube_job_exporter.sources import SnapshotSource

__all__ = ["BackgroundRefresher"]

logger = logging.getLogger(__name__)


class BackgroundRefresher:
    """Periodically list jobs and merge them into a store on a daemon thread."""

    def __init__(
        self,
        source: SnapshotSource,
        store: AggregationStore,
        interval: float = 30.0,
        evict_missing: bool = False,
        name: str = "job-refresher",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.source = source
        self.store = store
        self.interval = interval
        self.evict_missing = evict_missing
        self.name = name
        self.last_success_time = 0.0
        self.last_report: Optional[RefreshReport] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> Optional[RefreshReport]:
        """List and refresh once. Returns ``None`` when listing failed."""
        try:
            snapshots = self.source.list()
        except SourceUnavailableError as exc:
            logger.error("listing jobs failed: %s", exc)
            return None
        except Exception as exc:  # noqa: BLE001 - log and continue
            logger.error("listing jobs failed unexpectedly: %s", exc, exc_info=True)
            return None

        report = self.store.refresh(snapshots, evict_missing=self.evict_missing)
        self.last_report = report
        self.last_success_time = time.time()
        return report

    def _run(self) -> None:
        logger.info("Started %s with a %ss resync interval", self.name, self.interval)
        while not self._stop_event.is_set():
            self.run_once()
            self._stop_event.wait(self.interval)
        logger.info("Stopped %s", self.name)

    def start(self) -> None:
        """Start the refresh thread. Calling it twice is a no-op."""
        if self.running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the loop to stop and wait up to ``timeout`` seconds."""
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None

    def __enter__(self) -> "BackgroundRefresher":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
