"""Wiring of source, store, collector and transport into one process."""

from __future__ import annotations

import logging
import threading
from typing import Optional

import prometheus_client

from kube_job_exporter.config import ExporterConfig, RefreshMode
from kube_job_exporter.exporters import MetricsServer, PrometheusJobsCollector
from kube_job_exporter.jobs import AggregationStore
from kube_job_exporter.metrics import JobsCollector
from kube_job_exporter.refresher import BackgroundRefresher
from kube_job_exporter.sources import KubectlJobSource, SnapshotSource

__all__ = ["ExporterService", "build_source"]

logger = logging.getLogger(__name__)


def build_source(config: ExporterConfig) -> SnapshotSource:
    """Return the kubectl-backed source described by ``config``."""
    return KubectlJobSource(
        kubectl_path=config.kubectl_path,
        namespace=config.namespace,
        context=config.context,
        kubeconfig=config.kubeconfig,
        timeout=config.list_timeout,
    )


class ExporterService:
    """Own the exporter components and their start/stop lifecycle."""

    def __init__(
        self,
        config: ExporterConfig,
        source: Optional[SnapshotSource] = None,
        registry: Optional[prometheus_client.CollectorRegistry] = None,
    ) -> None:
        self.config = config
        self.source = source if source is not None else build_source(config)
        self.store = AggregationStore(annotation=config.created_by_annotation)
        self.registry = registry if registry is not None else prometheus_client.CollectorRegistry()

        self.refresher: Optional[BackgroundRefresher] = None
        if config.mode is RefreshMode.BACKGROUND:
            self.collector = JobsCollector(self.store)
            self.refresher = BackgroundRefresher(
                self.source,
                self.store,
                interval=config.resync_interval,
                evict_missing=config.evict_missing,
            )
        else:
            self.collector = JobsCollector(self.store, source=self.source, evict_missing=config.evict_missing)

        self.registry.register(PrometheusJobsCollector(self.collector))
        self.server = MetricsServer(
            self.registry,
            host=config.host,
            port=config.port,
            endpoint=config.endpoint,
        )
        self._stopped = threading.Event()

    def start(self) -> None:
        """Start the refresher (background mode) and the HTTP endpoint."""
        self._stopped.clear()
        if self.refresher is not None:
            self.refresher.start()
        self.server.start()
        logger.info("Exporter started in %s mode", self.config.mode.value)

    def stop(self) -> None:
        """Stop the refresher and the HTTP endpoint."""
        if self.refresher is not None:
            self.refresher.stop()
        self.server.close()
        self._stopped.set()
        logger.info("Exporter stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until :meth:`stop` is called or ``timeout`` elapses."""
        return self._stopped.wait(timeout)
