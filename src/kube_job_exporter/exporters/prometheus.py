"""Prometheus transport: registry adapter and HTTP scrape endpoint."""

from __future__ import annotations

import logging
import threading
from socketserver import ThreadingMixIn
from typing import Any, Callable, Dict, Iterator, Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

import prometheus_client
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from kube_job_exporter.errors import ExportError
from kube_job_exporter.metrics import JobsCollector

__all__ = ["MetricsServer", "PrometheusJobsCollector", "ThreadedWSGIServer"]

logger = logging.getLogger(__name__)


class ThreadedWSGIServer(ThreadingMixIn, WSGIServer):
    """WSGI server handling each scrape on its own thread."""

    daemon_threads = True
    allow_reuse_address = True


class _QuietRequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002 - signature fixed by BaseHTTPRequestHandler
        logger.debug("%s - %s", self.address_string(), format % args)


class PrometheusJobsCollector(Collector):
    """Adapt a :class:`JobsCollector` to ``prometheus_client``'s collector protocol."""

    def __init__(self, jobs_collector: JobsCollector) -> None:
        self.jobs_collector = jobs_collector

    def _families(self) -> Dict[str, GaugeMetricFamily]:
        return {
            descriptor.name: GaugeMetricFamily(
                descriptor.name,
                descriptor.documentation,
                labels=list(descriptor.label_names),
            )
            for descriptor in self.jobs_collector.describe()
        }

    def describe(self) -> Iterator[GaugeMetricFamily]:
        # Registration only needs names; collecting here would list jobs.
        yield from self._families().values()

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families = self._families()
        label_names = {d.name: d.label_names for d in self.jobs_collector.describe()}
        for sample in self.jobs_collector.collect():
            values = [sample.labels[label] for label in label_names[sample.name]]
            families[sample.name].add_metric(values, sample.value)
        yield from families.values()


class MetricsServer:
    """Serve a Prometheus registry over HTTP on a configurable endpoint."""

    def __init__(
        self,
        registry: prometheus_client.CollectorRegistry,
        host: str = "0.0.0.0",
        port: int = 9102,
        endpoint: str = "/metrics",
        name: str = "kube-job-exporter",
    ) -> None:
        self.registry = registry
        self.host = host
        self.port = port
        self.endpoint = self._normalise_endpoint(endpoint)
        self.name = name
        self._server: Optional[ThreadedWSGIServer] = None
        self._server_thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}{self.endpoint}"

    def start(self) -> None:
        """Bind the socket and serve scrapes on a daemon thread."""
        if self._server is not None:
            return

        try:
            application = self._wrap_app_with_endpoint(prometheus_client.make_wsgi_app(self.registry), self.endpoint)
            self._server = make_server(
                self.host,
                self.port,
                application,
                server_class=ThreadedWSGIServer,
                handler_class=_QuietRequestHandler,
            )
        except OSError as exc:
            logger.error("Failed to start metrics server on %s:%s: %s", self.host, self.port, exc)
            raise ExportError(f"Failed to start metrics server on {self.host}:{self.port}: {exc}") from exc

        self.port = self._server.server_port
        self._server_thread = threading.Thread(
            target=self._server.serve_forever,
            name=f"{self.name}-http",
            daemon=True,
        )
        self._server_thread.start()
        logger.info("Serving metrics on %s:%s at %s", self.host, self.port, self.endpoint)

    def close(self) -> None:
        """Stop serving and release the socket."""
        try:
            if self._server is not None:
                self._server.shutdown()
                self._server.server_close()
                if self._server_thread is not None and self._server_thread.is_alive():
                    self._server_thread.join(timeout=1.0)
        finally:
            self._server = None
            self._server_thread = None

        logger.info("Closed metrics server '%s'", self.name)

    @staticmethod
    def _normalise_endpoint(endpoint: str) -> str:
        """Return a scrape endpoint that always begins with ``/``."""
        cleaned = (endpoint or "").strip() or "/metrics"
        if not cleaned.startswith("/"):
            cleaned = f"/{cleaned}"
        return cleaned

    @staticmethod
    def _wrap_app_with_endpoint(
        application: Callable[[dict[str, Any], Callable[..., Any]], Any],
        endpoint: str,
    ) -> Callable[[dict[str, Any], Callable[..., Any]], Any]:
        """Route only ``endpoint`` to the Prometheus WSGI app."""
        if endpoint == "/":
            return application

        def _wrapped(environ: dict[str, Any], start_response: Callable[..., Any]) -> Any:
            if environ.get("PATH_INFO", "") == endpoint:
                environ = dict(environ)
                environ["PATH_INFO"] = "/"
                return application(environ, start_response)

            start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
            return [b"Not Found"]

        return _wrapped
