"""Tests covering the Prometheus collector adapter and HTTP endpoint handling."""

from __future__ import annotations

from urllib.error import HTTPError
from urllib.request import urlopen

import prometheus_client
import pytest

from kube_job_exporter.exporters import MetricsServer, PrometheusJobsCollector
from kube_job_exporter.jobs import AggregationStore
from kube_job_exporter.metrics import JobsCollector
from kube_job_exporter.sources import StaticSnapshotSource
from tests.factories.jobs import make_job


def _read_metrics(url: str) -> str:
    """Fetch and decode the metrics payload from the given URL."""

    with urlopen(url) as response:  # nosec: B310 - local test harness
        return response.read().decode("utf-8")


def _registry(store: AggregationStore, **kwargs) -> prometheus_client.CollectorRegistry:
    registry = prometheus_client.CollectorRegistry()
    registry.register(PrometheusJobsCollector(JobsCollector(store, **kwargs)))
    return registry


def test_registry_exposes_job_gauges(store: AggregationStore) -> None:
    store.refresh([make_job(owner="job1", namespace="a", failed=1, start=10, completion=100)])
    registry = _registry(store)

    labels = {"namespace": "a", "name": "job1"}
    assert registry.get_sample_value("kube_job_status", labels) == 1.0
    assert registry.get_sample_value("kube_job_start_time", labels) == 10.0
    assert registry.get_sample_value("kube_job_completion_time", labels) == 100.0


def test_registration_does_not_list_jobs(store: AggregationStore) -> None:
    calls: list[int] = []

    class CountingSource(StaticSnapshotSource):
        def list(self):
            calls.append(1)
            return super().list()

    _registry(store, source=CountingSource([make_job()]))

    assert calls == []


def test_text_exposition_declares_gauges(store: AggregationStore) -> None:
    store.refresh([make_job()])

    payload = prometheus_client.generate_latest(_registry(store)).decode("utf-8")

    assert "# TYPE kube_job_status gauge" in payload
    assert 'kube_job_completion_time{namespace="a",name="job1"} 100.0' in payload


def test_metrics_server_serves_default_endpoint(store: AggregationStore) -> None:
    """Ensure the server publishes metrics on the default ``/metrics`` route."""

    store.refresh([make_job(owner="nightly", namespace="ops")])
    server = MetricsServer(_registry(store), port=0, host="127.0.0.1")
    server.start()
    try:
        payload = _read_metrics(f"http://127.0.0.1:{server.port}/metrics")
        assert 'kube_job_status{namespace="ops",name="nightly"} 0.0' in payload
    finally:
        server.close()


def test_metrics_server_custom_endpoint(store: AggregationStore) -> None:
    """Validate that a custom endpoint returns metrics and the default path 404s."""

    server = MetricsServer(_registry(store), port=0, host="127.0.0.1", endpoint="custom-metrics")
    server.start()
    try:
        assert server.endpoint == "/custom-metrics"
        payload = _read_metrics(f"http://127.0.0.1:{server.port}/custom-metrics")
        assert "kube_job_status" in payload

        with pytest.raises(HTTPError):
            _read_metrics(f"http://127.0.0.1:{server.port}/metrics")
    finally:
        server.close()


def test_synchronous_scrape_lists_jobs(store: AggregationStore) -> None:
    source = StaticSnapshotSource()
    server = MetricsServer(_registry(store, source=source), port=0, host="127.0.0.1")
    server.start()
    try:
        assert "name=" not in _read_metrics(f"http://127.0.0.1:{server.port}/metrics")

        source.set([make_job(owner="fresh")])
        assert 'name="fresh"' in _read_metrics(f"http://127.0.0.1:{server.port}/metrics")
    finally:
        server.close()
