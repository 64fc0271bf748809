"""Metrics transports."""

from .prometheus import MetricsServer, PrometheusJobsCollector, ThreadedWSGIServer

__all__ = ["MetricsServer", "PrometheusJobsCollector", "ThreadedWSGIServer"]
