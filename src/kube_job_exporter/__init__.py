"""Kubernetes Job status exporter for Prometheus."""

__version__ = "0.1.0"

__all__ = ["__version__"]
