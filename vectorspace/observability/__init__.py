"""Observability layer - logging and metrics."""

from vectorspace.observability.logging import setup_logging
from vectorspace.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
