"""Prometheus metrics for the generator."""
from fleetgen.metrics.collector import DummyMetricsCollector, MetricsCollector, create_metrics_collector

__all__ = ["DummyMetricsCollector", "MetricsCollector", "create_metrics_collector"]
