"""Metrics collection and reporting for fleetgen."""
import time
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)


@dataclass
class MetricsCollector:
    """Collects and exposes generator metrics for monitoring."""

    registry: CollectorRegistry = field(default_factory=CollectorRegistry, init=False)

    records_generated: Counter = field(init=False)
    publish_failures: Counter = field(init=False)
    tick_failures: Counter = field(init=False)
    tick_duration: Histogram = field(init=False)
    generator_running: Gauge = field(init=False)

    _start_time: float = field(default_factory=time.time, init=False)
    _record_count: int = field(default=0, init=False)
    _failure_count: int = field(default=0, init=False)

    def __post_init__(self):
        """Initialize Prometheus metrics."""
        self.records_generated = Counter(
            'fleetgen_records_generated_total',
            'Total number of vehicle records generated',
            registry=self.registry
        )

        self.publish_failures = Counter(
            'fleetgen_publish_failures_total',
            'Total number of failed channel publishes',
            ['channel'],
            registry=self.registry
        )

        self.tick_failures = Counter(
            'fleetgen_tick_failures_total',
            'Total number of generation ticks that raised',
            registry=self.registry
        )

        self.tick_duration = Histogram(
            'fleetgen_tick_duration_seconds',
            'Time spent producing and publishing one record',
            buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1),
            registry=self.registry
        )

        self.generator_running = Gauge(
            'fleetgen_generator_running',
            'Whether the generation loop is running (1) or stopped (0)',
            registry=self.registry
        )

    def start_metrics_server(self, port: int = 9090):
        """Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on
        """
        start_http_server(port, registry=self.registry)

    def record_generated(self, duration: float):
        """Record one successful tick.

        Args:
            duration: Tick duration in seconds
        """
        self.records_generated.inc()
        self.tick_duration.observe(duration)
        self._record_count += 1

    def record_publish_failure(self, channel: str):
        self.publish_failures.labels(channel=channel).inc()
        self._failure_count += 1

    def record_tick_failure(self):
        self.tick_failures.inc()

    def set_running(self, running: bool):
        self.generator_running.set(1 if running else 0)

    def get_stats(self) -> dict[str, Any]:
        """Get current statistics.

        Returns:
            Dictionary with current stats
        """
        elapsed = time.time() - self._start_time
        rate = self._record_count / elapsed if elapsed > 0 else 0

        return {
            "records_generated": self._record_count,
            "publish_failures": self._failure_count,
            "duration_seconds": elapsed,
            "rate_per_second": rate,
        }


class DummyMetricsCollector(MetricsCollector):
    """Metrics collector that does nothing (for when metrics are disabled)."""

    def __post_init__(self):
        """Skip Prometheus initialization."""
        pass

    def start_metrics_server(self, port: int = 9090):
        pass

    def record_generated(self, *args, **kwargs):
        pass

    def record_publish_failure(self, *args, **kwargs):
        pass

    def record_tick_failure(self, *args, **kwargs):
        pass

    def set_running(self, *args, **kwargs):
        pass


def create_metrics_collector(enabled: bool = True) -> MetricsCollector:
    """Create appropriate metrics collector based on configuration.

    Args:
        enabled: Whether metrics collection is enabled

    Returns:
        MetricsCollector instance
    """
    if enabled:
        return MetricsCollector()
    return DummyMetricsCollector()
