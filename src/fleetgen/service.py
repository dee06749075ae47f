"""Composition root: wires state, factory, channels and controller together."""
import logging
from typing import Any

from fleetgen.config.loader import AppConfig
from fleetgen.controller import GenerationController, GenerationState
from fleetgen.generators.vehicle_gen import VehicleRecordFactory
from fleetgen.metrics.collector import MetricsCollector, create_metrics_collector
from fleetgen.publishers.base import BusPublisher, NullBusPublisher
from fleetgen.publishers.fanout import EventPublisher
from fleetgen.publishers.kafka_bus import KafkaBusPublisher
from fleetgen.publishers.mqtt_bus import MqttBusPublisher
from fleetgen.publishers.view import ViewUpdateChannel

logger = logging.getLogger(__name__)


def create_bus_publisher(config: AppConfig) -> BusPublisher:
    """Build the bus-topic publisher selected by ``bus.transport``."""
    transport = config.bus.transport
    if transport == "kafka":
        return KafkaBusPublisher(
            bootstrap_servers=config.kafka.bootstrap_servers,
            topic=config.bus.topic,
            config=config.to_confluent_config(),
        )
    if transport == "mqtt":
        return MqttBusPublisher(
            host=config.mqtt.host,
            port=config.mqtt.port,
            topic=config.bus.topic,
            qos=config.mqtt.qos,
            client_id=config.mqtt.client_id,
            keepalive=config.mqtt.keepalive,
        )
    return NullBusPublisher(config.bus.topic)


class GeneratorService:
    """One generator instance with its own state and channels.

    State lives as long as the service: it is created here and discarded with
    the service, never shared between instances.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        bus: BusPublisher | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """Initialize the service.

        Args:
            config: Application configuration (environment defaults when omitted)
            bus: Bus publisher override (built from config when omitted)
            metrics: Metrics collector (disabled when omitted)
        """
        self.config = config or AppConfig.load()
        self.metrics = metrics or create_metrics_collector(enabled=False)

        self.state = GenerationState()
        self.view = ViewUpdateChannel(
            buffer_size=self.config.view.buffer_size,
            subscriber_queue_size=self.config.view.subscriber_queue_size,
        )
        self.bus = bus or create_bus_publisher(self.config)
        self.publisher = EventPublisher(self.bus, self.view, error_sink=self._on_publish_error)
        self.factory = VehicleRecordFactory(
            locale=self.config.generator.locale,
            seed=self.config.generator.seed,
        )
        self.controller = GenerationController(
            state=self.state,
            factory=self.factory,
            publisher=self.publisher,
            period_seconds=self.config.generator.period_seconds,
            stop_timeout=self.config.generator.stop_timeout_seconds,
            metrics=self.metrics,
        )
        self._closed = False

    def _on_publish_error(self, channel: str, error: BaseException, payload: dict[str, Any] | None) -> None:
        self.metrics.record_publish_failure(channel)

    def start(self):
        return self.controller.start()

    def stop(self):
        return self.controller.stop()

    def status(self):
        return self.controller.status()

    def close(self) -> None:
        """Stop generation and release the channels."""
        if self._closed:
            return
        self._closed = True

        if self.controller.is_running:
            self.controller.stop()
        remaining = self.publisher.flush(timeout=10.0)
        if remaining:
            logger.warning(f"{remaining} bus messages not delivered at shutdown")
        self.publisher.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
