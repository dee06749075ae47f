"""Kafka bus-topic publisher."""
import json
import logging
from typing import Any

from confluent_kafka import KafkaException
from confluent_kafka import Producer as ConfluentProducer
from confluent_kafka.serialization import StringSerializer

from fleetgen.exceptions import PublishError
from fleetgen.publishers.base import VEHICLE_GENERATED_EVENT, BusPublisher

logger = logging.getLogger(__name__)


def kafka_topic_name(topic: str) -> str:
    """Map a slash-separated topic to a legal Kafka topic name."""
    return topic.strip("/").replace("/", ".")


class KafkaBusPublisher(BusPublisher):
    """Publishes generated-record envelopes as JSON to a Kafka topic."""

    def __init__(
        self,
        bootstrap_servers: str,
        topic: str,
        config: dict[str, Any] | None = None,
        close_timeout: float = 10.0,
    ):
        """Initialize the Kafka publisher.

        Args:
            bootstrap_servers: Kafka bootstrap servers
            topic: Configured topic, e.g. ``fleet/vehicles/generated``
            config: Additional producer configuration
            close_timeout: Upper bound on the final flush in close()
        """
        super().__init__(topic)
        self.bootstrap_servers = bootstrap_servers
        self.kafka_topic = kafka_topic_name(topic)
        self.config = config or {}
        self.close_timeout = close_timeout

        self._key_serializer = StringSerializer("utf-8")

        producer_config = {"bootstrap.servers": bootstrap_servers}
        if config:
            producer_config.update(config)

        self._producer = ConfluentProducer(producer_config)

    def publish(self, key: str | None, value: dict[str, Any]) -> None:
        """Produce a JSON message; delivery is reported asynchronously.

        Args:
            key: Message key
            value: Message value as dictionary
        """
        if self._producer is None:
            raise PublishError(self.channel, "producer is closed")

        serialized_key = self._key_serializer(key) if key else None
        serialized_value = json.dumps(value).encode("utf-8")

        try:
            self._producer.produce(
                topic=self.kafka_topic,
                key=serialized_key,
                value=serialized_value,
                headers={"event": VEHICLE_GENERATED_EVENT},
                on_delivery=lambda err, msg: self._on_delivery(err, msg, value),
            )
        except (BufferError, KafkaException) as e:
            raise PublishError(self.channel, str(e), original_error=e) from e

        # Serve delivery callbacks
        self._producer.poll(0)

    def _on_delivery(self, err, msg, value: dict[str, Any]) -> None:
        """Delivery report callback.

        Args:
            err: Error if delivery failed
            msg: Message that was delivered
            value: Original message value
        """
        if err is not None:
            self._report_error(PublishError(self.channel, str(err)), value)
        else:
            logger.debug(
                f"Message delivered to {msg.topic()} "
                f"[partition {msg.partition()}] at offset {msg.offset()}"
            )

    def flush(self, timeout: float = 10.0) -> int:
        if self._producer is None:
            return 0
        return self._producer.flush(timeout)

    def close(self) -> None:
        if self._producer is not None:
            remaining = self._producer.flush(self.close_timeout)
            if remaining:
                logger.warning(f"Dropping {remaining} undelivered messages on close")
            # ConfluentProducer has no close method
            self._producer = None

    def health_check(self) -> bool:
        """Check broker connectivity by fetching topic metadata."""
        if self._producer is None:
            return False
        try:
            self._producer.list_topics(timeout=5)
            return True
        except KafkaException as e:
            logger.warning(f"Kafka health check failed: {e}")
            return False

