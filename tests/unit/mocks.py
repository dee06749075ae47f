"""Test doubles for the bus transports and channel publishers."""
import threading
from typing import Any
from unittest.mock import MagicMock

from fleetgen.exceptions import PublishError
from fleetgen.publishers.base import BusPublisher


class MockConfluentProducer:
    """Mock Confluent Kafka Producer for testing."""

    def __init__(self, config: dict[str, Any]):
        self.config = config
        self.messages: list[dict[str, Any]] = []
        self.delivery_error = None
        self.produce_error: Exception | None = None
        self.flushed = 0
        self.flush_timeouts: list[float] = []
        self.pending = 0

    def produce(self, topic: str, key: Any, value: Any, headers: Any = None, on_delivery: Any | None = None):
        """Mock produce method."""
        if self.produce_error is not None:
            raise self.produce_error

        message = {
            "topic": topic,
            "key": key,
            "value": value,
            "headers": headers,
            "partition": 0,
            "offset": len(self.messages),
        }
        self.messages.append(message)

        if on_delivery:
            mock_msg = MagicMock()
            mock_msg.topic.return_value = topic
            mock_msg.partition.return_value = 0
            mock_msg.offset.return_value = len(self.messages) - 1
            on_delivery(self.delivery_error, mock_msg)

    def poll(self, timeout: float = 0):
        return 0

    def flush(self, timeout: float = 10.0):
        self.flushed += 1
        self.flush_timeouts.append(timeout)
        return self.pending

    def list_topics(self, timeout: float = 5):
        return MagicMock(topics={})

    def __len__(self):
        return 0


class RecordingBusPublisher(BusPublisher):
    """Bus publisher that keeps every message in memory."""

    def __init__(self, topic: str = "fleet/vehicles/generated"):
        super().__init__(topic)
        self.messages: list[tuple[str | None, dict[str, Any]]] = []
        self.closed = False
        self._lock = threading.Lock()

    def publish(self, key: str | None, value: dict[str, Any]) -> None:
        with self._lock:
            self.messages.append((key, value))

    def flush(self, timeout: float = 10.0) -> int:
        return 0

    def close(self) -> None:
        self.closed = True

    @property
    def envelopes(self) -> list[dict[str, Any]]:
        with self._lock:
            return [value for _, value in self.messages]


class FailingBusPublisher(RecordingBusPublisher):
    """Bus publisher whose every publish raises."""

    def __init__(self, topic: str = "fleet/vehicles/generated"):
        super().__init__(topic)
        self.attempts = 0

    def publish(self, key: str | None, value: dict[str, Any]) -> None:
        with self._lock:
            self.attempts += 1
        raise PublishError(self.channel, "broker unreachable")

    def health_check(self) -> bool:
        return False


class BlockingBusPublisher(RecordingBusPublisher):
    """Bus publisher whose publish blocks until ``release`` is set."""

    def __init__(self, topic: str = "fleet/vehicles/generated"):
        super().__init__(topic)
        self.entered = threading.Event()
        self.release = threading.Event()

    def publish(self, key: str | None, value: dict[str, Any]) -> None:
        self.entered.set()
        self.release.wait(timeout=5)
        super().publish(key, value)
