"""Base interface for output channel publishers."""
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

# (channel, error, payload) -> None
ErrorSink = Callable[[str, BaseException, dict[str, Any] | None], None]

BUS_CHANNEL = "bus"
VIEW_CHANNEL = "view"

# Event name carried on the bus topic
VEHICLE_GENERATED_EVENT = "VehicleGenerated"


class BusPublisher(ABC):
    """Abstract base class for bus-topic publishers.

    ``publish`` hands a message to the transport without waiting for broker
    acknowledgement. Failures detected later (e.g. in a delivery report) are
    passed to the ``on_error`` callback set by the owner.
    """

    channel = BUS_CHANNEL

    def __init__(self, topic: str):
        """Initialize the publisher.

        Args:
            topic: Destination topic as configured
        """
        self.topic = topic
        self.on_error: ErrorSink | None = None

    @abstractmethod
    def publish(self, key: str | None, value: dict[str, Any]) -> None:
        """Publish a message to the bus topic.

        Args:
            key: Message key (the record identifier)
            value: Message value (the record envelope)

        Raises:
            PublishError: If the transport rejects the message synchronously
        """
        pass

    @abstractmethod
    def flush(self, timeout: float = 10.0) -> int:
        """Flush any pending messages.

        Args:
            timeout: Maximum time to wait for messages to be delivered

        Returns:
            Number of messages still in queue
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the publisher and clean up resources."""
        pass

    def health_check(self) -> bool:
        """Report whether the transport looks usable."""
        return True

    def _report_error(self, error: BaseException, value: dict[str, Any] | None) -> None:
        if self.on_error is not None:
            self.on_error(self.channel, error, value)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class NullBusPublisher(BusPublisher):
    """Bus publisher that discards every message (bus transport ``none``)."""

    def publish(self, key: str | None, value: dict[str, Any]) -> None:
        pass

    def flush(self, timeout: float = 10.0) -> int:
        return 0

    def close(self) -> None:
        pass
