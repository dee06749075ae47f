"""Output channels for generated records and status notifications."""
from fleetgen.publishers.base import BusPublisher, NullBusPublisher
from fleetgen.publishers.fanout import EventPublisher
from fleetgen.publishers.kafka_bus import KafkaBusPublisher
from fleetgen.publishers.mqtt_bus import MqttBusPublisher
from fleetgen.publishers.view import Subscription, ViewEvent, ViewUpdateChannel

__all__ = [
    "BusPublisher",
    "NullBusPublisher",
    "EventPublisher",
    "KafkaBusPublisher",
    "MqttBusPublisher",
    "Subscription",
    "ViewEvent",
    "ViewUpdateChannel",
]
