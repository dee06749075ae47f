"""Configuration management for the fleet generator."""
from fleetgen.config.loader import (
    DEFAULT_TOPIC,
    AppConfig,
    BusConfig,
    GeneratorSettings,
    KafkaConfig,
    MqttConfig,
    ViewConfig,
)

__all__ = [
    "DEFAULT_TOPIC",
    "AppConfig",
    "BusConfig",
    "GeneratorSettings",
    "KafkaConfig",
    "MqttConfig",
    "ViewConfig",
]
