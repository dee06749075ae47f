"""Configuration loader for the fleet generator."""
import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fleetgen.exceptions import ConfigurationError

DEFAULT_TOPIC = "fleet/vehicles/generated"
TOPIC_ENV_VAR = "MQTT_TOPIC_GENERATED"


def _default_topic() -> str:
    return os.environ.get(TOPIC_ENV_VAR, DEFAULT_TOPIC)


class GeneratorSettings(BaseModel):
    """Generation loop configuration."""

    period_ms: float = Field(default=50.0, gt=0)
    stop_timeout_seconds: float = Field(default=5.0, gt=0)
    seed: int | None = None
    locale: str = Field(default="en_US")

    @property
    def period_seconds(self) -> float:
        return self.period_ms / 1000.0


class BusConfig(BaseModel):
    """Bus-topic channel configuration."""

    transport: Literal["kafka", "mqtt", "none"] = Field(default="kafka")
    topic: str = Field(default_factory=_default_topic)

    @field_validator('topic')
    @classmethod
    def validate_topic(cls, v):
        if not v.strip("/ "):
            raise ValueError("Topic must not be empty")
        return v


class KafkaConfig(BaseModel):
    """Kafka connection configuration."""

    bootstrap_servers: str = Field(default="localhost:9092")
    security_protocol: str = Field(default="PLAINTEXT")
    sasl_mechanism: str | None = None
    sasl_username: str | None = None
    sasl_password: str | None = None
    ssl_ca_location: str | None = None
    ssl_certificate_location: str | None = None
    ssl_key_location: str | None = None
    ssl_key_password: str | None = None
    client_id: str = Field(default="fleetgen")


class MqttConfig(BaseModel):
    """MQTT broker configuration."""

    host: str = Field(default="localhost")
    port: int = Field(default=1883, gt=0, lt=65536)
    client_id: str | None = None
    qos: int = Field(default=0, ge=0, le=2)
    keepalive: int = Field(default=30, gt=0)


class ViewConfig(BaseModel):
    """View-update channel configuration."""

    buffer_size: int = Field(default=1000, gt=0)
    subscriber_queue_size: int = Field(default=1000, gt=0)


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="FLEETGEN_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)
    bus: BusConfig = Field(default_factory=BusConfig)
    kafka: KafkaConfig = Field(default_factory=KafkaConfig)
    mqtt: MqttConfig = Field(default_factory=MqttConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)

    @classmethod
    def load(cls, **overrides: Any) -> "AppConfig":
        """Build configuration from the environment, wrapping validation errors."""
        try:
            return cls(**overrides)
        except ValidationError as e:
            raise ConfigurationError("Invalid configuration", original_error=e) from e

    @classmethod
    def from_file(cls, config_file: str) -> "AppConfig":
        """Load configuration from a JSON or YAML file.

        Sections present in the file override environment values.

        Args:
            config_file: Path to configuration file

        Returns:
            AppConfig instance
        """
        path = Path(config_file)
        try:
            with open(path) as f:
                if path.suffix in (".yaml", ".yml"):
                    config_data = yaml.safe_load(f) or {}
                else:
                    config_data = json.load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Cannot read configuration file: {config_file}",
                source=config_file,
                original_error=e,
            ) from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                "Configuration file must contain a mapping",
                source=config_file,
            )

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {config_file}",
                source=config_file,
                original_error=e,
            ) from e

    def to_confluent_config(self) -> dict[str, Any]:
        """Convert to Confluent Kafka configuration format.

        Returns:
            Dictionary with Confluent Kafka configuration
        """
        config = {
            "bootstrap.servers": self.kafka.bootstrap_servers,
            "client.id": self.kafka.client_id,
        }

        if self.kafka.security_protocol != "PLAINTEXT":
            config["security.protocol"] = self.kafka.security_protocol

            if self.kafka.sasl_mechanism:
                config["sasl.mechanism"] = self.kafka.sasl_mechanism
            if self.kafka.sasl_username:
                config["sasl.username"] = self.kafka.sasl_username
            if self.kafka.sasl_password:
                config["sasl.password"] = self.kafka.sasl_password

            if self.kafka.ssl_ca_location:
                config["ssl.ca.location"] = self.kafka.ssl_ca_location
            if self.kafka.ssl_certificate_location:
                config["ssl.certificate.location"] = self.kafka.ssl_certificate_location
            if self.kafka.ssl_key_location:
                config["ssl.key.location"] = self.kafka.ssl_key_location
            if self.kafka.ssl_key_password:
                config["ssl.key.password"] = self.kafka.ssl_key_password

        return config
