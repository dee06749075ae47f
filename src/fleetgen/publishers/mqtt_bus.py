"""MQTT bus-topic publisher."""
import json
import logging
import uuid
from typing import Any

import paho.mqtt.client as mqtt

from fleetgen.exceptions import PublishError
from fleetgen.publishers.base import BusPublisher

logger = logging.getLogger(__name__)


class MqttBusPublisher(BusPublisher):
    """Publishes generated-record envelopes as JSON to an MQTT topic.

    The network loop runs on paho's background thread, so ``publish`` only
    queues the message.
    """

    def __init__(
        self,
        host: str,
        port: int,
        topic: str,
        qos: int = 0,
        client_id: str | None = None,
        keepalive: int = 30,
        client: mqtt.Client | None = None,
    ):
        """Initialize the MQTT publisher and connect asynchronously.

        Args:
            host: Broker host
            port: Broker port
            topic: Topic to publish to (used verbatim)
            qos: MQTT quality of service (0, 1 or 2)
            client_id: Client identifier (random when omitted)
            keepalive: Keepalive interval in seconds
            client: Pre-built paho client
        """
        super().__init__(topic)
        self.host = host
        self.port = port
        self.qos = qos
        self.client_id = client_id or f"fleetgen-{uuid.uuid4().hex[:8]}"

        self._client = client or mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=self.client_id,
            clean_session=True,
        )
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._connected = False

        self._client.connect_async(host, port, keepalive=keepalive)
        self._client.loop_start()
        logger.info(f"MQTT publisher {self.client_id} connecting to {host}:{port}")

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = not reason_code.is_failure
        if self._connected:
            logger.info(f"Connected to MQTT broker {self.host}:{self.port}")
        else:
            logger.error(f"MQTT connection refused: {reason_code}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = False
        logger.warning(f"Disconnected from MQTT broker: {reason_code}")

    def publish(self, key: str | None, value: dict[str, Any]) -> None:
        if self._client is None:
            raise PublishError(self.channel, "client is closed")

        info = self._client.publish(self.topic, json.dumps(value), qos=self.qos, retain=False)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(self.channel, mqtt.error_string(info.rc))

    def flush(self, timeout: float = 10.0) -> int:
        # paho sends from its network thread; nothing is buffered on our side
        return 0

    def close(self) -> None:
        if self._client is not None:
            self._client.loop_stop()
            self._client.disconnect()
            self._client = None

    def health_check(self) -> bool:
        return self._client is not None and self._connected
