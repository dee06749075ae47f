"""Fan-out of generated records and status changes to the output channels."""
from typing import Any

from fleetgen.logging_config import get_operation_logger
from fleetgen.models import GeneratedRecord, StatusSnapshot
from fleetgen.publishers.base import BUS_CHANNEL, VIEW_CHANNEL, BusPublisher, ErrorSink
from fleetgen.publishers.view import GENERATOR_STATUS, VEHICLE_GENERATED, ViewUpdateChannel

logger = get_operation_logger(__name__)


class EventPublisher:
    """Best-effort fan-out adapter.

    Every generated record goes to the bus topic and to the view-update channel;
    status snapshots go to the view-update channel only. Publish errors never
    propagate to the caller: they are logged and passed to ``error_sink``.
    """

    def __init__(
        self,
        bus: BusPublisher,
        view: ViewUpdateChannel,
        error_sink: ErrorSink | None = None,
    ):
        """Initialize the fan-out.

        Args:
            bus: Bus-topic publisher
            view: View-update channel
            error_sink: Called with (channel, error, payload) on every failure
        """
        self.bus = bus
        self.view = view
        self.error_sink = error_sink
        # Asynchronous delivery failures come back through the same path
        self.bus.on_error = self._handle_failure

    def publish_record(self, record: GeneratedRecord) -> None:
        envelope = record.to_envelope()
        try:
            self.bus.publish(record.identifier, envelope)
        except Exception as e:
            self._handle_failure(BUS_CHANNEL, e, envelope)

        self._publish_view(VEHICLE_GENERATED, envelope)

    def publish_status(self, snapshot: StatusSnapshot) -> None:
        self._publish_view(GENERATOR_STATUS, snapshot.to_dict())

    def _publish_view(self, kind: str, payload: dict[str, Any]) -> None:
        try:
            self.view.publish(kind, payload)
        except Exception as e:
            self._handle_failure(VIEW_CHANNEL, e, payload)

    def _handle_failure(
        self,
        channel: str,
        error: BaseException,
        payload: dict[str, Any] | None
    ) -> None:
        identifier = payload.get("identifier") if payload else None
        logger.log_publish_failure(channel, error, identifier=identifier)

        if self.error_sink is None:
            return
        try:
            self.error_sink(channel, error, payload)
        except Exception:
            logger.exception(f"Error sink raised while handling a {channel} failure", channel=channel)

    def flush(self, timeout: float = 10.0) -> int:
        return self.bus.flush(timeout)

    def close(self) -> None:
        self.bus.close()
