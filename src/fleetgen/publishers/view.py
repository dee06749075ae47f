"""In-process view-update channel feeding live UI subscriptions."""
import logging
import queue
import threading
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

VEHICLE_GENERATED = "GeneratorVehicleGenerated"
GENERATOR_STATUS = "GeneratorStatus"
EVENT_KINDS = (VEHICLE_GENERATED, GENERATOR_STATUS)


@dataclass(frozen=True)
class ViewEvent:
    """A message delivered to view subscribers."""
    kind: str
    payload: dict[str, Any]


class Subscription:
    """A live subscriber's bounded mailbox.

    Messages of one kind arrive in publish order. When the mailbox is full, new
    messages are dropped for this subscriber only.
    """

    def __init__(self, kinds: frozenset[str], maxsize: int):
        self.kinds = kinds
        self._queue: queue.Queue[ViewEvent] = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def wants(self, kind: str) -> bool:
        return kind in self.kinds

    def offer(self, event: ViewEvent) -> bool:
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            self.dropped += 1
            return False

    def get(self, timeout: float | None = None) -> ViewEvent | None:
        """Take the next event, or None if none arrives within ``timeout``."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[ViewEvent]:
        """Take every event currently queued."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def __iter__(self) -> Iterator[ViewEvent]:
        while not self.closed:
            event = self.get(timeout=0.5)
            if event is not None:
                yield event

    def close(self) -> None:
        self._closed.set()


class ViewUpdateChannel:
    """Publish/subscribe hub for generated vehicles and status snapshots.

    Keeps a ring of recent vehicle envelopes and the last status so a newly
    connected view can render without waiting for the next event.
    """

    def __init__(self, buffer_size: int = 1000, subscriber_queue_size: int = 1000):
        """Initialize the channel.

        Args:
            buffer_size: Number of recent vehicle envelopes retained
            subscriber_queue_size: Mailbox size of each new subscription
        """
        self.subscriber_queue_size = subscriber_queue_size
        self._subscribers: list[Subscription] = []
        self._recent: deque[dict[str, Any]] = deque(maxlen=buffer_size)
        self._last_status: dict[str, Any] | None = None
        self._lock = threading.Lock()

    def subscribe(self, kinds: Iterable[str] | None = None, maxsize: int | None = None) -> Subscription:
        """Register a subscriber for the given event kinds (all kinds by default)."""
        selected = frozenset(kinds) if kinds is not None else frozenset(EVENT_KINDS)
        unknown = selected - set(EVENT_KINDS)
        if unknown:
            raise ValueError(f"Unknown view event kinds: {sorted(unknown)}")

        subscription = Subscription(selected, maxsize or self.subscriber_queue_size)
        with self._lock:
            self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.close()
        with self._lock:
            if subscription in self._subscribers:
                self._subscribers.remove(subscription)

    def publish(self, kind: str, payload: dict[str, Any]) -> int:
        """Deliver an event to every live subscriber of its kind.

        Returns:
            Number of subscribers that accepted the event
        """
        if kind not in EVENT_KINDS:
            raise ValueError(f"Unknown view event kind: {kind}")

        event = ViewEvent(kind, payload)
        delivered = 0
        # The lock keeps per-kind order identical for every subscriber
        with self._lock:
            if kind == VEHICLE_GENERATED:
                self._recent.append(payload)
            else:
                self._last_status = payload

            self._subscribers = [s for s in self._subscribers if not s.closed]
            for subscription in self._subscribers:
                if not subscription.wants(kind):
                    continue
                if subscription.offer(event):
                    delivered += 1
                else:
                    logger.warning(f"View subscriber mailbox full, dropped {kind} event")
        return delivered

    def recent(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Most recent vehicle envelopes, newest first."""
        with self._lock:
            items = list(reversed(self._recent))
        return items if limit is None else items[:limit]

    @property
    def last_status(self) -> dict[str, Any] | None:
        with self._lock:
            return self._last_status

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return sum(1 for s in self._subscribers if not s.closed)
