"""Start/stop state machine driving the periodic vehicle generation loop.

The controller is the only writer of :class:`GenerationState`. Start and Stop are
serialized by a transition lock so that at most one generation loop exists at a
time; the loop itself runs on a daemon thread and is stopped cooperatively
through a :class:`CancellationToken`.

Tick boundary: the loop checks the token before every tick and never begins a
tick once the token is set. A tick already past that check finishes, and Stop
joins the loop thread before returning, so nothing is published after Stop
returns. If the join exceeds ``stop_timeout`` the stalled thread is remembered
and Start refuses to launch a second loop until it has exited.
"""
import threading
import time
from dataclasses import dataclass, field

from fleetgen.exceptions import GeneratorStartError
from fleetgen.generators.base import RecordFactory
from fleetgen.generators.ticker import CancellationToken, PeriodicTicker
from fleetgen.logging_config import get_operation_logger
from fleetgen.metrics.collector import DummyMetricsCollector, MetricsCollector
from fleetgen.models import STATUS_RUNNING, STATUS_STOPPED, CommandResult, StatusSnapshot
from fleetgen.publishers.fanout import EventPublisher
from fleetgen.status import StatusQuery

logger = get_operation_logger(__name__)

CODE_OK = 200
CODE_BUSY = 409
DEFAULT_PERIOD_SECONDS = 0.05


@dataclass
class GenerationState:
    """Mutable generation state owned by one service instance.

    ``cancellation`` is set exactly while ``running`` is true and
    ``generated_count`` never decreases.
    """
    running: bool = False
    generated_count: int = 0
    cancellation: CancellationToken | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def read(self) -> tuple[bool, int]:
        with self._lock:
            return self.running, self.generated_count

    def begin(self, token: CancellationToken) -> None:
        with self._lock:
            self.running = True
            self.cancellation = token

    def cancel(self) -> None:
        with self._lock:
            if self.cancellation is not None:
                self.cancellation.cancel()

    def end(self) -> None:
        with self._lock:
            self.running = False
            self.cancellation = None

    def increment(self) -> int:
        with self._lock:
            self.generated_count += 1
            return self.generated_count


class GenerationController:
    """Single authority over the running/stopped state machine."""

    def __init__(
        self,
        state: GenerationState,
        factory: RecordFactory,
        publisher: EventPublisher,
        period_seconds: float = DEFAULT_PERIOD_SECONDS,
        stop_timeout: float = 5.0,
        metrics: MetricsCollector | None = None,
    ):
        """Initialize the controller.

        Args:
            state: State object this controller mutates
            factory: Produces one record per tick
            publisher: Fans records and status notifications out
            period_seconds: Interval between ticks
            stop_timeout: Maximum time Stop waits for the loop thread
            metrics: Metrics collector (no-op when omitted)
        """
        if period_seconds <= 0:
            raise ValueError("period_seconds must be positive")

        self.state = state
        self.factory = factory
        self.publisher = publisher
        self.period_seconds = period_seconds
        self.stop_timeout = stop_timeout
        self.metrics = metrics or DummyMetricsCollector()
        self.status_query = StatusQuery(state)

        self._transition_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        # Loop thread that outlived stop_timeout; no new loop starts until it exits
        self._stopping: threading.Thread | None = None

    def start(self) -> CommandResult:
        """Start generating, or report that generation is already running.

        Returns a 409 result while a loop left over from a timed-out Stop is
        still finishing its tick.

        Raises:
            GeneratorStartError: If the loop thread cannot be created
        """
        with self._transition_lock:
            running, count = self.state.read()
            if running:
                logger.log_transition("start", STATUS_RUNNING, STATUS_RUNNING, count, redundant=True)
                self._notify_status()
                return CommandResult(CODE_OK, f"Generator already running. total={count}")

            if self._stopping is not None:
                self._stopping.join(self.stop_timeout)
                if self._stopping.is_alive():
                    logger.warning(
                        "Generator start refused: previous loop still finishing a tick",
                        operation="start",
                        generated_count=count,
                    )
                    self._notify_status()
                    return CommandResult(CODE_BUSY, f"Generator still stopping. total={count}")
                self._stopping = None

            token = CancellationToken()
            self.state.begin(token)
            try:
                thread = threading.Thread(
                    target=self._run,
                    args=(token,),
                    name="fleetgen-generator",
                    daemon=True,
                )
                thread.start()
            except RuntimeError as e:
                self.state.end()
                raise GeneratorStartError(e) from e

            self._thread = thread
            self.metrics.set_running(True)
            logger.log_transition("start", STATUS_STOPPED, STATUS_RUNNING, count)
            self._notify_status()
            return CommandResult(CODE_OK, "Generator started")

    def stop(self) -> CommandResult:
        """Stop generating, or report that generation is already stopped."""
        with self._transition_lock:
            running, count = self.state.read()
            if not running:
                logger.log_transition("stop", STATUS_STOPPED, STATUS_STOPPED, count, redundant=True)
                self._notify_status()
                return CommandResult(CODE_OK, "Generator already stopped")

            self.state.cancel()
            thread, self._thread = self._thread, None
            if thread is not None and thread is not threading.current_thread():
                thread.join(self.stop_timeout)
                if thread.is_alive():
                    logger.warning(
                        f"Generation loop did not exit within {self.stop_timeout}s",
                        operation="stop",
                    )
                    self._stopping = thread
            self.state.end()

            _, count = self.state.read()
            self.metrics.set_running(False)
            logger.log_transition("stop", STATUS_RUNNING, STATUS_STOPPED, count)
            self._notify_status()
            return CommandResult(CODE_OK, f"Generator stopped. total={count}")

    def status(self) -> StatusSnapshot:
        """Current snapshot; never mutates state."""
        return self.status_query.snapshot()

    @property
    def is_running(self) -> bool:
        return self.state.read()[0]

    def _notify_status(self) -> None:
        self.publisher.publish_status(self.status_query.snapshot())

    def _run(self, token: CancellationToken) -> None:
        ticker = PeriodicTicker(self.period_seconds)
        logger.debug("Generation loop started", period_seconds=self.period_seconds)
        try:
            while ticker.wait_next(token):
                self._tick()
        finally:
            logger.debug("Generation loop exited", generated_count=self.state.read()[1])

    def _tick(self) -> None:
        started = time.perf_counter()
        try:
            record = self.factory.create()
            self.publisher.publish_record(record)
        except Exception:
            self.metrics.record_tick_failure()
            logger.exception("Generation tick failed", operation="tick")
            return

        self.state.increment()
        self.metrics.record_generated(time.perf_counter() - started)
