"""SIGTERM/SIGINT handling for a running generator service."""
import logging
import signal
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class ShutdownHandler:
    """Block the main thread until a stop signal, then release resources.

    Cleanups run once, newest first, so resources registered later (and usually
    depending on earlier ones) are released first.
    """

    def __init__(self, install_signal_handlers: bool = True):
        """Initialize shutdown handler.

        Args:
            install_signal_handlers: Register SIGTERM/SIGINT handlers (main thread only)
        """
        self._shutdown_event = threading.Event()
        self._cleanup_functions: list[tuple[str, Callable[[], None]]] = []
        self._original_handlers = {}

        if install_signal_handlers:
            for sig in HANDLED_SIGNALS:
                self._original_handlers[sig] = signal.signal(sig, self._signal_handler)

    def _signal_handler(self, signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, stopping fleetgen")
        self.shutdown()

    def register_cleanup(self, func: Callable[[], None], name: str | None = None):
        """Register a callable to run on shutdown.

        Args:
            func: Cleanup function
            name: Label used in log lines (defaults to the function's qualified name)
        """
        label = name or getattr(func, "__qualname__", repr(func))
        self._cleanup_functions.append((label, func))

    def wait_for_shutdown(self, timeout: float | None = None) -> bool:
        """Block until shutdown starts; False if ``timeout`` elapsed first."""
        return self._shutdown_event.wait(timeout)

    def shutdown(self):
        """Run cleanups and restore the previous signal handlers. Idempotent."""
        if self._shutdown_event.is_set():
            return
        self._shutdown_event.set()

        for label, func in reversed(self._cleanup_functions):
            try:
                func()
                logger.debug(f"Cleanup {label} done")
            except Exception:
                logger.exception(f"Cleanup {label} failed")

        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

        logger.info("Shutdown complete")

    def is_shutting_down(self) -> bool:
        return self._shutdown_event.is_set()


def create_shutdown_handler() -> ShutdownHandler:
    """Create a handler bound to SIGTERM and SIGINT."""
    return ShutdownHandler()
