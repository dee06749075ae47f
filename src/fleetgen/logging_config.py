"""Logging configuration for fleetgen.

Provides a structured formatter (human-readable or JSON lines) and a context
logger used by the generation controller and the publishers, so transition and
publish-failure lines carry the counters and channel names needed to debug a
running generator.
"""

import json
import logging
import sys
import time
from typing import Any, Optional

_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'message', 'exc_info',
    'exc_text', 'stack_info', 'taskName',
])


class StructuredFormatter(logging.Formatter):
    """Structured formatter for better log parsing and analysis."""

    def __init__(self, json_format: bool = False):
        super().__init__()
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured information."""
        log_data = {
            'timestamp': time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(record.created)),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        custom_attrs = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if custom_attrs:
            log_data['context'] = custom_attrs

        if self.json_format:
            return json.dumps(log_data, default=str)

        msg = f"{log_data['timestamp']} - {log_data['level']} - {log_data['logger']} - {log_data['message']}"
        if 'context' in log_data:
            context_str = ', '.join(f"{k}={v}" for k, v in log_data['context'].items())
            msg += f" [{context_str}]"
        if 'exception' in log_data:
            msg += f"\n{log_data['exception']}"
        return msg


class OperationLogger:
    """Logger that attaches operation context to every message."""

    def __init__(self, name: str):
        """Initialize operation logger.

        Args:
            name: Logger name (typically module name)
        """
        self.logger = logging.getLogger(name)

    def _log_with_context(self, level: int, message: str, exc_info: bool = False, **extra: Any) -> None:
        self.logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **context: Any) -> None:
        self._log_with_context(logging.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log_with_context(logging.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._log_with_context(logging.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> None:
        self._log_with_context(logging.ERROR, message, **context)

    def exception(self, message: str, **context: Any) -> None:
        self._log_with_context(logging.ERROR, message, exc_info=True, **context)

    def log_transition(
        self,
        operation: str,
        previous: str,
        current: str,
        generated_count: int,
        redundant: bool = False
    ) -> None:
        """Log a Start or Stop request and the resulting state.

        Args:
            operation: 'start' or 'stop'
            previous: Status label before the call
            current: Status label after the call
            generated_count: Records generated so far
            redundant: Whether the call was a no-op
        """
        context = {
            'operation': operation,
            'previous_status': previous,
            'status': current,
            'generated_count': generated_count,
        }
        if redundant:
            self.warning(f"Generator {operation} requested but generator is already {current}", **context)
        else:
            self.info(f"Generator {operation}: {previous} -> {current}", **context)

    def log_publish_failure(
        self,
        channel: str,
        error: Optional[BaseException],
        identifier: Optional[str] = None
    ) -> None:
        """Log a failed hand-off to an output channel."""
        context = {'operation': 'publish', 'channel': channel}
        if identifier:
            context['identifier'] = identifier
        self.error(f"Publish to {channel} failed: {error}", **context)


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """Configure logging for fleetgen.

    Args:
        level: Log level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        json_format: Whether to use JSON format for logs
        log_file: Optional log file path
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = StructuredFormatter(json_format=json_format)

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(numeric_level)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)  # Always debug level for files
        handlers.append(file_handler)

    logging.basicConfig(
        level=numeric_level,
        handlers=handlers,
        force=True
    )
    logging.getLogger('fleetgen').setLevel(numeric_level)
    # werkzeug logs every control request at INFO
    logging.getLogger('werkzeug').setLevel(max(numeric_level, logging.WARNING))


def get_operation_logger(name: str) -> OperationLogger:
    """Get an operation logger for the given name (typically __name__)."""
    return OperationLogger(name)
