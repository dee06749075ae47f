"""Custom exceptions for fleetgen.

The generation loop itself never surfaces per-tick errors to its callers; these
exceptions cover configuration problems, the fatal case where the generation
loop cannot be created, and publish failures handed to the error sink.
"""

import logging
from typing import Optional


class FleetGenException(Exception):
    """Base exception for all fleetgen errors.

    Provides common functionality for error reporting and logging.
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list[str]] = None,
        original_error: Optional[Exception] = None
    ):
        """Initialize fleetgen exception.

        Args:
            message: Main error message
            details: Additional technical details
            suggestions: List of suggested solutions
            original_error: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        self.original_error = original_error

        self._log_error()

    def _log_error(self) -> None:
        """Log the error with appropriate level."""
        logger = logging.getLogger(self.__class__.__module__)
        logger.debug(f"{self.__class__.__name__}: {self.message}")
        if self.details:
            logger.debug(f"Details: {self.details}")
        if self.original_error:
            logger.debug(f"Original error: {self.original_error}")

    def get_user_message(self) -> str:
        """Get user-friendly error message with suggestions."""
        msg = self.message
        if self.suggestions:
            msg += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                msg += f"\n  {i}. {suggestion}"
        return msg


class ConfigurationError(FleetGenException):
    """Raised when configuration cannot be loaded or is invalid."""

    def __init__(self, message: str, source: Optional[str] = None, original_error: Optional[Exception] = None):
        suggestions = ["Check the FLEETGEN_* environment variables and the config file"]
        if source:
            suggestions.insert(0, f"Verify the configuration file: {source}")
        super().__init__(
            message=message,
            details=str(original_error) if original_error else None,
            suggestions=suggestions,
            original_error=original_error,
        )
        self.source = source


class PublishError(FleetGenException):
    """Raised by a channel publisher when a message cannot be handed off."""

    def __init__(self, channel: str, reason: str, original_error: Optional[Exception] = None):
        super().__init__(
            message=f"Failed to publish to {channel}: {reason}",
            original_error=original_error,
        )
        self.channel = channel
        self.reason = reason


class GeneratorStartError(FleetGenException):
    """Raised when the generation loop cannot be created."""

    def __init__(self, original_error: Exception):
        super().__init__(
            message="Could not start the generation loop",
            details=str(original_error),
            suggestions=[
                "Check the process thread limits",
                "Retry the start request once resources are available",
            ],
            original_error=original_error,
        )
