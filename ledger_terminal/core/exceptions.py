"""
Custom exceptions for the ledger terminal.

Raised by the infrastructure layer when talking to the ledger. The
application layer turns them into result values before they reach callers.
"""

from typing import Any, Optional


class LedgerTerminalError(Exception):
    """Base exception for all ledger terminal errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            code: Optional error code for programmatic handling.
            details: Optional additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Ledger Errors
# =============================================================================


class LedgerError(LedgerTerminalError):
    """Base exception for remote ledger errors."""

    pass


class LedgerConnectionError(LedgerError):
    """The ledger could not be reached (transport failure)."""

    pass


class LedgerServerError(LedgerError):
    """The ledger answered with an error status or an error body."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        if status_code is not None:
            self.details["status_code"] = status_code


class MalformedResponseError(LedgerError):
    """The ledger answered with a body that cannot be interpreted."""

    pass


class DeviceNotFoundError(LedgerServerError):
    """Requested device does not exist on the ledger."""

    pass


class PlaceNotFoundError(LedgerServerError):
    """Requested place does not exist on the device."""

    pass
