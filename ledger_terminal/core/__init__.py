"""
Core module - Foundation layer with no external dependencies.

Contains:
- Exceptions
- Interfaces (Protocols)
- Value Objects
"""

from .exceptions import (
    LedgerTerminalError,
    LedgerError,
    LedgerConnectionError,
    LedgerServerError,
    MalformedResponseError,
    DeviceNotFoundError,
    PlaceNotFoundError,
)
from .interfaces import LedgerGateway
from .value_objects import (
    Device,
    Direction,
    FailureKind,
    InvalidAmount,
    MutationFailure,
    MutationRequest,
    MutationResult,
    MutationSuccess,
    Place,
    PlacePhase,
    ReconciledBalance,
    ValidatedAmount,
)


__all__ = [
    # Exceptions
    "LedgerTerminalError",
    "LedgerError",
    "LedgerConnectionError",
    "LedgerServerError",
    "MalformedResponseError",
    "DeviceNotFoundError",
    "PlaceNotFoundError",
    # Interfaces
    "LedgerGateway",
    # Value Objects
    "Device",
    "Direction",
    "FailureKind",
    "InvalidAmount",
    "MutationFailure",
    "MutationRequest",
    "MutationResult",
    "MutationSuccess",
    "Place",
    "PlacePhase",
    "ReconciledBalance",
    "ValidatedAmount",
]
