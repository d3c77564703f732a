"""
Value Objects for the ledger terminal.

Immutable objects that represent values in the domain.
Value objects are compared by value, not by identity.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, auto
from typing import Any, Optional, Union


# =============================================================================
# Enums
# =============================================================================


class FailureKind(Enum):
    """Why a balance mutation did not happen."""

    VALIDATION_ERROR = auto()
    INSUFFICIENT_FUNDS = auto()
    INVALID_DELTA = auto()
    NETWORK_ERROR = auto()
    SERVER_ERROR = auto()
    MALFORMED_RESPONSE = auto()
    PLACE_NOT_FOUND = auto()
    NO_DEVICE_SELECTED = auto()


class PlacePhase(Enum):
    """Mutation phase of a single place."""

    IDLE = auto()
    PENDING = auto()


class Direction(Enum):
    """Direction of a balance operation."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


# =============================================================================
# Amounts
# =============================================================================


CANONICAL_AMOUNT_PATTERN = re.compile(r"^\d+(\.\d{1,2})?$")


@dataclass(frozen=True)
class ValidatedAmount:
    """
    Strictly positive amount with at most two fractional digits.

    Attributes:
        value: The decimal amount.
    """

    value: Decimal

    def __post_init__(self) -> None:
        if not CANONICAL_AMOUNT_PATTERN.match(str(self.value)) or self.value <= 0:
            raise ValueError(f"Not a valid amount: {self.value!r}")

    @property
    def text(self) -> str:
        """Canonical string form, always with ``.`` as separator."""
        return str(self.value)

    def as_delta(self, direction: Direction) -> Decimal:
        """Signed delta for the given direction."""
        if direction is Direction.WITHDRAW:
            return self.value.copy_negate()
        return self.value

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class InvalidAmount:
    """Rejected amount input with a display reason."""

    reason: str


# =============================================================================
# Devices and Places
# =============================================================================


@dataclass(frozen=True)
class Place:
    """
    A numbered seat on a device with its own balance.

    Attributes:
        id: Place number on the device.
        device_id: Owning device.
        name: Display name of the player.
        balance: Cached balance; the ledger is authoritative.
        currency: Currency code.
    """

    id: int
    device_id: int
    name: str
    balance: Decimal
    currency: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "device_id": self.device_id,
            "name": self.name,
            "balance": float(self.balance),
            "currency": self.currency,
        }


@dataclass(frozen=True)
class Device:
    """
    A physical unit exposing one or more places.

    Attributes:
        id: Device identifier.
        name: Device name.
        created_at: Creation timestamp as sent by the ledger.
        updated_at: Last update timestamp as sent by the ledger.
        places: Places of the device.
    """

    id: int
    name: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    places: tuple[Place, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "places": [place.to_dict() for place in self.places],
        }


# =============================================================================
# Mutations
# =============================================================================


@dataclass(frozen=True)
class MutationRequest:
    """
    Signed balance change for one place.

    Attributes:
        device_id: Target device.
        place_id: Target place.
        delta: Positive for a deposit, negative for a withdrawal. Never zero.
    """

    device_id: int
    place_id: int
    delta: Decimal

    def __post_init__(self) -> None:
        if self.delta == 0:
            raise ValueError("Delta cannot be zero")

    @property
    def is_withdrawal(self) -> bool:
        return self.delta < 0


@dataclass(frozen=True)
class ReconciledBalance:
    """Canonical reading of a ledger response."""

    place_id: int
    new_balance: Decimal


@dataclass(frozen=True)
class MutationSuccess:
    """
    Balance change accepted by the ledger.

    Attributes:
        place_id: Place the ledger reports as changed.
        new_balance: Balance after the change.
        currency: Currency code.
    """

    place_id: int
    new_balance: Decimal
    currency: str
    success: bool = field(default=True, init=False)

    @property
    def reconciled(self) -> ReconciledBalance:
        return ReconciledBalance(place_id=self.place_id, new_balance=self.new_balance)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "success": True,
            "message": f"Balance updated: {self.new_balance:.2f} {self.currency}",
            "data": {
                "place_id": self.place_id,
                "new_balance": float(self.new_balance),
                "currency": self.currency,
            },
        }


@dataclass(frozen=True)
class MutationFailure:
    """
    Balance change that did not happen.

    Attributes:
        kind: Failure category.
        reason: Display-ready message.
    """

    kind: FailureKind
    reason: str
    success: bool = field(default=False, init=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "success": False,
            "message": self.reason,
            "data": {"kind": self.kind.name.lower()},
        }


MutationResult = Union[MutationSuccess, MutationFailure]
