"""
Interfaces (Protocols) for the ledger terminal.

Defines the contract every ledger backend honours, so the HTTP client and
the in-memory ledger are interchangeable behind the services.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LedgerGateway(Protocol):
    """
    Protocol for the system of record for place balances.

    Methods return the ledger's raw JSON bodies. Transport problems raise
    ``LedgerConnectionError``, error statuses raise ``LedgerServerError``
    and unreadable bodies raise ``MalformedResponseError``.
    """

    async def get_devices(self) -> list[dict[str, Any]]:
        """Fetch all devices."""
        ...

    async def get_device(self, device_id: int) -> dict[str, Any]:
        """Fetch one device with its places."""
        ...

    async def update_place_balance(
        self,
        device_id: int,
        place_id: int,
        delta: Decimal,
    ) -> Any:
        """
        Apply a signed delta to a place balance.

        Args:
            device_id: Target device.
            place_id: Target place.
            delta: Positive to deposit, negative to withdraw.

        Returns:
            Raw response body.
        """
        ...
