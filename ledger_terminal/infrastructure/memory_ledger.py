"""
In-memory ledger.

Offline stand-in for the remote ledger. Each instance owns its own devices;
nothing is shared between instances. Bodies use the server field names
(``device_id``, ``place``, ``balances``) and the update answer uses
``newBalance``, the other naming the reconciler understands.
"""

from __future__ import annotations

import asyncio
import copy
from decimal import MAX_PREC, Decimal, localcontext
from typing import Any, Iterable, Optional

from ledger_terminal.configs import (
    DEFAULT_CURRENCY,
    REASON_DEVICE_NOT_FOUND,
    REASON_INSUFFICIENT_FUNDS,
    REASON_INVALID_DELTA,
    REASON_PLACE_NOT_FOUND,
)
from ledger_terminal.core.exceptions import (
    DeviceNotFoundError,
    LedgerServerError,
    PlaceNotFoundError,
)
from ledger_terminal.loggers import logger


DEMO_DEVICES: tuple[dict[str, Any], ...] = (
    {
        "id": 1,
        "name": "Device Alpha",
        "created_at": "2024-01-15T10:00:00Z",
        "updated_at": "2024-01-20T15:30:00Z",
        "places": [
            {"device_id": 1, "place": 1, "balances": Decimal("1250.50"), "currency": "RUB"},
            {"device_id": 1, "place": 2, "balances": Decimal("850.75"), "currency": "RUB"},
            {"device_id": 1, "place": 3, "balances": Decimal("2100.00"), "currency": "RUB"},
        ],
    },
    {
        "id": 2,
        "name": "Device Beta",
        "created_at": "2024-01-16T11:00:00Z",
        "updated_at": "2024-01-21T16:00:00Z",
        "places": [
            {"device_id": 2, "place": 1, "balances": Decimal("500.25"), "currency": "RUB"},
            {"device_id": 2, "place": 2, "balances": Decimal("1750.00"), "currency": "RUB"},
        ],
    },
    {
        "id": 3,
        "name": "Device Gamma",
        "created_at": "2024-01-17T12:00:00Z",
        "updated_at": "2024-01-22T17:00:00Z",
        "places": [
            {"device_id": 3, "place": 1, "balances": Decimal("3200.50"), "currency": "RUB"},
        ],
    },
    {
        "id": 4,
        "name": "Device Delta",
        "created_at": "2024-01-18T13:00:00Z",
        "updated_at": "2024-01-23T18:00:00Z",
        "places": [
            {"device_id": 4, "place": 1, "balances": Decimal("950.00"), "currency": "RUB"},
            {"device_id": 4, "place": 2, "balances": Decimal("150.25"), "currency": "RUB"},
            {"device_id": 4, "place": 3, "balances": Decimal("2750.75"), "currency": "RUB"},
        ],
    },
)


class InMemoryLedger:
    """
    Ledger gateway holding balances in process memory.

    Attributes:
        latency: Seconds to sleep before answering, to mimic the network.
        calls: Update requests received, as ``(device_id, place_id, delta)``.
    """

    def __init__(
        self,
        devices: Optional[Iterable[dict[str, Any]]] = None,
        latency: float = 0.0,
    ) -> None:
        """
        Initialize the ledger.

        Args:
            devices: Device bodies to start from (deep-copied). Defaults to
                the demo devices.
            latency: Simulated response delay in seconds.
        """
        source = DEMO_DEVICES if devices is None else devices
        self._devices: dict[int, dict[str, Any]] = {
            device["id"]: copy.deepcopy(device) for device in source
        }
        self.latency = latency
        self.calls: list[tuple[int, int, Decimal]] = []

    async def _wait(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    def _device(self, device_id: int) -> dict[str, Any]:
        device = self._devices.get(device_id)
        if device is None:
            raise DeviceNotFoundError(REASON_DEVICE_NOT_FOUND, status_code=404)
        return device

    def _place(self, device_id: int, place_id: int) -> dict[str, Any]:
        for place in self._device(device_id)["places"]:
            if place["place"] == place_id:
                return place
        raise PlaceNotFoundError(REASON_PLACE_NOT_FOUND, status_code=404)

    def balance_of(self, device_id: int, place_id: int) -> Decimal:
        """Current balance of a place."""
        return self._place(device_id, place_id)["balances"]

    async def get_devices(self) -> list[dict[str, Any]]:
        await self._wait()
        return copy.deepcopy(list(self._devices.values()))

    async def get_device(self, device_id: int) -> dict[str, Any]:
        await self._wait()
        return copy.deepcopy(self._device(device_id))

    async def update_place_balance(
        self,
        device_id: int,
        place_id: int,
        delta: Decimal,
    ) -> dict[str, Any]:
        """
        Apply a delta with the same rejections the server makes.

        Raises:
            LedgerServerError: Zero delta or insufficient funds.
            DeviceNotFoundError: Unknown device.
            PlaceNotFoundError: Unknown place.
        """
        self.calls.append((device_id, place_id, delta))
        await self._wait()

        if delta == 0:
            raise LedgerServerError(REASON_INVALID_DELTA, status_code=400)

        place = self._place(device_id, place_id)
        # Checked after the wait so concurrent requests see each other's effect
        if delta < 0 and delta.copy_abs() > place["balances"]:
            raise LedgerServerError(REASON_INSUFFICIENT_FUNDS, status_code=400)

        with localcontext() as ctx:
            ctx.prec = MAX_PREC
            place["balances"] = place["balances"] + delta
        logger.debug(
            f"In-memory ledger: device {device_id} place {place_id} "
            f"{delta:+} -> {place['balances']}"
        )
        return {
            "device_id": device_id,
            "place": place_id,
            "newBalance": place["balances"],
            "currency": place.get("currency", DEFAULT_CURRENCY),
        }
