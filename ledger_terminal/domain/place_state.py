"""
Place State - In-memory places of the selected device.

The place sequence is replaced on every update, never edited in place.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ledger_terminal.core.value_objects import (
    Device,
    Place,
    PlacePhase,
    ReconciledBalance,
)
from ledger_terminal.loggers import logger


def apply_mutation(
    places: Sequence[Place],
    reconciled: ReconciledBalance,
) -> list[Place]:
    """
    Return the places with one balance replaced.

    Args:
        places: Current places, in display order.
        reconciled: Place and balance reported by the ledger.

    Returns:
        New list equal to ``places`` except the entry whose id matches
        ``reconciled.place_id``. Unknown ids leave the list unchanged.
    """
    return [
        replace(place, balance=reconciled.new_balance)
        if place.id == reconciled.place_id
        else place
        for place in places
    ]


class PlaceStateStore:
    """
    Holds the selected device and its places.

    Also tracks which places have a mutation in flight (``PlacePhase``).
    """

    def __init__(self) -> None:
        self._device: Optional[Device] = None
        self._places: tuple[Place, ...] = ()
        self._pending: dict[int, int] = {}

    @property
    def device(self) -> Optional[Device]:
        return self._device

    @property
    def device_id(self) -> Optional[int]:
        return self._device.id if self._device else None

    @property
    def places(self) -> tuple[Place, ...]:
        return self._places

    def load(self, device: Device) -> None:
        """Select a device and take its places as the current state."""
        self._device = device
        self._places = tuple(device.places)
        self._pending = {}
        logger.debug(f"Loaded {len(self._places)} places for device {device.id}")

    def clear(self) -> None:
        """Drop the selection and its cached balances."""
        self._device = None
        self._places = ()
        self._pending = {}

    def get(self, place_id: int) -> Optional[Place]:
        for place in self._places:
            if place.id == place_id:
                return place
        return None

    def phase(self, place_id: int) -> PlacePhase:
        if self._pending.get(place_id):
            return PlacePhase.PENDING
        return PlacePhase.IDLE

    def mark_pending(self, place_id: int) -> None:
        self._pending[place_id] = self._pending.get(place_id, 0) + 1

    def mark_idle(self, place_id: int) -> None:
        """End one in-flight mutation; the place is idle when none remain."""
        remaining = self._pending.get(place_id, 0) - 1
        if remaining > 0:
            self._pending[place_id] = remaining
        else:
            self._pending.pop(place_id, None)

    def apply(self, reconciled: ReconciledBalance, device_id: int) -> bool:
        """
        Apply a reconciled balance if it belongs to the selected device.

        Args:
            reconciled: Place and balance reported by the ledger.
            device_id: Device the mutation was issued for.

        Returns:
            True if a place balance was replaced.
        """
        if device_id != self.device_id:
            logger.info(
                f"Skipping update for device {device_id}: "
                f"selected device is {self.device_id}"
            )
            return False

        if self.get(reconciled.place_id) is None:
            logger.info(f"Place {reconciled.place_id} not in view, update skipped")
            return False

        self._places = tuple(apply_mutation(self._places, reconciled))
        return True
