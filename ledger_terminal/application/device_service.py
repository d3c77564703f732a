"""
Device Service - Application service for device browsing.

Lists devices, selects one and loads its places into the place store.
Server places arrive as ``{device_id, place, balances, currency}`` and are
read with the same field priorities as mutation responses.
"""

from typing import Any, Optional

from ledger_terminal.configs import (
    PLAYER_NAMES,
    PLAYER_NAMES_PER_DEVICE,
    REASON_MALFORMED_RESPONSE,
)
from ledger_terminal.core.exceptions import (
    LedgerError,
    MalformedResponseError,
)
from ledger_terminal.core.interfaces import LedgerGateway
from ledger_terminal.core.value_objects import Device, Place
from ledger_terminal.domain.place_state import PlaceStateStore
from ledger_terminal.domain.response_reconciler import (
    read_balance,
    read_place_id,
    to_place_id,
)
from ledger_terminal.infrastructure.settings import get_settings
from ledger_terminal.loggers import logger


# =============================================================================
# Mapping
# =============================================================================


def player_name(device_id: int, position: int, place_id: int) -> str:
    """
    Display name for a place without a server-side name.

    Names are taken from a fixed roster, ten per device, starting at
    ``(device_id - 1) * 10``.
    """
    if not PLAYER_NAMES:
        return f"Player {device_id}-{place_id}"
    index = (device_id - 1) * PLAYER_NAMES_PER_DEVICE + position
    return PLAYER_NAMES[index % len(PLAYER_NAMES)]


def parse_place(
    raw: Any,
    device_id: int,
    position: int,
    default_currency: str,
) -> Optional[Place]:
    """Build a Place from a server place body, or None if it is unreadable."""
    place_id = read_place_id(raw)
    balance = read_balance(raw)
    if place_id is None or balance is None:
        return None

    return Place(
        id=place_id,
        device_id=to_place_id(raw.get("device_id")) or device_id,
        name=raw.get("name") or player_name(device_id, position, place_id),
        balance=balance,
        currency=raw.get("currency") or default_currency,
    )


def parse_device(raw: Any, default_currency: str) -> Device:
    """
    Build a Device from a server device body.

    Raises:
        MalformedResponseError: The body has no usable id.
    """
    if not isinstance(raw, dict):
        raise MalformedResponseError("Device is not an object")
    device_id = to_place_id(raw.get("id"))
    if device_id is None:
        raise MalformedResponseError("Device has no id", details={"body": repr(raw)})

    places = []
    for position, raw_place in enumerate(raw.get("places") or []):
        place = parse_place(raw_place, device_id, position, default_currency)
        if place is None:
            logger.warning(f"Skipping unreadable place on device {device_id}: {raw_place!r}")
            continue
        places.append(place)

    return Device(
        id=device_id,
        name=str(raw.get("name") or f"Device {device_id}"),
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),
        places=tuple(places),
    )


# =============================================================================
# Service
# =============================================================================


class DeviceService:
    """
    Application service for device listing and selection.

    Owns the link between the ledger's device bodies and the place store.
    """

    def __init__(self, ledger: LedgerGateway, store: PlaceStateStore) -> None:
        """
        Initialize the device service.

        Args:
            ledger: Gateway to the system of record.
            store: Store receiving the selected device's places.
        """
        self._ledger = ledger
        self._store = store
        self._settings = get_settings()

    async def list_devices(self) -> dict[str, Any]:
        """
        Fetch all devices.

        Returns:
            Dictionary with success status and device list.
        """
        currency = self._settings.mutation.default_currency
        try:
            raw_devices = await self._ledger.get_devices()
            devices = [parse_device(raw, currency) for raw in raw_devices]
        except MalformedResponseError as e:
            logger.error(f"Unreadable device list: {e.message}")
            return {"success": False, "message": REASON_MALFORMED_RESPONSE}
        except LedgerError as e:
            logger.error(f"Failed to load devices: {e.message}")
            return {"success": False, "message": e.message}

        logger.info(f"Loaded {len(devices)} devices")
        return {
            "success": True,
            "message": f"{len(devices)} devices",
            "data": [device.to_dict() for device in devices],
        }

    async def select_device(self, device_id: int) -> dict[str, Any]:
        """
        Fetch a device and make its places the current state.

        On failure the previous selection is cleared.

        Args:
            device_id: Device to select.

        Returns:
            Dictionary with success status and the device's places.
        """
        currency = self._settings.mutation.default_currency
        try:
            device = parse_device(await self._ledger.get_device(device_id), currency)
        except MalformedResponseError as e:
            logger.error(f"Unreadable device {device_id}: {e.message}")
            self._store.clear()
            return {"success": False, "message": REASON_MALFORMED_RESPONSE}
        except LedgerError as e:
            logger.error(f"Failed to load device {device_id}: {e.message}")
            self._store.clear()
            return {"success": False, "message": e.message}

        self._store.load(device)
        logger.info(f"Selected device {device.id} ({device.name})")
        return {
            "success": True,
            "message": f"Selected {device.name}",
            "data": [place.to_dict() for place in device.places],
        }

    def clear_selection(self) -> dict[str, Any]:
        """Go back to the device list."""
        self._store.clear()
        return {"success": True, "message": "Selection cleared"}
