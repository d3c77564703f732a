"""
API Facade - Unified interface for the ledger terminal.

Drives one operator session: device selection, amount validation,
deposits and withdrawals, and the place store updates that follow.
"""

import asyncio
from decimal import Decimal
from typing import Any, Optional, Union

from ledger_terminal.application.balance_service import BalanceMutationService
from ledger_terminal.application.device_service import DeviceService
from ledger_terminal.configs import (
    REASON_DEVICE_NOT_FOUND,
    REASON_NO_DEVICE_SELECTED,
    REASON_PLACE_NOT_FOUND,
    WS_EVENT_BALANCE_UPDATED,
    WS_EVENT_MUTATION_FAILED,
)
from ledger_terminal.core.interfaces import LedgerGateway
from ledger_terminal.core.value_objects import (
    Direction,
    FailureKind,
    InvalidAmount,
    MutationFailure,
    MutationResult,
    MutationSuccess,
    Place,
    PlacePhase,
)
from ledger_terminal.domain.amount_validator import is_keystroke_valid, validate
from ledger_terminal.domain.place_state import PlaceStateStore
from ledger_terminal.domain.response_reconciler import to_place_id
from ledger_terminal.event_system import EventConsumer, EventPublisher, EventType
from ledger_terminal.infrastructure.settings import get_settings
from ledger_terminal.loggers import logger
from ledger_terminal.send_to_ws import send_to_ws


class LedgerTerminalFacade:
    """
    Facade for the ledger terminal.

    With ``serialize_per_place`` enabled, mutations of the same place run
    one after another and each reads the balance left by the previous one.
    Without it, two in-flight withdrawals may both pass the local funds
    check and the ledger rejects the one that would overdraw.
    """

    def __init__(
        self,
        ledger: LedgerGateway,
        serialize_per_place: Optional[bool] = None,
    ) -> None:
        """
        Initialize the facade.

        Args:
            ledger: Gateway to the system of record.
            serialize_per_place: Override of the mutation setting.
        """
        settings = get_settings()
        self._ledger = ledger
        self._serialize = (
            settings.mutation.serialize_per_place
            if serialize_per_place is None
            else serialize_per_place
        )

        self._store = PlaceStateStore()
        self._device_service = DeviceService(ledger, self._store)
        self._balance_service = BalanceMutationService(ledger)
        self._place_locks: dict[tuple[int, int], asyncio.Lock] = {}
        self._lock_users: dict[tuple[int, int], int] = {}

        # Event system
        self._event_queue: asyncio.Queue = asyncio.Queue()
        self._event_publisher = EventPublisher(self._event_queue)
        self._event_consumer = EventConsumer(self._event_queue)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Start forwarding events to the frontend."""
        self._event_consumer.register_handler(
            EventType.BALANCE_UPDATED,
            self._notify_balance_updated,
        )
        self._event_consumer.register_handler(
            EventType.MUTATION_FAILED,
            self._notify_mutation_failed,
        )
        await self._event_consumer.start_consuming()

    async def shutdown(self) -> None:
        """Stop the event consumer."""
        await self._event_consumer.stop_consuming()
        logger.info("Ledger terminal shut down")

    async def _notify_balance_updated(self, event: dict[str, Any]) -> None:
        await send_to_ws(
            event=WS_EVENT_BALANCE_UPDATED,
            data={
                "device_id": event["device_id"],
                "place_id": event["place_id"],
                "new_balance": float(event["new_balance"]),
                "currency": event["currency"],
            },
        )

    async def _notify_mutation_failed(self, event: dict[str, Any]) -> None:
        await send_to_ws(
            event=WS_EVENT_MUTATION_FAILED,
            data={
                "device_id": event["device_id"],
                "place_id": event["place_id"],
                "reason": event["reason"],
            },
        )

    # =========================================================================
    # Devices
    # =========================================================================

    async def list_devices(self) -> dict[str, Any]:
        return await self._device_service.list_devices()

    async def select_device(self, device_id: Any) -> dict[str, Any]:
        identifier = to_place_id(device_id)
        if identifier is None:
            logger.warning(f"Rejected device id {device_id!r}")
            return {"success": False, "message": REASON_DEVICE_NOT_FOUND}

        result = await self._device_service.select_device(identifier)
        if result["success"]:
            await self._event_publisher.publish(EventType.DEVICE_SELECTED, device_id=identifier)
        return result

    async def clear_selection(self) -> dict[str, Any]:
        return self._device_service.clear_selection()

    async def get_places(self) -> dict[str, Any]:
        if self._store.device_id is None:
            return {"success": False, "message": REASON_NO_DEVICE_SELECTED}
        return {
            "success": True,
            "message": f"{len(self._store.places)} places",
            "data": [place.to_dict() for place in self._store.places],
        }

    @property
    def selected_device_id(self) -> Optional[int]:
        return self._store.device_id

    @property
    def places(self) -> tuple[Place, ...]:
        return self._store.places

    def place_phase(self, place_id: int) -> PlacePhase:
        return self._store.phase(place_id)

    # =========================================================================
    # Amounts
    # =========================================================================

    async def check_amount(self, value: str) -> dict[str, Any]:
        """
        Report whether text may be typed and whether it may be submitted.

        Args:
            value: Current content of the amount field.
        """
        value = str(value)
        result = validate(value)
        if isinstance(result, InvalidAmount):
            return {
                "success": False,
                "message": result.reason,
                "data": {"keystroke_valid": is_keystroke_valid(value)},
            }
        return {
            "success": True,
            "message": "OK",
            "data": {"keystroke_valid": is_keystroke_valid(value), "amount": result.text},
        }

    # =========================================================================
    # Balance Operations
    # =========================================================================

    async def deposit(self, place_id: Any, amount: str) -> dict[str, Any]:
        """Deposit ``amount`` (operator text) to a place of the selected device."""
        result = await self.operate(place_id, str(amount), Direction.DEPOSIT)
        return result.to_dict()

    async def withdraw(self, place_id: Any, amount: str) -> dict[str, Any]:
        """Withdraw ``amount`` (operator text) from a place of the selected device."""
        result = await self.operate(place_id, str(amount), Direction.WITHDRAW)
        return result.to_dict()

    async def operate(
        self,
        place_id: Any,
        amount: str,
        direction: Direction,
    ) -> MutationResult:
        """
        Validate the amount and run one balance mutation.

        Args:
            place_id: Place of the selected device. Only integral values
                are accepted; ``2.7`` is not place 2.
            amount: Amount as typed by the operator.
            direction: Deposit or withdrawal.

        Returns:
            The mutation result; failures leave the store untouched.
        """
        validated = validate(amount)
        if isinstance(validated, InvalidAmount):
            return MutationFailure(FailureKind.VALIDATION_ERROR, validated.reason)

        device_id = self._store.device_id
        if device_id is None:
            return MutationFailure(FailureKind.NO_DEVICE_SELECTED, REASON_NO_DEVICE_SELECTED)

        identifier = to_place_id(place_id)
        if identifier is None:
            logger.warning(f"Rejected place id {place_id!r}")
            return MutationFailure(FailureKind.PLACE_NOT_FOUND, REASON_PLACE_NOT_FOUND)

        delta = validated.as_delta(direction)
        if not self._serialize:
            return await self._mutate(device_id, identifier, delta)

        key = (device_id, identifier)
        lock = self._place_locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                return await self._mutate(device_id, identifier, delta)
        finally:
            # Last user gone: nobody holds or waits on the lock
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._place_locks[key]

    async def _mutate(
        self,
        device_id: int,
        place_id: int,
        delta: Decimal,
    ) -> MutationResult:
        """Run the mutation against the cached place and apply the outcome."""
        place = self._store.get(place_id) if self._store.device_id == device_id else None
        if place is None:
            return MutationFailure(FailureKind.PLACE_NOT_FOUND, REASON_PLACE_NOT_FOUND)

        self._store.mark_pending(place_id)
        try:
            result = await self._balance_service.mutate(
                device_id,
                place_id,
                delta,
                place.balance,
                currency=place.currency,
            )
        finally:
            self._store.mark_idle(place_id)

        await self._publish_outcome(device_id, place_id, result)
        return result

    async def _publish_outcome(
        self,
        device_id: int,
        place_id: int,
        result: Union[MutationSuccess, MutationFailure],
    ) -> None:
        if isinstance(result, MutationSuccess):
            self._store.apply(result.reconciled, device_id)
            await self._event_publisher.publish(
                EventType.BALANCE_UPDATED,
                device_id=device_id,
                place_id=result.place_id,
                new_balance=result.new_balance,
                currency=result.currency,
            )
        else:
            await self._event_publisher.publish(
                EventType.MUTATION_FAILED,
                device_id=device_id,
                place_id=place_id,
                kind=result.kind,
                reason=result.reason,
            )
