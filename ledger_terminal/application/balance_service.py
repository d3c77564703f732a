"""
Balance Mutation Service - Deposits and withdrawals against the ledger.

One call, one POST, no retries: the request carries no idempotency key, so
repeating it could apply the same delta twice. Every outcome is returned as
a ``MutationResult``; no exception leaves ``mutate``.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from ledger_terminal.configs import (
    INSUFFICIENT_FUNDS_MARKERS,
    REASON_INSUFFICIENT_FUNDS,
    REASON_INVALID_DELTA,
    REASON_MALFORMED_RESPONSE,
    REASON_UPDATE_FAILED,
)
from ledger_terminal.core.exceptions import (
    LedgerConnectionError,
    LedgerServerError,
    MalformedResponseError,
    PlaceNotFoundError,
)
from ledger_terminal.core.interfaces import LedgerGateway
from ledger_terminal.core.value_objects import (
    FailureKind,
    MutationFailure,
    MutationRequest,
    MutationResult,
    MutationSuccess,
)
from ledger_terminal.domain.response_reconciler import reconcile
from ledger_terminal.infrastructure.settings import get_settings
from ledger_terminal.loggers import logger


def is_insufficient_funds_message(message: str) -> bool:
    """Check whether a ledger error message reports a too-low balance."""
    lowered = message.lower()
    return any(marker in lowered for marker in INSUFFICIENT_FUNDS_MARKERS)


def body_error(body: Any) -> Optional[str]:
    """Error carried in a 2xx body under ``err``, if any."""
    if isinstance(body, dict) and body.get("err") not in (None, "", False):
        return str(body["err"])
    return None


class BalanceMutationService:
    """
    Application service for balance mutations.

    Checks the request locally, sends it to the ledger and reads the answer
    through the response reconciler.
    """

    def __init__(self, ledger: LedgerGateway) -> None:
        """
        Initialize the service.

        Args:
            ledger: Gateway to the system of record.
        """
        self._ledger = ledger
        self._settings = get_settings()

    async def mutate(
        self,
        device_id: int,
        place_id: int,
        delta: Union[Decimal, int, str],
        current_balance: Union[Decimal, int, str],
        currency: Optional[str] = None,
    ) -> MutationResult:
        """
        Apply a signed delta to a place balance.

        Args:
            device_id: Target device.
            place_id: Target place.
            delta: Positive to deposit, negative to withdraw.
            current_balance: Cached balance used for the local funds check.
            currency: Currency to report when the ledger does not send one.

        Returns:
            MutationSuccess, or MutationFailure with the failure kind and a
            display-ready reason.
        """
        try:
            delta = Decimal(str(delta))
            current_balance = Decimal(str(current_balance))
        except InvalidOperation:
            logger.warning(f"Non-numeric delta {delta!r} or balance {current_balance!r}")
            return MutationFailure(FailureKind.INVALID_DELTA, REASON_INVALID_DELTA)

        if not delta.is_finite() or not current_balance.is_finite() or delta == 0:
            logger.warning(f"Rejected delta {delta} for device {device_id} place {place_id}")
            return MutationFailure(FailureKind.INVALID_DELTA, REASON_INVALID_DELTA)

        request = MutationRequest(device_id=device_id, place_id=place_id, delta=delta)

        # The ledger still decides; this only skips a doomed round trip.
        if request.is_withdrawal and delta.copy_abs() > current_balance:
            logger.info(
                f"Insufficient funds on device {device_id} place {place_id}: "
                f"withdraw {delta.copy_abs()} > balance {current_balance}"
            )
            return MutationFailure(FailureKind.INSUFFICIENT_FUNDS, REASON_INSUFFICIENT_FUNDS)

        return await self._send(request, currency)

    async def _send(
        self,
        request: MutationRequest,
        currency: Optional[str],
    ) -> MutationResult:
        """Issue the update once and classify the outcome."""
        logger.info(
            f"Updating balance: device {request.device_id} "
            f"place {request.place_id} delta {request.delta:+}"
        )
        try:
            body = await self._ledger.update_place_balance(
                request.device_id,
                request.place_id,
                request.delta,
            )
        except LedgerConnectionError as e:
            logger.error(f"Ledger unreachable: {e.message}")
            return MutationFailure(FailureKind.NETWORK_ERROR, e.message)
        except PlaceNotFoundError as e:
            return MutationFailure(FailureKind.PLACE_NOT_FOUND, e.message)
        except LedgerServerError as e:
            return self._server_failure(e.message)
        except MalformedResponseError as e:
            logger.error(f"Unreadable ledger response: {e.message}")
            return MutationFailure(FailureKind.MALFORMED_RESPONSE, REASON_MALFORMED_RESPONSE)
        except Exception as e:
            logger.exception(f"Unexpected error updating balance: {e}")
            return MutationFailure(FailureKind.NETWORK_ERROR, f"{REASON_UPDATE_FAILED}: {e}")

        error = body_error(body)
        if error is not None:
            return self._server_failure(error)

        reconciled = reconcile(body)
        if reconciled is None:
            logger.error(f"Cannot reconcile ledger response: {body!r}")
            return MutationFailure(FailureKind.MALFORMED_RESPONSE, REASON_MALFORMED_RESPONSE)

        if reconciled.place_id != request.place_id:
            logger.warning(
                f"Ledger reported place {reconciled.place_id} "
                f"for an update of place {request.place_id}"
            )

        response_currency = body.get("currency") if isinstance(body, dict) else None
        result = MutationSuccess(
            place_id=reconciled.place_id,
            new_balance=reconciled.new_balance,
            currency=response_currency or currency or self._settings.mutation.default_currency,
        )
        logger.info(
            f"Balance updated: device {request.device_id} "
            f"place {result.place_id} -> {result.new_balance} {result.currency}"
        )
        return result

    @staticmethod
    def _server_failure(message: str) -> MutationFailure:
        """Failure for an error reported by the ledger."""
        if is_insufficient_funds_message(message):
            logger.info(f"Ledger rejected withdrawal: {message}")
            return MutationFailure(FailureKind.INSUFFICIENT_FUNDS, message)
        logger.warning(f"Ledger error: {message}")
        return MutationFailure(FailureKind.SERVER_ERROR, message)
