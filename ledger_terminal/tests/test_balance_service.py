"""
Tests for the balance mutation service.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from ledger_terminal.application.balance_service import (
    BalanceMutationService,
    body_error,
    is_insufficient_funds_message,
)
from ledger_terminal.configs import (
    REASON_INSUFFICIENT_FUNDS,
    REASON_INVALID_DELTA,
    REASON_MALFORMED_RESPONSE,
)
from ledger_terminal.core.exceptions import (
    LedgerConnectionError,
    LedgerServerError,
    MalformedResponseError,
    PlaceNotFoundError,
)
from ledger_terminal.core.value_objects import (
    FailureKind,
    MutationFailure,
    MutationSuccess,
)


def make_ledger(response=None, error=None):
    ledger = MagicMock()
    ledger.update_place_balance = AsyncMock(return_value=response, side_effect=error)
    return ledger


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    """Tests for message classification helpers."""

    @pytest.mark.parametrize(
        "message",
        ["Insufficient funds", "INSUFFICIENT balance", "Недостаточно средств"],
    )
    def test_insufficient_funds_messages(self, message):
        assert is_insufficient_funds_message(message) is True

    def test_other_messages(self):
        assert is_insufficient_funds_message("Device is offline") is False

    def test_body_error(self):
        """Only a non-empty err field counts."""
        assert body_error({"err": "boom"}) == "boom"
        assert body_error({"err": None, "place": 1}) is None
        assert body_error({"err": ""}) is None
        assert body_error([1, 2]) is None


# =============================================================================
# Local Checks
# =============================================================================


class TestLocalChecks:
    """Requests rejected before any network call."""

    @pytest.mark.asyncio
    async def test_zero_delta(self):
        ledger = make_ledger()
        result = await BalanceMutationService(ledger).mutate(1, 2, Decimal("0"), Decimal("10"))
        assert result == MutationFailure(FailureKind.INVALID_DELTA, REASON_INVALID_DELTA)
        ledger.update_place_balance.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("delta", ["abc", "NaN", "Infinity"])
    async def test_non_numeric_delta(self, delta):
        ledger = make_ledger()
        result = await BalanceMutationService(ledger).mutate(1, 2, delta, Decimal("10"))
        assert result.kind == FailureKind.INVALID_DELTA
        ledger.update_place_balance.assert_not_called()

    @pytest.mark.asyncio
    async def test_withdraw_more_than_balance(self):
        """A withdrawal above the cached balance never reaches the ledger."""
        ledger = make_ledger()
        result = await BalanceMutationService(ledger).mutate(1, 2, Decimal("-900"), Decimal("850.75"))
        assert result == MutationFailure(FailureKind.INSUFFICIENT_FUNDS, REASON_INSUFFICIENT_FUNDS)
        ledger.update_place_balance.assert_not_called()

    @pytest.mark.asyncio
    async def test_withdraw_from_small_balance(self):
        ledger = make_ledger()
        result = await BalanceMutationService(ledger).mutate(1, 2, -100, 50)
        assert result.kind == FailureKind.INSUFFICIENT_FUNDS
        ledger.update_place_balance.assert_not_called()

    @pytest.mark.asyncio
    async def test_withdraw_whole_balance_is_sent(self):
        """Withdrawing exactly the balance is allowed."""
        ledger = make_ledger({"place": 2, "balances": 0})
        result = await BalanceMutationService(ledger).mutate(1, 2, Decimal("-850.75"), Decimal("850.75"))
        assert isinstance(result, MutationSuccess)
        assert result.new_balance == 0

    @pytest.mark.asyncio
    async def test_deposit_skips_funds_check(self):
        """Deposits are sent whatever the cached balance."""
        ledger = make_ledger({"place": 2, "balances": 5})
        result = await BalanceMutationService(ledger).mutate(1, 2, Decimal("5"), Decimal("0"))
        assert result.success is True


# =============================================================================
# Ledger Outcomes
# =============================================================================


class TestLedgerOutcomes:
    """Classification of what the ledger sends back."""

    @pytest.mark.asyncio
    async def test_success_current_fields(self):
        ledger = make_ledger({"place": 2, "balances": Decimal("875.75")})
        result = await BalanceMutationService(ledger).mutate(
            1, 2, Decimal("25"), Decimal("850.75"), currency="RUB"
        )
        assert result == MutationSuccess(place_id=2, new_balance=Decimal("875.75"), currency="RUB")
        ledger.update_place_balance.assert_awaited_once_with(1, 2, Decimal("25"))

    @pytest.mark.asyncio
    async def test_success_legacy_fields(self):
        ledger = make_ledger({"place_id": 2, "newBalance": Decimal("825.75"), "currency": "USD"})
        result = await BalanceMutationService(ledger).mutate(
            1, 2, Decimal("-25"), Decimal("850.75"), currency="RUB"
        )
        assert result.new_balance == Decimal("825.75")
        assert result.currency == "USD"

    @pytest.mark.asyncio
    async def test_default_currency(self):
        """Without any currency the configured default is used."""
        ledger = make_ledger({"place": 2, "balances": 10})
        result = await BalanceMutationService(ledger).mutate(1, 2, 10, 0)
        assert result.currency == "RUB"

    @pytest.mark.asyncio
    async def test_success_to_dict(self):
        ledger = make_ledger({"place": 2, "balances": Decimal("875.75")})
        result = await BalanceMutationService(ledger).mutate(1, 2, 25, "850.75", currency="RUB")
        assert result.to_dict() == {
            "success": True,
            "message": "Balance updated: 875.75 RUB",
            "data": {"place_id": 2, "new_balance": 875.75, "currency": "RUB"},
        }

    @pytest.mark.asyncio
    async def test_network_error(self):
        ledger = make_ledger(error=LedgerConnectionError("Network error: could not reach the ledger"))
        result = await BalanceMutationService(ledger).mutate(1, 2, 25, 100)
        assert result.kind == FailureKind.NETWORK_ERROR
        assert "Network error" in result.reason

    @pytest.mark.asyncio
    async def test_server_message_passed_through(self):
        """The ledger's own words reach the operator."""
        ledger = make_ledger(error=LedgerServerError("Device is locked", status_code=423))
        result = await BalanceMutationService(ledger).mutate(1, 2, 25, 100)
        assert result == MutationFailure(FailureKind.SERVER_ERROR, "Device is locked")

    @pytest.mark.asyncio
    async def test_server_insufficient_funds(self):
        """The ledger may still refuse a withdrawal the local check allowed."""
        ledger = make_ledger(error=LedgerServerError("Insufficient funds", status_code=400))
        result = await BalanceMutationService(ledger).mutate(1, 2, -25, 100)
        assert result.kind == FailureKind.INSUFFICIENT_FUNDS

    @pytest.mark.asyncio
    async def test_place_not_found(self):
        ledger = make_ledger(error=PlaceNotFoundError("Place not found", status_code=404))
        result = await BalanceMutationService(ledger).mutate(1, 9, 25, 100)
        assert result.kind == FailureKind.PLACE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_malformed_body_exception(self):
        ledger = make_ledger(error=MalformedResponseError("not json"))
        result = await BalanceMutationService(ledger).mutate(1, 2, 25, 100)
        assert result == MutationFailure(FailureKind.MALFORMED_RESPONSE, REASON_MALFORMED_RESPONSE)

    @pytest.mark.asyncio
    async def test_err_in_success_body(self):
        """An err field in a 2xx body is a failure."""
        ledger = make_ledger({"err": "Place is blocked"})
        result = await BalanceMutationService(ledger).mutate(1, 2, 25, 100)
        assert result == MutationFailure(FailureKind.SERVER_ERROR, "Place is blocked")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"balance": 0}, {"place": 2}, [], None, "ok"])
    async def test_unreconcilable_body(self, body):
        ledger = make_ledger(body)
        result = await BalanceMutationService(ledger).mutate(1, 2, 25, 100)
        assert result.kind == FailureKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_unexpected_exception_does_not_escape(self):
        ledger = make_ledger(error=RuntimeError("boom"))
        result = await BalanceMutationService(ledger).mutate(1, 2, 25, 100)
        assert isinstance(result, MutationFailure)
        assert result.kind == FailureKind.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_single_attempt(self):
        """Failures are not retried."""
        ledger = make_ledger(error=LedgerConnectionError("down"))
        await BalanceMutationService(ledger).mutate(1, 2, 25, 100)
        assert ledger.update_place_balance.await_count == 1
