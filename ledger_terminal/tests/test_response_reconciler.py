"""
Tests for ledger response reconciliation.
"""

from decimal import Decimal

import pytest

from ledger_terminal.configs import BALANCE_FIELDS, PLACE_ID_FIELDS
from ledger_terminal.core.value_objects import ReconciledBalance
from ledger_terminal.domain.response_reconciler import (
    read_balance,
    read_place_id,
    reconcile,
)


class TestFieldPriorities:
    """The lookup order is fixed."""

    def test_place_id_fields(self):
        assert PLACE_ID_FIELDS == ("place", "place_id")

    def test_balance_fields(self):
        assert BALANCE_FIELDS == ("balances", "newBalance", "balance")


class TestReconcile:
    """Tests for reconcile()."""

    def test_current_field_names(self):
        """{place, balances} is read directly."""
        assert reconcile({"place": 7, "balances": 42.5}) == ReconciledBalance(7, Decimal("42.5"))

    def test_legacy_field_names(self):
        """{place_id, newBalance} gives the same result."""
        assert reconcile({"place_id": 7, "newBalance": 42.5}) == ReconciledBalance(7, Decimal("42.5"))

    def test_balance_field(self):
        """The plain 'balance' field is the last fallback."""
        assert reconcile({"place": 1, "balance": 10}) == ReconciledBalance(1, Decimal("10"))

    def test_missing_place_id(self):
        """Without a place id there is nothing to update."""
        assert reconcile({"balance": 0}) is None

    def test_zero_balance_is_a_value(self):
        """A zero balance is not mistaken for a missing field."""
        assert reconcile({"place": 3, "balances": 0}) == ReconciledBalance(3, Decimal("0"))

    def test_zero_balance_wins_over_later_fields(self):
        """A present zero stops the lookup."""
        result = reconcile({"place": 3, "balances": 0, "newBalance": 99, "balance": 98})
        assert result.new_balance == 0

    def test_first_place_field_wins(self):
        """'place' is preferred over 'place_id'."""
        assert reconcile({"place": 1, "place_id": 2, "balances": 5}).place_id == 1

    def test_earlier_balance_field_wins(self):
        """'balances' is preferred over 'newBalance' and 'balance'."""
        assert reconcile({"place": 1, "newBalance": 6, "balance": 7}).new_balance == 6

    def test_null_counts_as_absent(self):
        """A field holding null falls through to the next name."""
        result = reconcile({"place": None, "place_id": 4, "balances": None, "newBalance": 12})
        assert result == ReconciledBalance(4, Decimal("12"))

    def test_missing_balance(self):
        """A place id alone is not enough."""
        assert reconcile({"place": 7}) is None

    def test_decimal_and_string_values(self):
        """Decimal and numeric strings are read exactly."""
        assert reconcile({"place": "7", "balances": "875.75"}) == ReconciledBalance(7, Decimal("875.75"))
        assert reconcile({"place": 7, "balances": Decimal("0.10")}).new_balance == Decimal("0.10")

    @pytest.mark.parametrize(
        "body",
        [
            None,
            [],
            "place",
            42,
            {},
            {"err": "oops"},
            {"place": True, "balances": 1},
            {"place": 7, "balances": "abc"},
            {"place": 7, "balances": "NaN"},
            {"place": 7, "balances": [1]},
            {"place": 1.5, "balances": 1},
            {"place": "seven", "balances": 1},
        ],
    )
    def test_unrecognized_shapes(self, body):
        """Anything unreadable yields None without raising."""
        assert reconcile(body) is None


class TestReaders:
    """Tests for the single-field readers."""

    def test_read_place_id_from_server_place(self):
        assert read_place_id({"device_id": 1, "place": 2, "balances": 850.75}) == 2

    def test_read_balance_keeps_precision(self):
        assert read_balance({"balances": Decimal("850.75")}) == Decimal("850.75")

    def test_read_balance_from_float(self):
        assert read_balance({"balances": 850.75}) == Decimal("850.75")
