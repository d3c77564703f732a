"""
Response Reconciler - Reads ledger responses into a canonical shape.

The ledger has named the same fields differently over time. Lookups walk
an ordered tuple of candidate names (``PLACE_ID_FIELDS``, ``BALANCE_FIELDS``)
and take the first field that is present. Presence is a key check, so a
balance of ``0`` is a value and not a missing field. A key holding JSON
``null`` counts as absent.

Nothing here raises: an unreadable body yields ``None``.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ledger_terminal.configs import BALANCE_FIELDS, PLACE_ID_FIELDS
from ledger_terminal.core.value_objects import ReconciledBalance


_MISSING = object()


def first_present(body: Mapping, fields: tuple[str, ...]) -> Any:
    """
    Return the value of the first field in ``fields`` present in ``body``.

    Returns the ``_MISSING`` sentinel when none is present.
    """
    for name in fields:
        if name in body and body[name] is not None:
            return body[name]
    return _MISSING


def to_place_id(value: Any) -> Optional[int]:
    """Coerce a place identifier, or None if it is not an integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (Decimal, float)):
        try:
            if value == int(value):
                return int(value)
        except (ValueError, OverflowError, InvalidOperation):
            return None
        return None
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        return int(value.strip())
    return None


def to_balance(value: Any) -> Optional[Decimal]:
    """Coerce a balance to Decimal, or None if it is not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, Decimal)):
            balance = Decimal(value)
        elif isinstance(value, (float, str)):
            balance = Decimal(str(value).strip())
        else:
            return None
    except (InvalidOperation, ValueError):
        return None
    if not balance.is_finite():
        return None
    return balance


def read_place_id(body: Any) -> Optional[int]:
    """Place identifier from ``place`` or ``place_id``."""
    if not isinstance(body, Mapping):
        return None
    value = first_present(body, PLACE_ID_FIELDS)
    if value is _MISSING:
        return None
    return to_place_id(value)


def read_balance(body: Any) -> Optional[Decimal]:
    """Balance from ``balances``, ``newBalance`` or ``balance``."""
    if not isinstance(body, Mapping):
        return None
    value = first_present(body, BALANCE_FIELDS)
    if value is _MISSING:
        return None
    return to_balance(value)


def reconcile(raw_body: Any) -> Optional[ReconciledBalance]:
    """
    Normalize a balance update response.

    Args:
        raw_body: Decoded JSON body returned by the ledger.

    Returns:
        ReconciledBalance, or None when the place or the balance cannot be
        determined.
    """
    place_id = read_place_id(raw_body)
    if place_id is None:
        return None

    new_balance = read_balance(raw_body)
    if new_balance is None:
        return None

    return ReconciledBalance(place_id=place_id, new_balance=new_balance)
