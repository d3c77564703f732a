"""
Domain layer - Balance rules independent of transport.

Contains:
- Amount validation and the entry buffer
- Ledger response reconciliation
- Place state store
"""

from .amount_validator import AmountBuffer, is_keystroke_valid, validate
from .response_reconciler import read_balance, read_place_id, reconcile
from .place_state import PlaceStateStore, apply_mutation


__all__ = [
    "AmountBuffer",
    "is_keystroke_valid",
    "validate",
    "read_balance",
    "read_place_id",
    "reconcile",
    "PlaceStateStore",
    "apply_mutation",
]
