"""
Ledger Terminal - operator console for device place balances.

Deposits to and withdrawals from device places against a remote ledger.
"""

__version__ = "1.0.0"
