"""
Infrastructure layer - External dependencies and implementations.

Contains:
- Ledger gateways (HTTP, in-memory)
- Configuration
"""

from .settings import (
    Settings,
    get_settings,
    reset_settings,
)
from .http_ledger import HttpLedgerClient
from .memory_ledger import InMemoryLedger


__all__ = [
    # Ledgers
    "HttpLedgerClient",
    "InMemoryLedger",
    # Settings
    "Settings",
    "get_settings",
    "reset_settings",
]
