"""
Pytest configuration for ledger terminal tests.

Every test gets fresh settings and its own in-memory ledger.
"""

import pytest

from ledger_terminal.application.api_facade import LedgerTerminalFacade
from ledger_terminal.infrastructure.memory_ledger import InMemoryLedger
from ledger_terminal.infrastructure.settings import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Drop cached settings and any ledger address from the environment."""
    monkeypatch.delenv("LEDGER_BASE_URL", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def ledger():
    """In-memory ledger seeded with the demo devices."""
    return InMemoryLedger()


@pytest.fixture
def facade(ledger):
    """Facade over the in-memory ledger."""
    return LedgerTerminalFacade(ledger)
