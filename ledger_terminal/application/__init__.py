"""
Application layer - Application services and use cases.

Contains:
- Balance mutation service
- Device service
- API facade
- Command handler
"""

from .balance_service import BalanceMutationService
from .device_service import DeviceService
from .api_facade import LedgerTerminalFacade
from .command_handler import CommandHandler, CommandResponse


__all__ = [
    "BalanceMutationService",
    "DeviceService",
    "LedgerTerminalFacade",
    "CommandHandler",
    "CommandResponse",
]
