"""
Configuration constants for the ledger terminal.

This module holds fixed values shared across layers: the remote ledger
address and endpoints, the field-name priorities used to read ledger
responses, and the reason strings shown to the operator.
"""

from typing import Final, Optional


# =============================================================================
# Remote Ledger
# =============================================================================

LEDGER_BASE_URL: Final[str] = "https://dev-space.su/api/v1"
LEDGER_BASE_URL_ENV: Final[str] = "LEDGER_BASE_URL"

DEVICES_PATH: Final[str] = "/a/devices/"
DEVICE_PATH: Final[str] = "/a/devices/{device_id}/"
PLACE_UPDATE_PATH: Final[str] = "/a/devices/{device_id}/place/{place_id}/update"

DEFAULT_CURRENCY: Final[str] = "RUB"


# =============================================================================
# Logging & External Services Configuration
# =============================================================================

LOG_LEVEL: Final[str] = "DEBUG"
LOG_FILE: Final[Optional[str]] = None
LOKI_URL: Final[Optional[str]] = None
WS_URL: Final[str] = "ws://localhost:8005/ws"

REDIS_HOST: Final[str] = "localhost"
REDIS_PORT: Final[int] = 6379
COMMAND_CHANNEL: Final[str] = "ledger_terminal_commands"


# =============================================================================
# Response Field Priorities
# =============================================================================

# First present field wins.
PLACE_ID_FIELDS: Final[tuple[str, ...]] = ("place", "place_id")
BALANCE_FIELDS: Final[tuple[str, ...]] = ("balances", "newBalance", "balance")

ERROR_FIELDS: Final[tuple[str, ...]] = ("err", "message")


# =============================================================================
# Amount Validation Reasons
# =============================================================================

REASON_AMOUNT_REQUIRED: Final[str] = "amount required"
REASON_NOT_A_NUMBER: Final[str] = "not a number"
REASON_MUST_BE_POSITIVE: Final[str] = "must be positive"
REASON_MAX_DECIMALS: Final[str] = "max 2 decimal places"

MAX_FRACTION_DIGITS: Final[int] = 2


# =============================================================================
# Mutation Failure Reasons
# =============================================================================

REASON_INSUFFICIENT_FUNDS: Final[str] = "Insufficient funds"
REASON_INVALID_DELTA: Final[str] = "Balance change cannot be zero"
REASON_NETWORK_ERROR: Final[str] = "Network error: could not reach the ledger"
REASON_UPDATE_FAILED: Final[str] = "Balance update failed"
REASON_MALFORMED_RESPONSE: Final[str] = "Unexpected response from the ledger"
REASON_PLACE_NOT_FOUND: Final[str] = "Place not found"
REASON_DEVICE_NOT_FOUND: Final[str] = "Device not found"
REASON_NO_DEVICE_SELECTED: Final[str] = "No device selected"

# Lower-cased fragments of ledger messages that mean the balance was too low.
INSUFFICIENT_FUNDS_MARKERS: Final[tuple[str, ...]] = (
    "insufficient",
    "недостаточно",
)


# =============================================================================
# Player Display Names
# =============================================================================

PLAYER_NAMES: Final[tuple[str, ...]] = (
    "Александр", "Мария", "Дмитрий", "Анна", "Иван", "Елена", "Сергей", "Ольга",
    "Андрей", "Татьяна", "Михаил", "Наталья", "Владимир", "Екатерина", "Алексей", "Юлия",
    "Павел", "Ирина", "Николай", "Светлана", "Роман", "Марина", "Артем", "Анастасия",
    "Максим", "Виктория", "Денис", "Кристина", "Антон", "Алина", "Игорь", "Дарья",
    "Олег", "Полина", "Юрий", "Валерия", "Станислав", "София", "Вадим", "Анжела",
    "Григорий", "Евгения", "Борис", "Людмила", "Константин", "Галина", "Василий", "Лариса",
)
PLAYER_NAMES_PER_DEVICE: Final[int] = 10


# =============================================================================
# Frontend Events
# =============================================================================

WS_EVENT_BALANCE_UPDATED: Final[str] = "balanceUpdated"
WS_EVENT_MUTATION_FAILED: Final[str] = "balanceUpdateFailed"
