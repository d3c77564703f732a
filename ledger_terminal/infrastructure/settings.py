"""
Application settings.

Typed configuration sections aggregated into a single ``Settings`` object.
Only the ledger base address may be overridden from the environment.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from ledger_terminal.configs import (
    COMMAND_CHANNEL,
    DEFAULT_CURRENCY,
    LEDGER_BASE_URL,
    LEDGER_BASE_URL_ENV,
    LOG_FILE,
    LOG_LEVEL,
    LOKI_URL,
    REDIS_HOST,
    REDIS_PORT,
    WS_URL,
)


# =============================================================================
# Configuration Classes
# =============================================================================


@dataclass(frozen=True)
class LedgerSettings:
    """Remote ledger connection settings."""

    base_url: str = LEDGER_BASE_URL
    timeout: Optional[float] = 10.0
    use_remote: bool = True
    simulated_latency: float = 0.0


@dataclass(frozen=True)
class MutationSettings:
    """Balance mutation settings."""

    serialize_per_place: bool = True
    default_currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True)
class RedisSettings:
    """Redis connection settings for the command bus."""

    host: str = REDIS_HOST
    port: int = REDIS_PORT
    decode_responses: bool = True


@dataclass(frozen=True)
class ServiceSettings:
    """External service URLs."""

    loki_url: Optional[str] = LOKI_URL
    websocket_url: Optional[str] = WS_URL


@dataclass(frozen=True)
class CommandSettings:
    """Command bus channel names."""

    command_channel: str = COMMAND_CHANNEL

    @property
    def response_channel(self) -> str:
        """Get response channel name."""
        return f"{self.command_channel}_response"


@dataclass(frozen=True)
class LoggingSettings:
    """Logging output settings."""

    level: str = LOG_LEVEL
    log_file: Optional[str] = LOG_FILE


# =============================================================================
# Main Settings
# =============================================================================


@dataclass
class Settings:
    """
    Main application settings.

    Aggregates all configuration sections.
    """

    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    mutation: MutationSettings = field(default_factory=MutationSettings)
    redis: RedisSettings = field(default_factory=RedisSettings)
    services: ServiceSettings = field(default_factory=ServiceSettings)
    commands: CommandSettings = field(default_factory=CommandSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings, taking the ledger address from the environment if set."""
        base_url = os.environ.get(LEDGER_BASE_URL_ENV)
        if base_url:
            return cls(ledger=LedgerSettings(base_url=base_url.rstrip("/")))
        return cls()


# =============================================================================
# Settings Singleton
# =============================================================================


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
