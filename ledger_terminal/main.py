"""
Ledger Terminal - Main entry point.

Listens for operator commands on Redis pub/sub, runs them against the
ledger and publishes the responses.
"""

import asyncio
import json
from typing import Any, Optional

from redis.asyncio import Redis

from ledger_terminal.application.api_facade import LedgerTerminalFacade
from ledger_terminal.application.command_handler import CommandHandler
from ledger_terminal.core.interfaces import LedgerGateway
from ledger_terminal.infrastructure.http_ledger import HttpLedgerClient
from ledger_terminal.infrastructure.memory_ledger import InMemoryLedger
from ledger_terminal.infrastructure.settings import Settings, get_settings
from ledger_terminal.loggers import logger


# =============================================================================
# Command Processing
# =============================================================================


async def process_message(
    raw_data: Any,
    handler: CommandHandler,
) -> Optional[dict[str, Any]]:
    """
    Decode one pub/sub payload and execute it.

    Args:
        raw_data: Message payload.
        handler: Command handler bound to the facade.

    Returns:
        Response dictionary, or None for pings and unreadable payloads.
    """
    if raw_data == "ping":
        return None

    try:
        command = json.loads(raw_data)
    except (TypeError, json.JSONDecodeError) as e:
        logger.error(f"Command parsing error: {e}")
        return None

    if not isinstance(command, dict):
        logger.error(f"Command is not an object: {command!r}")
        return None

    logger.info(f"Received command: {command}")
    return await handler.execute(command)


async def listen_to_redis(
    redis: Redis,
    api: LedgerTerminalFacade,
    settings: Settings,
) -> None:
    """
    Listen for commands on Redis pub/sub and process them.

    Args:
        redis: Redis client instance.
        api: Facade the commands run against.
        settings: Application settings.
    """
    handler = CommandHandler(api)
    command_channel = settings.commands.command_channel
    response_channel = settings.commands.response_channel

    pubsub = redis.pubsub()
    await pubsub.subscribe(command_channel)
    logger.info(f"Listening for commands on channel: {command_channel}")

    async for message in pubsub.listen():
        if message.get("type") != "message":
            continue

        response = await process_message(message.get("data"), handler)
        if response is None:
            continue

        await redis.publish(response_channel, json.dumps(response))
        logger.info(f"Response sent to {response_channel}: {response}")


# =============================================================================
# Main Entry Point
# =============================================================================


def build_ledger(settings: Settings) -> LedgerGateway:
    """Remote HTTP ledger, or an in-memory demo ledger when offline."""
    if settings.ledger.use_remote:
        logger.info(f"Using remote ledger at {settings.ledger.base_url}")
        return HttpLedgerClient(settings.ledger)
    logger.info("Using in-memory demo ledger")
    return InMemoryLedger(latency=settings.ledger.simulated_latency)


async def main() -> None:
    """
    Main entry point for the ledger terminal service.

    Connects to Redis, builds the ledger gateway and starts the listener.
    """
    settings = get_settings()

    redis = Redis(
        host=settings.redis.host,
        port=settings.redis.port,
        decode_responses=settings.redis.decode_responses,
    )
    ledger = build_ledger(settings)
    api = LedgerTerminalFacade(ledger)
    await api.start()

    try:
        await listen_to_redis(redis, api, settings)
    finally:
        await api.shutdown()
        if isinstance(ledger, HttpLedgerClient):
            await ledger.aclose()
        await redis.aclose()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Application stopped by user")


if __name__ == "__main__":
    run()
