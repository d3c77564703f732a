"""
WebSocket client for sending events to the frontend.

Balance outcomes are pushed so every open operator screen can refresh.
"""

import json
from typing import Any, Optional

import websockets
from websockets.exceptions import WebSocketException

from ledger_terminal.infrastructure.settings import get_settings
from ledger_terminal.loggers import logger


async def send_to_ws(
    event: str,
    data: Optional[dict[str, Any]] = None,
    ws_url: Optional[str] = None,
) -> bool:
    """
    Send an event to the WebSocket server.

    Args:
        event: The event name/type to send.
        data: Optional dictionary of event data.
        ws_url: WebSocket URL to connect to (default from settings).

    Returns:
        True if the message was sent successfully, False otherwise.

    Example:
        await send_to_ws(
            event='balanceUpdated',
            data={'device_id': 1, 'place_id': 2, 'new_balance': 875.75},
        )
    """
    url = ws_url or get_settings().services.websocket_url
    if not url:
        return False

    message = {"event": event, "data": data}

    try:
        async with websockets.connect(url) as ws:
            await ws.send(json.dumps(message))
            logger.debug(f"WebSocket message sent: {event}")
            return True
    except (WebSocketException, OSError) as e:
        logger.warning(f"WebSocket connection error: {e}")
        return False
