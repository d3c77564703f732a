"""
HTTP Ledger Client - Remote ledger over JSON/HTTPS.

Thin async wrapper around ``httpx.AsyncClient``. It only moves bytes and
classifies failures into the ledger exceptions; reading the bodies is the
services' job. Requests are sent once, never retried.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Optional, Union

import httpx

from ledger_terminal.configs import (
    DEVICE_PATH,
    DEVICES_PATH,
    ERROR_FIELDS,
    PLACE_UPDATE_PATH,
    REASON_NETWORK_ERROR,
)
from ledger_terminal.core.exceptions import (
    DeviceNotFoundError,
    LedgerConnectionError,
    LedgerServerError,
    MalformedResponseError,
)
from ledger_terminal.infrastructure.settings import LedgerSettings, get_settings
from ledger_terminal.loggers import logger


# =============================================================================
# Helpers
# =============================================================================


def delta_to_json(delta: Decimal) -> Union[int, float]:
    """JSON number for a delta: integral values go out without a fraction."""
    if delta == delta.to_integral_value():
        return int(delta)
    return float(delta)


def extract_error_message(response: httpx.Response) -> str:
    """
    Pick the message to show for an error response.

    Order: ``err`` or ``message`` from a JSON body, the raw text if the
    body is not JSON, then a generic status line.
    """
    default = f"Server error: {response.status_code} {response.reason_phrase}".rstrip()
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or default

    if isinstance(body, dict):
        for name in ERROR_FIELDS:
            if body.get(name):
                return str(body[name])
    return default


def decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body keeping fractional numbers as Decimal."""
    try:
        return json.loads(response.text, parse_float=Decimal)
    except ValueError as e:
        raise MalformedResponseError(
            "Ledger response is not valid JSON",
            details={"status_code": response.status_code, "error": str(e)},
        )


# =============================================================================
# Client
# =============================================================================


class HttpLedgerClient:
    """
    Ledger gateway backed by the remote HTTP API.

    Usable as an async context manager; ``aclose`` releases the connection pool.
    """

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Ledger settings (defaults to application settings).
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
        """
        self._settings = settings or get_settings().ledger
        self._client = httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "HttpLedgerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_devices(self) -> list[dict[str, Any]]:
        """Fetch all devices."""
        body = await self._request("GET", DEVICES_PATH)
        if not isinstance(body, list):
            raise MalformedResponseError("Device list is not an array")
        return body

    async def get_device(self, device_id: int) -> dict[str, Any]:
        """Fetch one device with its places."""
        try:
            body = await self._request("GET", DEVICE_PATH.format(device_id=device_id))
        except LedgerServerError as e:
            if e.status_code == 404:
                raise DeviceNotFoundError(e.message, status_code=404)
            raise
        if not isinstance(body, dict):
            raise MalformedResponseError("Device is not an object")
        return body

    async def update_place_balance(
        self,
        device_id: int,
        place_id: int,
        delta: Decimal,
    ) -> Any:
        """POST a signed delta to the place update endpoint."""
        path = PLACE_UPDATE_PATH.format(device_id=device_id, place_id=place_id)
        return await self._request("POST", path, payload={"delta": delta_to_json(delta)})

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Send one request and decode the body.

        Raises:
            LedgerConnectionError: The request did not complete.
            LedgerServerError: The ledger answered with a non-2xx status.
            MalformedResponseError: A 2xx body is not JSON.
        """
        logger.debug(f"{method} {path} {payload or ''}")
        try:
            response = await self._client.request(method, path, json=payload)
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            detail = str(e)
            message = f"{REASON_NETWORK_ERROR} ({detail})" if detail else REASON_NETWORK_ERROR
            raise LedgerConnectionError(message)

        if not response.is_success:
            message = extract_error_message(response)
            logger.warning(f"{method} {path} -> {response.status_code}: {message}")
            raise LedgerServerError(message, status_code=response.status_code)

        return decode_body(response)
