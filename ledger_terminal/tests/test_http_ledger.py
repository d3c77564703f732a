"""
Tests for the HTTP ledger client.

Requests go through ``httpx.MockTransport``; nothing leaves the process.
"""

import json
from decimal import Decimal

import httpx
import pytest

from ledger_terminal.core.exceptions import (
    DeviceNotFoundError,
    LedgerConnectionError,
    LedgerServerError,
    MalformedResponseError,
)
from ledger_terminal.infrastructure.http_ledger import (
    HttpLedgerClient,
    delta_to_json,
    extract_error_message,
)
from ledger_terminal.infrastructure.settings import LedgerSettings


BASE_URL = "https://ledger.test/api/v1"


def make_client(handler):
    return HttpLedgerClient(
        LedgerSettings(base_url=BASE_URL, timeout=1.0),
        transport=httpx.MockTransport(handler),
    )


class TestHelpers:
    """Tests for encoding and error message helpers."""

    def test_delta_to_json(self):
        assert delta_to_json(Decimal("25")) == 25
        assert isinstance(delta_to_json(Decimal("25.00")), int)
        assert delta_to_json(Decimal("-25.5")) == -25.5

    def test_error_from_err_field(self):
        response = httpx.Response(400, json={"err": "Insufficient funds"})
        assert extract_error_message(response) == "Insufficient funds"

    def test_error_from_message_field(self):
        response = httpx.Response(500, json={"message": "Database unavailable"})
        assert extract_error_message(response) == "Database unavailable"

    def test_error_from_text(self):
        response = httpx.Response(502, text="Bad gateway upstream")
        assert extract_error_message(response) == "Bad gateway upstream"

    def test_error_generic(self):
        response = httpx.Response(503, json={"detail": "x"})
        assert extract_error_message(response) == "Server error: 503 Service Unavailable"


class TestUpdatePlaceBalance:
    """Tests for the balance update request."""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        """POST to the place update path with a numeric delta."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"place": 2, "balances": 875.75})

        async with make_client(handler) as client:
            body = await client.update_place_balance(1, 2, Decimal("25"))

        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v1/a/devices/1/place/2/update"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {"delta": 25}
        assert body == {"place": 2, "balances": Decimal("875.75")}

    @pytest.mark.asyncio
    async def test_negative_fractional_delta(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"place": 2, "balances": 825.25})

        async with make_client(handler) as client:
            await client.update_place_balance(1, 2, Decimal("-25.50"))

        assert seen == [{"delta": -25.5}]

    @pytest.mark.asyncio
    async def test_fractions_decoded_as_decimal(self):
        """Balances keep their exact decimal value."""

        def handler(request):
            return httpx.Response(200, text='{"place": 1, "balances": 0.1}')

        async with make_client(handler) as client:
            body = await client.update_place_balance(1, 1, Decimal("0.1"))

        assert body["balances"] == Decimal("0.1")

    @pytest.mark.asyncio
    async def test_server_error(self):
        def handler(request):
            return httpx.Response(400, json={"err": "Insufficient funds"})

        async with make_client(handler) as client:
            with pytest.raises(LedgerServerError) as exc_info:
                await client.update_place_balance(1, 2, Decimal("-5000"))

        assert exc_info.value.message == "Insufficient funds"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(LedgerConnectionError) as exc_info:
                await client.update_place_balance(1, 2, Decimal("5"))

        assert exc_info.value.message.startswith("Network error")

    @pytest.mark.asyncio
    async def test_timeout_is_connection_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as client:
            with pytest.raises(LedgerConnectionError):
                await client.update_place_balance(1, 2, Decimal("5"))

    @pytest.mark.asyncio
    async def test_non_json_success(self):
        def handler(request):
            return httpx.Response(200, text="<html>ok</html>")

        async with make_client(handler) as client:
            with pytest.raises(MalformedResponseError):
                await client.update_place_balance(1, 2, Decimal("5"))


class TestDevices:
    """Tests for device reads."""

    @pytest.mark.asyncio
    async def test_get_devices(self):
        def handler(request):
            assert request.method == "GET"
            assert request.url.path == "/api/v1/a/devices/"
            return httpx.Response(200, json=[{"id": 1, "name": "Device Alpha", "places": []}])

        async with make_client(handler) as client:
            devices = await client.get_devices()

        assert devices[0]["id"] == 1

    @pytest.mark.asyncio
    async def test_get_devices_not_a_list(self):
        def handler(request):
            return httpx.Response(200, json={"id": 1})

        async with make_client(handler) as client:
            with pytest.raises(MalformedResponseError):
                await client.get_devices()

    @pytest.mark.asyncio
    async def test_get_device(self):
        def handler(request):
            assert request.url.path == "/api/v1/a/devices/3/"
            return httpx.Response(200, json={"id": 3, "name": "Device Gamma", "places": []})

        async with make_client(handler) as client:
            device = await client.get_device(3)

        assert device["name"] == "Device Gamma"

    @pytest.mark.asyncio
    async def test_get_device_not_found(self):
        def handler(request):
            return httpx.Response(404, json={"message": "Device not found"})

        async with make_client(handler) as client:
            with pytest.raises(DeviceNotFoundError) as exc_info:
                await client.get_device(99)

        assert exc_info.value.message == "Device not found"
