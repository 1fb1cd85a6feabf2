from __future__ import annotations

import json

import httpx
import pytest

from techserve.orders.client import create_client
from techserve.orders.http import HttpOrdersClient
from techserve.orders.submission import lookup_order, lookup_orders
from techserve.orders.types import OrdersApiError


def _client(handler) -> HttpOrdersClient:  # type: ignore[no-untyped-def]
    return HttpOrdersClient(base_url="http://orders.test/api", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_create_order_posts_payload() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            201,
            json={"message": "Order created successfully", "orderId": 42, "orderNumber": seen["body"]["orderNumber"]},
        )

    async with _client(handler) as client:
        confirmation = await client.create_order({"orderNumber": "TS-1234567890", "osSelections": []})

    assert seen["method"] == "POST"
    assert seen["path"] == "/api/orders"
    assert seen["body"]["orderNumber"] == "TS-1234567890"
    assert confirmation.order_id == 42
    assert confirmation.order_number == "TS-1234567890"


@pytest.mark.asyncio
async def test_server_error_text_is_surfaced() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "Failed to create order"})

    async with _client(handler) as client:
        with pytest.raises(OrdersApiError) as excinfo:
            await client.create_order({"orderNumber": "TS-1234567890"})
    assert excinfo.value.status_code == 500
    assert excinfo.value.reason == "Failed to create order"
    assert excinfo.value.endpoint == "/orders"


@pytest.mark.asyncio
async def test_non_json_error_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    async with _client(handler) as client:
        with pytest.raises(OrdersApiError) as excinfo:
            await client.load_catalog()
    assert excinfo.value.reason == "Request failed with status 502"
    assert excinfo.value.response_text == "Bad Gateway"


@pytest.mark.asyncio
async def test_catalog_must_be_a_list() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"systems": []})

    async with _client(handler) as client:
        with pytest.raises(OrdersApiError):
            await client.load_catalog()


@pytest.mark.asyncio
async def test_lookup_sends_normalized_contact() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=[
                {
                    "order_number": "TS-1234567890",
                    "installation_type": "full",
                    "status": "completed",
                    "os_selections": [{"os_name": "Fedora", "version_name": "40 Workstation"}],
                }
            ],
        )

    async with _client(handler) as client:
        outcome = await lookup_orders(client, " amina@example.com ", "0712-345-678")

    assert seen["path"] == "/api/orders/find"
    assert seen["body"] == {"email": "amina@example.com", "phone": "0712345678"}
    (order,) = outcome.orders
    assert order.os_text == "Fedora (40 Workstation)"
    assert order.progress == 100


@pytest.mark.asyncio
async def test_lookup_network_failure_becomes_reason() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        outcome = await lookup_orders(client, "amina@example.com", "0712345678")
    assert not outcome.ok
    assert outcome.reason.startswith("Network error")


@pytest.mark.asyncio
async def test_order_status_by_number() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        if request.url.path.endswith("TS-1234567890"):
            return httpx.Response(200, json={"order_number": "TS-1234567890", "installation_type": "dual", "status": "in_progress"})
        return httpx.Response(404, json={"error": "Order not found"})

    async with _client(handler) as client:
        found = await lookup_order(client, "TS-1234567890")
        missing = await lookup_order(client, "TS-0000000000")

    assert seen == [("GET", "/api/orders/TS-1234567890"), ("GET", "/api/orders/TS-0000000000")]
    (order,) = found.orders
    assert order.installation_label == "Dual Boot"
    assert order.progress == 60
    assert order.os_text == "Not specified"
    assert missing.reason == "Order not found"

def test_create_client_modes() -> None:
    assert type(create_client("local")).__name__ == "LocalOrdersClient"
    assert isinstance(create_client("remote", base_url="http://orders.test/api"), HttpOrdersClient)
    with pytest.raises(ValueError):
        create_client("carrier-pigeon")
