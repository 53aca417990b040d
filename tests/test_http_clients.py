"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from cravin_orders.adapters.alert_webhook_client import HttpxAlertWebhookClient
from tests.conftest import make_order


def test_alert_webhook_posts_order() -> None:
    captured: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(200, json={"ok": True})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxAlertWebhookClient(
        url="https://hooks.example.com/kitchen", http_client=async_client
    )

    async def scenario() -> None:
        await client.new_order(make_order("a"))
        await client.close()

    asyncio.run(scenario())

    assert captured[0]["event"] == "new_order"
    assert captured[0]["order_id"] == "a"
    assert captured[0]["total_amount"] == "5.00"
    assert captured[0]["items"][0]["quantity"] == 2


def test_alert_webhook_raises_on_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxAlertWebhookClient(
        url="https://hooks.example.com/kitchen", http_client=async_client
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.new_order(make_order("a")))
