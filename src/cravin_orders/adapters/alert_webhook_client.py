"""Webhook adapter for kitchen new-order alerts."""

from dataclasses import dataclass

import httpx

from cravin_orders.domain.orders import Order


@dataclass
class HttpxAlertWebhookClient:
    """Posts new-order alerts to a webhook with httpx."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxAlertWebhookClient":
        """Create a webhook client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def new_order(self, order: Order) -> None:
        """Send one alert for a newly appeared order."""
        payload: dict[str, object] = {
            "event": "new_order",
            "order_id": order.id,
            "customer_name": order.customer_name,
            "total_amount": str(order.total_amount),
            "items": [
                {
                    "item_name": item.item_name,
                    "quantity": item.quantity,
                    "is_sugar_free": item.is_sugar_free,
                    "instructions": item.instructions,
                }
                for item in order.items
            ],
        }
        response = await self.http_client.post(self.url, json=payload, timeout=10)
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
