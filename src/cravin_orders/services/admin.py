"""Admin service for the kitchen console."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from cravin_orders.domain.menu import MenuItem
from cravin_orders.domain.orders import Order, OrderStatus
from cravin_orders.services.orders import OrderService, OrderTracking


@dataclass
class AdminService:
    """Service for kitchen dashboards."""

    order_service: OrderService

    def list_orders(self, status: OrderStatus | None = None) -> list[dict[str, object]]:
        """Return the live queue, newest first, optionally filtered by status."""
        orders = self.order_service.list_active()
        if status is None:
            selected = [o for o in orders if o.status is not OrderStatus.CANCELLED]
        else:
            selected = [o for o in orders if o.status is status]
        selected.sort(key=lambda order: order.created_at, reverse=True)
        return [serialize_order(order) for order in selected]

    def summary(self, now: datetime | None = None) -> dict[str, object]:
        """Return counts, revenue and orders needing attention."""
        orders = self.order_service.list_active()
        counts = {status.value: 0 for status in OrderStatus}
        revenue = Decimal("0")
        for order in orders:
            counts[order.status.value] += 1
            if order.status is not OrderStatus.CANCELLED:
                revenue += order.total_amount
        partial = self.order_service.find_partial_orders(orders, now=now)
        return {
            "active_orders": len(orders),
            "by_status": counts,
            "revenue": float(revenue),
            "needs_attention": [order.id for order in partial],
        }


def serialize_order(order: Order) -> dict[str, object]:
    return {
        "id": order.id,
        "created_at": order.created_at.isoformat(),
        "customer_name": order.customer_name,
        "status": order.status.value,
        "total_amount": float(order.total_amount),
        "items": [
            {
                "item_name": item.item_name,
                "unit_price": float(item.unit_price),
                "quantity": item.quantity,
                "is_sugar_free": item.is_sugar_free,
                "instructions": item.instructions,
            }
            for item in order.items
        ],
    }


def serialize_tracking(tracking: OrderTracking) -> dict[str, object]:
    return {
        "order": serialize_order(tracking.order),
        "steps": list(tracking.steps),
        "current_step": tracking.current_step,
        "message": tracking.message,
    }


def serialize_menu_item(item: MenuItem) -> dict[str, object]:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "price": float(item.price),
        "available": item.available,
        "sugar_free_capable": item.sugar_free_capable,
    }
