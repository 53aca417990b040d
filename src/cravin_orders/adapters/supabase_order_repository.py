"""Supabase repository for orders and their item rows."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from supabase import Client

from cravin_orders.domain.orders import Order, OrderItem, OrderStatus, parse_status
from cravin_orders.services.orders import OrderRepository

_ORDER_COLUMNS = (
    "id, created_at, customer_name, status, total_amount, "
    "order_items(item_name, unit_price, quantity, is_sugar_free, instructions)"
)


@dataclass
class SupabaseOrderRepository(OrderRepository):
    """Supabase implementation for orders."""

    client: Client

    def create_order(
        self, customer_name: str, status: OrderStatus, total_amount: Decimal
    ) -> Order:
        """Insert the order header and return it."""
        response = (
            self.client.table("orders")
            .insert(
                {
                    "customer_name": customer_name,
                    "status": status.value,
                    "total_amount": float(total_amount),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create order")
        return parse_order_row(response.data[0])

    def create_order_items(self, order_id: str, items: tuple[OrderItem, ...]) -> None:
        """Insert item rows for an order."""
        payload = [
            {
                "order_id": order_id,
                "item_name": item.item_name,
                "unit_price": float(item.unit_price),
                "quantity": item.quantity,
                "is_sugar_free": item.is_sugar_free,
                "instructions": item.instructions,
            }
            for item in items
        ]
        if not payload:
            return
        response = self.client.table("order_items").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create order items")

    def get_order(self, order_id: str) -> Order | None:
        """Return an order with items, if present."""
        response = (
            self.client.table("orders")
            .select(_ORDER_COLUMNS)
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_order_row(response.data[0])

    def list_active_orders(self, cancelled_since: datetime) -> list[Order]:
        """Return unarchived orders newest first, minus old cancelled ones."""
        since = cancelled_since.isoformat()
        recent = f'status.neq.cancelled,created_at.gte."{since}"'
        response = (
            self.client.table("orders")
            .select(_ORDER_COLUMNS)
            .neq("status", OrderStatus.ARCHIVED.value)
            .or_(recent)
            .order("created_at", desc=True)
            .execute()
        )
        return [parse_order_row(row) for row in response.data or []]

    def update_status(self, order_id: str, status: OrderStatus) -> Order | None:
        """Set the status for one order."""
        response = (
            self.client.table("orders")
            .update({"status": status.value})
            .eq("id", order_id)
            .execute()
        )
        if not response.data:
            return None
        return self.get_order(order_id)

    def archive_orders(self, skip: frozenset[OrderStatus]) -> int:
        """Archive every order whose status is not skipped."""
        query = self.client.table("orders").update(
            {"status": OrderStatus.ARCHIVED.value}
        )
        for status in sorted(skip, key=lambda value: value.value):
            query = query.neq("status", status.value)
        response = query.execute()
        return len(response.data or [])


def parse_order_row(row: dict[str, object]) -> Order:
    """Build an order from a row, rejecting unknown statuses."""
    items = tuple(_parse_item(item) for item in row.get("order_items") or [])
    return Order(
        id=str(row["id"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        customer_name=str(row.get("customer_name") or ""),
        status=parse_status(row.get("status")),
        items=items,
        total_amount=_to_decimal(row.get("total_amount")),
    )


def _parse_item(row: dict[str, object]) -> OrderItem:
    return OrderItem(
        item_name=str(row.get("item_name", "")),
        unit_price=_to_decimal(row.get("unit_price")),
        quantity=int(row.get("quantity", 0)),
        is_sugar_free=bool(row.get("is_sugar_free", False)),
        instructions=str(row.get("instructions") or ""),
    )


def _to_decimal(value: object) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))
