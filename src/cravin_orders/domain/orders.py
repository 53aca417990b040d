"""Order domain models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from cravin_orders.domain.errors import UnknownOrderStatus


class OrderStatus(str, Enum):
    """Closed set of order statuses."""

    SENT = "sent"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    ARCHIVED = "archived"
    CANCELLED = "cancelled"


def parse_status(raw: object) -> OrderStatus:
    """Parse a stored status string, rejecting unknown values."""
    try:
        return OrderStatus(str(raw).lower())
    except ValueError as exc:
        raise UnknownOrderStatus(f"Unknown order status: {raw!r}") from exc


@dataclass(frozen=True)
class OrderItem:
    """Item snapshot frozen at submission time."""

    item_name: str
    unit_price: Decimal
    quantity: int
    is_sugar_free: bool = False
    instructions: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Order:
    """A submitted order. Only ``status`` changes after creation."""

    id: str
    created_at: datetime
    customer_name: str
    status: OrderStatus
    items: tuple[OrderItem, ...]
    total_amount: Decimal

    @property
    def is_partial(self) -> bool:
        """True when the header exists but no item rows were stored."""
        return not self.items
