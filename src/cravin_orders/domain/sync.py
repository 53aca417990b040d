"""Models shared by the sync engine and its channels."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from cravin_orders.domain.menu import MenuItem
from cravin_orders.domain.orders import Order, OrderStatus

ORDERS_TABLE = "orders"
MENU_TABLE = "menu_items"


class ChangeType(str, Enum):
    """Change-feed event types."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """One row change delivered by the push channel."""

    event_type: ChangeType
    table: str
    new_row: dict[str, object]
    old_row: dict[str, object] = field(default_factory=dict)

    @property
    def record_id(self) -> object:
        row = self.old_row if self.event_type is ChangeType.DELETE else self.new_row
        return row.get("id")


@dataclass(frozen=True)
class LocalView:
    """A client's view of orders and menu items, keyed by id."""

    orders: Mapping[str, Order] = field(
        default_factory=lambda: MappingProxyType({})
    )
    menu_items: Mapping[int, MenuItem] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(frozen=True)
class OrderStatusChange:
    """Operator command to move an order to a new status."""

    order_id: str
    status: OrderStatus


@dataclass(frozen=True)
class MenuAvailabilityChange:
    """Operator command to mark an item in or out of stock."""

    item_id: int
    available: bool


Mutation = OrderStatusChange | MenuAvailabilityChange
