"""Price snapshots taken when an order is submitted."""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from cravin_orders.domain.cart import CartLine
from cravin_orders.domain.errors import ItemUnavailable
from cravin_orders.domain.orders import OrderItem
from cravin_orders.services.cart import MenuCatalog


@dataclass
class PricingSnapshotter:
    """Copies item name and price out of the live menu."""

    catalog: MenuCatalog

    def snapshot(self, lines: Iterable[CartLine]) -> tuple[OrderItem, ...]:
        """Freeze each cart line into an order item."""
        items: list[OrderItem] = []
        for line in lines:
            menu_item = self.catalog.get_item(line.item_id)
            if menu_item is None:
                raise ItemUnavailable(line.item_id, reason="not on the menu")
            if not menu_item.available:
                raise ItemUnavailable(line.item_id)
            items.append(
                OrderItem(
                    item_name=menu_item.name,
                    unit_price=menu_item.price,
                    quantity=line.quantity,
                    is_sugar_free=line.variant.sugar_free,
                    instructions=line.instructions,
                )
            )
        return tuple(items)


def order_total(items: Iterable[OrderItem]) -> Decimal:
    """Sum of snapshot price times quantity."""
    return sum((item.line_total for item in items), Decimal("0"))
