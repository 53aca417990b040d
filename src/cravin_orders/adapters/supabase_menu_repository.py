"""Supabase repository for menu items."""

from dataclasses import dataclass
from decimal import Decimal

from supabase import Client

from cravin_orders.domain.menu import MenuItem
from cravin_orders.services.menu import MenuRepository

_MENU_COLUMNS = "id, name, category, price, available, sugar_free_capable"


@dataclass
class SupabaseMenuRepository(MenuRepository):
    """Supabase implementation for menu items."""

    client: Client

    def list_items(self) -> list[MenuItem]:
        """Return every menu item ordered by id."""
        response = (
            self.client.table("menu_items")
            .select(_MENU_COLUMNS)
            .order("id", desc=False)
            .execute()
        )
        return [parse_menu_row(row) for row in response.data or []]

    def get_item(self, item_id: int) -> MenuItem | None:
        """Return a menu item by id, if present."""
        response = (
            self.client.table("menu_items")
            .select(_MENU_COLUMNS)
            .eq("id", item_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_menu_row(response.data[0])

    def set_available(self, item_id: int, available: bool) -> MenuItem | None:
        """Update availability for a menu item."""
        return self._update(item_id, {"available": available})

    def set_price(self, item_id: int, price: Decimal) -> MenuItem | None:
        """Update the live price for a menu item."""
        return self._update(item_id, {"price": float(price)})

    def delete_item(self, item_id: int) -> None:
        """Delete a menu item."""
        self.client.table("menu_items").delete().eq("id", item_id).execute()

    def _update(self, item_id: int, payload: dict[str, object]) -> MenuItem | None:
        response = (
            self.client.table("menu_items").update(payload).eq("id", item_id).execute()
        )
        if not response.data:
            return None
        return parse_menu_row(response.data[0])


def parse_menu_row(row: dict[str, object]) -> MenuItem:
    return MenuItem(
        id=int(row["id"]),
        name=str(row.get("name", "")),
        category=str(row.get("category", "")),
        price=Decimal(str(row.get("price", 0))),
        available=bool(row.get("available", True)),
        sugar_free_capable=bool(row.get("sugar_free_capable", True)),
    )
