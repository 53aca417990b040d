"""Menu catalog service."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from cravin_orders.domain.errors import ItemUnavailable
from cravin_orders.domain.menu import MenuItem
from cravin_orders.services.cache import Cache

_MENU_KEY = "menu:all"

_logger = logging.getLogger(__name__)


class MenuRepository(Protocol):
    """Persistence interface for menu items."""

    def list_items(self) -> list[MenuItem]:
        """Return every menu item."""

    def get_item(self, item_id: int) -> MenuItem | None:
        """Return a menu item by id, if present."""

    def set_available(self, item_id: int, available: bool) -> MenuItem | None:
        """Update availability and return the stored item."""

    def set_price(self, item_id: int, price: Decimal) -> MenuItem | None:
        """Update the price and return the stored item."""

    def delete_item(self, item_id: int) -> None:
        """Delete a menu item."""


@dataclass
class MenuService:
    """Cached menu reads plus operator edits."""

    repository: MenuRepository
    cache: Cache
    ttl_seconds: int = 300

    def list_menu(self, available_only: bool = False) -> list[MenuItem]:
        """Return the menu, served from cache while fresh."""
        cached = self.cache.get(_MENU_KEY)
        if isinstance(cached, list):
            items = cached
        else:
            items = self.repository.list_items()
            self.cache.set(_MENU_KEY, items, ttl_seconds=self.ttl_seconds)
        if available_only:
            return [item for item in items if item.available]
        return list(items)

    def get_item(self, item_id: int) -> MenuItem | None:
        """Return a menu item from the cached catalog."""
        for item in self.list_menu():
            if item.id == item_id:
                return item
        return None

    def set_availability(self, item_id: int, available: bool) -> MenuItem:
        """Mark an item in stock or sold out."""
        updated = self.repository.set_available(item_id, available)
        self.cache.delete(_MENU_KEY)
        if updated is None:
            raise ItemUnavailable(item_id, reason="not on the menu")
        _logger.info("Menu item %s available=%s", item_id, available)
        return updated

    def update_price(self, item_id: int, price: Decimal) -> MenuItem:
        """Change the live price; submitted orders keep their snapshot."""
        if price < 0:
            raise ValueError("Price cannot be negative")
        updated = self.repository.set_price(item_id, price)
        self.cache.delete(_MENU_KEY)
        if updated is None:
            raise ItemUnavailable(item_id, reason="not on the menu")
        _logger.info("Menu item %s price=%s", item_id, price)
        return updated

    def remove_item(self, item_id: int) -> None:
        """Delete a menu item."""
        self.repository.delete_item(item_id)
        self.cache.delete(_MENU_KEY)
