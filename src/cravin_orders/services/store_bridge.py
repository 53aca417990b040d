"""Repository-backed read and write paths for the sync engine."""

from dataclasses import dataclass

from cravin_orders.domain.sync import (
    MENU_TABLE,
    ORDERS_TABLE,
    MenuAvailabilityChange,
    Mutation,
    OrderStatusChange,
)
from cravin_orders.services.menu import MenuRepository, MenuService
from cravin_orders.services.orders import OrderService
from cravin_orders.services.sync import Record


@dataclass
class RepositorySnapshotSource:
    """Reads the active view from the store, bypassing the menu cache."""

    order_service: OrderService
    menu_repository: MenuRepository

    def poll(self, table: str) -> list[Record]:
        if table == ORDERS_TABLE:
            return list(self.order_service.list_active())
        if table == MENU_TABLE:
            return list(self.menu_repository.list_items())
        raise ValueError(f"Unknown table: {table}")

    def fetch(self, table: str, record_id: object) -> Record | None:
        if table == ORDERS_TABLE:
            return self.order_service.repository.get_order(str(record_id))
        if table == MENU_TABLE:
            return self.menu_repository.get_item(int(str(record_id)))
        raise ValueError(f"Unknown table: {table}")


@dataclass
class ServiceMutationWriter:
    """Sends mutations through the validating services."""

    order_service: OrderService
    menu_service: MenuService

    def write(self, mutation: Mutation) -> None:
        if isinstance(mutation, OrderStatusChange):
            self.order_service.update_status(mutation.order_id, mutation.status)
        elif isinstance(mutation, MenuAvailabilityChange):
            self.menu_service.set_availability(mutation.item_id, mutation.available)
        else:
            raise TypeError(f"Unsupported mutation: {mutation!r}")
