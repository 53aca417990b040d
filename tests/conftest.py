"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from cravin_orders.config import Settings
from cravin_orders.containers import AppContainer
from cravin_orders.domain.errors import SyncChannelUnavailable
from cravin_orders.domain.feedback import Feedback
from cravin_orders.domain.menu import MenuItem
from cravin_orders.domain.orders import Order, OrderItem, OrderStatus
from cravin_orders.domain.sync import MENU_TABLE, ORDERS_TABLE, ChangeEvent, Mutation
from cravin_orders.services.admin import AdminService
from cravin_orders.services.cache import InMemoryCache
from cravin_orders.services.feedback import FeedbackRepository, FeedbackService
from cravin_orders.services.menu import MenuRepository, MenuService
from cravin_orders.services.orders import OrderRepository, OrderService
from cravin_orders.services.pricing import PricingSnapshotter
from cravin_orders.services.store_bridge import (
    RepositorySnapshotSource,
    ServiceMutationWriter,
)
from cravin_orders.services.sync import Record

BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=UTC)


def make_menu() -> dict[int, MenuItem]:
    return {
        1: MenuItem(id=1, name="Masala Chai", category="Chai", price=Decimal("2.50")),
        2: MenuItem(
            id=2,
            name="Samosa",
            category="Snacks",
            price=Decimal("1.75"),
            sugar_free_capable=False,
        ),
        3: MenuItem(
            id=3,
            name="Saffron Chai",
            category="Chai",
            price=Decimal("3.00"),
            available=False,
        ),
    }


def make_order(
    order_id: str = "order-1",
    status: OrderStatus = OrderStatus.SENT,
    created_at: datetime = BASE_TIME,
    items: tuple[OrderItem, ...] | None = None,
    customer_name: str = "Asha",
) -> Order:
    if items is None:
        items = (
            OrderItem(item_name="Masala Chai", unit_price=Decimal("2.50"), quantity=2),
        )
    return Order(
        id=order_id,
        created_at=created_at,
        customer_name=customer_name,
        status=status,
        items=items,
        total_amount=sum((item.line_total for item in items), Decimal("0")),
    )


@dataclass
class InMemoryMenuRepository(MenuRepository):
    """In-memory menu repository for tests."""

    items: dict[int, MenuItem] = field(default_factory=make_menu)
    list_calls: int = 0

    def list_items(self) -> list[MenuItem]:
        self.list_calls += 1
        return [self.items[item_id] for item_id in sorted(self.items)]

    def get_item(self, item_id: int) -> MenuItem | None:
        return self.items.get(item_id)

    def set_available(self, item_id: int, available: bool) -> MenuItem | None:
        return self._update(item_id, available=available)

    def set_price(self, item_id: int, price: Decimal) -> MenuItem | None:
        return self._update(item_id, price=price)

    def delete_item(self, item_id: int) -> None:
        self.items.pop(item_id, None)

    def _update(self, item_id: int, **changes: object) -> MenuItem | None:
        item = self.items.get(item_id)
        if item is None:
            return None
        updated = replace(item, **changes)
        self.items[item_id] = updated
        return updated


@dataclass
class InMemoryOrderRepository(OrderRepository):
    """In-memory order repository for tests."""

    orders: dict[str, Order] = field(default_factory=dict)
    fail_items: bool = False
    clock: datetime = BASE_TIME

    def create_order(
        self, customer_name: str, status: OrderStatus, total_amount: Decimal
    ) -> Order:
        order = Order(
            id=str(uuid4()),
            created_at=self.clock,
            customer_name=customer_name,
            status=status,
            items=(),
            total_amount=total_amount,
        )
        self.orders[order.id] = order
        self.clock += timedelta(seconds=1)
        return order

    def create_order_items(self, order_id: str, items: tuple[OrderItem, ...]) -> None:
        if self.fail_items:
            raise RuntimeError("insert failed")
        self.orders[order_id] = replace(self.orders[order_id], items=items)

    def get_order(self, order_id: str) -> Order | None:
        return self.orders.get(order_id)

    def list_active_orders(self, cancelled_since: datetime) -> list[Order]:
        active = [
            order
            for order in self.orders.values()
            if order.status is not OrderStatus.ARCHIVED
            and not (
                order.status is OrderStatus.CANCELLED
                and order.created_at < cancelled_since
            )
        ]
        return sorted(active, key=lambda order: order.created_at, reverse=True)

    def update_status(self, order_id: str, status: OrderStatus) -> Order | None:
        order = self.orders.get(order_id)
        if order is None:
            return None
        updated = replace(order, status=status)
        self.orders[order_id] = updated
        return updated

    def archive_orders(self, skip: frozenset[OrderStatus]) -> int:
        count = 0
        for order_id, order in list(self.orders.items()):
            if order.status in skip:
                continue
            self.orders[order_id] = replace(order, status=OrderStatus.ARCHIVED)
            count += 1
        return count

    def add(self, order: Order) -> Order:
        self.orders[order.id] = order
        return order


@dataclass
class InMemoryFeedbackRepository(FeedbackRepository):
    """In-memory feedback repository for tests."""

    entries: list[Feedback] = field(default_factory=list)

    def create_feedback(self, feedback: Feedback) -> None:
        self.entries.append(feedback)


@dataclass
class FakeSource:
    """Snapshot source backed by plain dictionaries."""

    orders: dict[str, Order] = field(default_factory=dict)
    menu_items: dict[int, MenuItem] = field(default_factory=dict)
    fetches: list[tuple[str, object]] = field(default_factory=list)

    def poll(self, table: str) -> list[Record]:
        if table == ORDERS_TABLE:
            return [
                order
                for order in self.orders.values()
                if order.status is not OrderStatus.ARCHIVED
            ]
        if table == MENU_TABLE:
            return list(self.menu_items.values())
        raise ValueError(table)

    def fetch(self, table: str, record_id: object) -> Record | None:
        self.fetches.append((table, record_id))
        if table == ORDERS_TABLE:
            return self.orders.get(str(record_id))
        return self.menu_items.get(int(str(record_id)))


@dataclass
class FakeWriter:
    """Mutation writer that records writes and can be told to fail."""

    written: list[Mutation] = field(default_factory=list)
    error: Exception | None = None

    def write(self, mutation: Mutation) -> None:
        if self.error is not None:
            raise self.error
        self.written.append(mutation)


@dataclass
class FakeChannel:
    """Push channel that lets tests emit events by hand."""

    handlers: dict[str, object] = field(default_factory=dict)
    status_callbacks: list[object] = field(default_factory=list)
    unavailable: bool = False
    closed: bool = False

    async def subscribe(  # type: ignore[no-untyped-def]
        self, table, handler, on_status
    ) -> None:
        if self.unavailable:
            raise SyncChannelUnavailable(table)
        self.handlers[table] = handler
        self.status_callbacks.append(on_status)
        on_status(True)

    async def close(self) -> None:
        self.closed = True

    def emit(self, event: ChangeEvent) -> None:
        self.handlers[event.table](event)  # type: ignore[operator]


@dataclass
class RecordingSink:
    """Alert sink that remembers every order it was given."""

    orders: list[Order] = field(default_factory=list)

    async def new_order(self, order: Order) -> None:
        self.orders.append(order)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="aaa.bbb.ccc",
        admin_token="admin-token",
    )


@pytest.fixture
def menu_repository() -> InMemoryMenuRepository:
    return InMemoryMenuRepository()


@pytest.fixture
def order_repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def menu_service(menu_repository: InMemoryMenuRepository) -> MenuService:
    return MenuService(repository=menu_repository, cache=InMemoryCache(owner="menu"))


@pytest.fixture
def order_service(
    order_repository: InMemoryOrderRepository,
    menu_repository: InMemoryMenuRepository,
) -> OrderService:
    return OrderService(
        repository=order_repository,
        snapshotter=PricingSnapshotter(menu_repository),
        clock=lambda: BASE_TIME + timedelta(hours=1),
    )


@pytest.fixture
def container(
    settings: Settings,
    menu_repository: InMemoryMenuRepository,
    menu_service: MenuService,
    order_service: OrderService,
) -> AppContainer:
    feedback_service = FeedbackService(InMemoryFeedbackRepository())

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        menu_service=menu_service,
        order_service=order_service,
        feedback_service=feedback_service,
        admin_service=AdminService(order_service),
        snapshot_source=RepositorySnapshotSource(order_service, menu_repository),
        mutation_writer=ServiceMutationWriter(order_service, menu_service),
        close_resources=close_resources,
    )
