"""Order lifecycle service."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Protocol

from cravin_orders.domain.errors import EmptyCart, OrderNotFound, PartialOrderWrite
from cravin_orders.domain.orders import Order, OrderItem, OrderStatus
from cravin_orders.services.cart import CartAggregator
from cravin_orders.services.order_state import OrderStateMachine
from cravin_orders.services.pricing import PricingSnapshotter, order_total

_logger = logging.getLogger(__name__)

TRACKING_STEPS: tuple[tuple[OrderStatus, str], ...] = (
    (OrderStatus.SENT, "Sent"),
    (OrderStatus.PREPARING, "Brewing"),
    (OrderStatus.READY, "Ready"),
)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class OrderRepository(Protocol):
    """Persistence interface for orders."""

    def create_order(
        self, customer_name: str, status: OrderStatus, total_amount: Decimal
    ) -> Order:
        """Insert an order header and return it without items."""

    def create_order_items(self, order_id: str, items: tuple[OrderItem, ...]) -> None:
        """Insert item rows for an order."""

    def get_order(self, order_id: str) -> Order | None:
        """Return an order with its items, if present."""

    def list_active_orders(self, cancelled_since: datetime) -> list[Order]:
        """Return unarchived orders, leaving out those cancelled before the cutoff."""

    def update_status(self, order_id: str, status: OrderStatus) -> Order | None:
        """Set the status of one order and return it."""

    def archive_orders(self, skip: frozenset[OrderStatus]) -> int:
        """Archive every order whose status is not in ``skip``."""


@dataclass(frozen=True)
class OrderTracking:
    """Customer-facing progress for one order."""

    order: Order
    steps: tuple[str, ...]
    current_step: int | None
    message: str


@dataclass
class OrderService:
    """Creates orders and drives their status."""

    repository: OrderRepository
    snapshotter: PricingSnapshotter
    state_machine: OrderStateMachine = field(default_factory=OrderStateMachine)
    default_customer_name: str = "Friend"
    partial_grace_seconds: int = 30
    cancelled_visible_hours: int = 12
    clock: Callable[[], datetime] = field(default=_utc_now)

    def submit(self, customer_name: str | None, cart: CartAggregator) -> Order:
        """Snapshot the cart into a new order in status SENT."""
        if cart.is_empty:
            raise EmptyCart("Cannot place an order with an empty cart")
        name = (customer_name or "").strip() or self.default_customer_name
        items = self.snapshotter.snapshot(cart.lines())
        order = self.repository.create_order(
            customer_name=name,
            status=OrderStatus.SENT,
            total_amount=order_total(items),
        )
        try:
            self.repository.create_order_items(order.id, items)
        except Exception as exc:
            _logger.exception(
                "Order items were not saved", extra={"order_id": order.id}
            )
            raise PartialOrderWrite(order.id) from exc
        cart.clear()
        _logger.info(
            "Order %s placed by %s, total %s", order.id, name, order.total_amount
        )
        return replace(order, items=items)

    def get_order(self, order_id: str) -> Order:
        order = self.repository.get_order(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def list_active(self, now: datetime | None = None) -> list[Order]:
        """Return the active view.

        Cancelled orders stay visible for tracking until they are older than
        ``cancelled_visible_hours``; archiving never touches them.
        """
        cutoff = (now or self.clock()) - timedelta(hours=self.cancelled_visible_hours)
        return self.repository.list_active_orders(cancelled_since=cutoff)

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """Apply a validated status change; repeats are no-ops."""
        order = self.get_order(order_id)
        if not self.state_machine.validate(order.status, status):
            return order
        updated = self.repository.update_status(order_id, status)
        if updated is None:
            raise OrderNotFound(order_id)
        _logger.info(
            "Order %s moved %s -> %s", order_id, order.status.value, status.value
        )
        return updated

    def advance(self, order_id: str) -> Order:
        """Move an order one step along the forward path."""
        order = self.get_order(order_id)
        target = self.state_machine.next_step(order.status)
        if target is None:
            return order
        return self.update_status(order_id, target)

    def cancel(self, order_id: str) -> Order:
        """Cancel an order, keeping the row for the customer's tracking view."""
        return self.update_status(order_id, OrderStatus.CANCELLED)

    def archive_all(self) -> int:
        """End-of-day archive of every order not already terminal."""
        count = self.repository.archive_orders(
            skip=frozenset({OrderStatus.ARCHIVED, OrderStatus.CANCELLED})
        )
        _logger.info("Archived %s orders", count)
        return count

    def track(self, order_id: str) -> OrderTracking:
        """Return customer progress for an order."""
        return tracking_for(self.get_order(order_id))

    def find_partial_orders(
        self, orders: Iterable[Order], now: datetime | None = None
    ) -> list[Order]:
        """Return persisted orders that never received their items.

        Orders younger than the grace period are skipped because the item
        rows are written right after the header.
        """
        cutoff = (now or self.clock()) - timedelta(
            seconds=self.partial_grace_seconds
        )
        partial = [
            order
            for order in orders
            if order.is_partial and order.created_at <= cutoff
        ]
        for order in partial:
            _logger.warning("Order %s has no items", order.id)
        return partial


def tracking_for(order: Order) -> OrderTracking:
    labels = tuple(label for _, label in TRACKING_STEPS)
    statuses = [status for status, _ in TRACKING_STEPS]
    if order.status is OrderStatus.CANCELLED:
        return OrderTracking(
            order=order,
            steps=labels,
            current_step=None,
            message="This order was cancelled. Please check with the counter.",
        )
    if order.status in statuses:
        current = statuses.index(order.status)
    else:
        current = len(statuses) - 1
    if order.status is OrderStatus.READY:
        message = "Your chai is ready! Please pick it up at the counter."
    elif order.status in {OrderStatus.DELIVERED, OrderStatus.ARCHIVED}:
        message = "Order collected. Enjoy!"
    else:
        message = "Sit tight! We've received your order and the kitchen is on it."
    return OrderTracking(
        order=order, steps=labels, current_step=current, message=message
    )
