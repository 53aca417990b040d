"""Domain errors for ordering and synchronization."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cravin_orders.domain.orders import OrderStatus
    from cravin_orders.domain.sync import Mutation


class OrderingError(Exception):
    """Base class for ordering errors."""


class ItemUnavailable(OrderingError):
    """Raised when a menu item cannot be ordered."""

    def __init__(self, item_id: int, reason: str = "unavailable") -> None:
        super().__init__(f"Menu item {item_id} is {reason}")
        self.item_id = item_id


class VariantUnavailable(ItemUnavailable):
    """Raised when a variant is requested for an item that cannot make it."""

    def __init__(self, item_id: int) -> None:
        super().__init__(item_id, reason="not available sugar-free")


class CartLineNotFound(OrderingError, KeyError):
    """Raised when a cart key does not match any line."""


class EmptyCart(OrderingError):
    """Raised when submitting a cart without lines."""


class InvalidTransition(OrderingError):
    """Raised when a status change is not in the transition table."""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus) -> None:
        super().__init__(
            f"Cannot move order from {from_status.value} to {to_status.value}"
        )
        self.from_status = from_status
        self.to_status = to_status


class OrderNotFound(OrderingError):
    """Raised when an order id is unknown to the store."""


class UnknownOrderStatus(OrderingError, ValueError):
    """Raised when the store returns a status outside the enum."""


class PartialOrderWrite(OrderingError):
    """Order header persisted without its items; needs manual correction."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order {order_id} was saved without items")
        self.order_id = order_id


class SyncChannelUnavailable(OrderingError):
    """Raised when the push channel cannot subscribe."""


class WriteFailed(OrderingError):
    """Raised when a durable write for a mutation did not succeed."""

    def __init__(self, mutation: Mutation) -> None:
        super().__init__(f"Durable write failed for {mutation!r}")
        self.mutation = mutation


class InvalidFeedback(OrderingError, ValueError):
    """Raised when feedback fails validation."""
