"""Order status state machine."""

from dataclasses import dataclass

from cravin_orders.domain.errors import InvalidTransition
from cravin_orders.domain.orders import OrderStatus

TERMINAL_STATUSES = frozenset({OrderStatus.ARCHIVED, OrderStatus.CANCELLED})

_FORWARD = {
    OrderStatus.SENT: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.DELIVERED,
}

_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.SENT: frozenset(
        {OrderStatus.PREPARING, OrderStatus.CANCELLED, OrderStatus.ARCHIVED}
    ),
    OrderStatus.PREPARING: frozenset(
        {OrderStatus.READY, OrderStatus.CANCELLED, OrderStatus.ARCHIVED}
    ),
    OrderStatus.READY: frozenset(
        {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.ARCHIVED}
    ),
    OrderStatus.DELIVERED: frozenset({OrderStatus.ARCHIVED}),
    OrderStatus.ARCHIVED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class OrderStateMachine:
    """Validates order status transitions."""

    def validate(self, current: OrderStatus, target: OrderStatus) -> bool:
        """Return True when the move changes state, False for a no-op.

        Re-applying the current status is accepted so that operators acting on
        a stale view do not see errors for commands that already happened.
        """
        if current is target:
            return False
        if target not in _TRANSITIONS[current]:
            raise InvalidTransition(current, target)
        return True

    def allowed_targets(self, current: OrderStatus) -> frozenset[OrderStatus]:
        return _TRANSITIONS[current]

    def next_step(self, current: OrderStatus) -> OrderStatus | None:
        """Return the single forward step, if the order has one."""
        return _FORWARD.get(current)

    def is_terminal(self, status: OrderStatus) -> bool:
        return status in TERMINAL_STATUSES

    def can_archive(self, status: OrderStatus) -> bool:
        return OrderStatus.ARCHIVED in _TRANSITIONS[status]
