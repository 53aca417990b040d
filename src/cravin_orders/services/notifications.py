"""New-order alerts for kitchen clients."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from cravin_orders.domain.orders import Order

_logger = logging.getLogger(__name__)


class AlertSink(Protocol):
    """Destination for new-order alerts."""

    async def new_order(self, order: Order) -> None:
        """Announce one newly appeared order."""


@dataclass
class LoggingAlertSink:
    """Alert sink that writes to the application log."""

    async def new_order(self, order: Order) -> None:
        suffix = " (no items stored)" if order.is_partial else ""
        _logger.info(
            "New order! %s for %s, %s items%s",
            order.id,
            order.customer_name,
            sum(item.quantity for item in order.items),
            suffix,
        )


@dataclass
class NotificationDispatcher:
    """Fires exactly one alert per order id that appears in the view.

    The same order arrives many times (push insert, then every poll until it
    leaves the active view), so alerts are derived from the difference between
    consecutive id sets rather than from individual events.
    """

    sinks: list[AlertSink] = field(default_factory=list)
    _previous_ids: set[str] = field(default_factory=set, init=False)

    def seed(self, order_ids: Iterable[str]) -> None:
        """Treat these ids as already seen."""
        self._previous_ids = set(order_ids)

    def diff(self, current_ids: Iterable[str]) -> set[str]:
        """Return ids not present last time and remember the current set."""
        current = set(current_ids)
        new_ids = current - self._previous_ids
        self._previous_ids = current
        return new_ids

    async def dispatch(self, orders: Mapping[str, Order]) -> list[Order]:
        """Alert on new orders in an ``id -> order`` view."""
        new_ids = self.diff(orders.keys())
        fresh = sorted(
            (orders[order_id] for order_id in new_ids),
            key=lambda order: order.created_at,
        )
        for order in fresh:
            for sink in self.sinks:
                try:
                    await sink.new_order(order)
                except Exception:
                    _logger.exception(
                        "Failed to deliver new order alert",
                        extra={"order_id": order.id},
                    )
        return fresh
