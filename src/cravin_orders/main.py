"""Kitchen display and order-tracking clients."""

import argparse
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from cravin_orders.adapters.alert_webhook_client import HttpxAlertWebhookClient
from cravin_orders.app_logging import configure_logging
from cravin_orders.containers import AppContainer, build_container, build_sync_engine
from cravin_orders.domain.orders import OrderStatus
from cravin_orders.domain.sync import ORDERS_TABLE, LocalView
from cravin_orders.services.notifications import (
    AlertSink,
    LoggingAlertSink,
    NotificationDispatcher,
)
from cravin_orders.services.orders import tracking_for
from cravin_orders.services.sync import SyncEngine

_logger = logging.getLogger(__name__)


async def attach_kitchen_alerts(
    engine: SyncEngine, sinks: list[AlertSink], seed_backlog: bool = True
) -> NotificationDispatcher:
    """Wire new-order alerts onto a kitchen client's view.

    With ``seed_backlog`` the orders already open when the client starts are
    marked as seen, so a restart mid-shift does not replay every alert.
    """
    dispatcher = NotificationDispatcher(sinks=sinks)
    if seed_backlog:
        await engine.poll(ORDERS_TABLE)
        await engine.process_pending()
        dispatcher.seed(engine.view.orders.keys())

    async def _on_view(view: LocalView) -> None:
        await dispatcher.dispatch(view.orders)

    engine.add_listener(_on_view)
    return dispatcher


@dataclass
class OrderProgressWatcher:
    """Logs customer-facing progress whenever one order's status changes."""

    order_id: str
    last_status: OrderStatus | None = field(default=None, init=False)
    closed: bool = field(default=False, init=False)

    async def __call__(self, view: LocalView) -> None:
        order = view.orders.get(self.order_id)
        if order is None:
            if self.last_status is not None and not self.closed:
                self.closed = True
                _logger.info("Order %s is no longer active", self.order_id)
            return
        if order.status is self.last_status:
            return
        self.last_status = order.status
        tracking = tracking_for(order)
        _logger.info("Order %s: %s", self.order_id, tracking.message)


async def run_kitchen(container: AppContainer) -> None:
    """Run a kitchen client until cancelled."""
    engine = build_sync_engine(container)
    sinks: list[AlertSink] = [LoggingAlertSink()]
    webhook = None
    if container.settings.kitchen_alert_webhook_url:
        webhook = HttpxAlertWebhookClient.create(
            container.settings.kitchen_alert_webhook_url
        )
        sinks.append(webhook)
    try:
        await attach_kitchen_alerts(engine, sinks)
        async with engine:
            _logger.info("Kitchen client started")
            await asyncio.Event().wait()
    finally:
        if webhook is not None:
            await webhook.close()
        await container.close_resources()


async def run_tracker(container: AppContainer, order_id: str) -> None:
    """Follow one order's progress until cancelled."""
    engine = build_sync_engine(container)
    engine.tables = (ORDERS_TABLE,)
    engine.add_listener(OrderProgressWatcher(order_id))
    try:
        async with engine:
            await asyncio.Event().wait()
    finally:
        await container.close_resources()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cravin-orders")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("kitchen", help="Run a kitchen display client")
    track = commands.add_parser("track", help="Follow one order's progress")
    track.add_argument("order_id")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Command line entry point."""
    args = build_parser().parse_args(argv)
    configure_logging()
    container = build_container()
    try:
        if args.command == "kitchen":
            asyncio.run(run_kitchen(container))
        else:
            asyncio.run(run_tracker(container, args.order_id))
    except KeyboardInterrupt:
        _logger.info("Stopped")


if __name__ == "__main__":
    main()
