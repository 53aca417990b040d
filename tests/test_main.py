"""Tests for the kitchen and tracking clients."""

import asyncio

import pytest

from cravin_orders import main as main_module
from cravin_orders.domain.orders import OrderStatus
from cravin_orders.domain.sync import LocalView, OrderStatusChange
from cravin_orders.main import OrderProgressWatcher, build_parser
from cravin_orders.services.sync import SyncEngine, apply_change
from tests.conftest import FakeChannel, make_order


def test_parser_commands() -> None:
    parser = build_parser()

    assert parser.parse_args(["kitchen"]).command == "kitchen"
    track = parser.parse_args(["track", "order-1"])
    assert track.command == "track"
    assert track.order_id == "order-1"
    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_progress_watcher_follows_status_changes() -> None:
    watcher = OrderProgressWatcher("a")
    view = apply_change(LocalView(), "orders", "a", make_order("a"))
    ready = apply_change(
        view, "orders", "a", make_order("a", status=OrderStatus.READY)
    )

    async def scenario() -> None:
        await watcher(LocalView())
        assert watcher.last_status is None
        await watcher(view)
        assert watcher.last_status is OrderStatus.SENT
        await watcher(ready)
        assert watcher.last_status is OrderStatus.READY
        await watcher(LocalView())

    asyncio.run(scenario())

    assert watcher.closed


def test_run_kitchen_alerts_and_shuts_down(
    container, order_repository, monkeypatch
) -> None:
    order_repository.add(make_order("backlog"))
    channel = FakeChannel()
    engine = SyncEngine(
        source=container.snapshot_source,
        writer=container.mutation_writer,
        channel=channel,
        poll_interval_seconds=0.01,
    )
    monkeypatch.setattr(main_module, "build_sync_engine", lambda _container: engine)
    closed: list[bool] = []

    async def close_resources() -> None:
        closed.append(True)

    container.close_resources = close_resources

    async def scenario() -> None:
        task = asyncio.create_task(main_module.run_kitchen(container))
        for _ in range(100):
            if channel.handlers:
                break
            await asyncio.sleep(0.01)
        await engine.mutate(OrderStatusChange("backlog", OrderStatus.PREPARING))
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert order_repository.orders["backlog"].status is OrderStatus.PREPARING
    assert channel.closed
    assert closed == [True]
