"""Client-side synchronization of orders and menu items.

Every client keeps a ``LocalView`` fed by two independent producers: the push
channel (row change events) and a poll loop that re-reads the active view on a
fixed interval regardless of push health. Optimistic mutations are a third
input. All three go through one queue and a single consumer applies them, so
the view only ever has one writer.

Incoming authoritative records replace the local copy outright, ordered by when
their read against the store started rather than by when they reach the queue.
Every read takes a mark from a monotonic counter; a record read under an older
mark never overwrites or drops one read under a newer mark. A slow poll that
began before an order was inserted therefore cannot evict the order its push
event already delivered.

An optimistic guess that the store rejects is not rolled back; the next
authoritative record for that id supersedes it.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Protocol

from cravin_orders.domain.errors import (
    OrderingError,
    SyncChannelUnavailable,
    WriteFailed,
)
from cravin_orders.domain.menu import MenuItem
from cravin_orders.domain.orders import Order, OrderStatus
from cravin_orders.domain.sync import (
    MENU_TABLE,
    ORDERS_TABLE,
    ChangeEvent,
    ChangeType,
    LocalView,
    MenuAvailabilityChange,
    Mutation,
    OrderStatusChange,
)

_logger = logging.getLogger(__name__)

Record = Order | MenuItem
ViewListener = Callable[[LocalView], Awaitable[None]]
EventHandler = Callable[[ChangeEvent], None]


class SnapshotSource(Protocol):
    """Authoritative reads used by the poll channel."""

    def poll(self, table: str) -> list[Record]:
        """Return the full active view of a table."""

    def fetch(self, table: str, record_id: object) -> Record | None:
        """Return one record by id, if present."""


class PushChannel(Protocol):
    """Per-table change-feed subscription."""

    async def subscribe(
        self,
        table: str,
        handler: EventHandler,
        on_status: Callable[[bool], None],
    ) -> None:
        """Start delivering change events for a table."""

    async def close(self) -> None:
        """Tear down all subscriptions."""


class MutationWriter(Protocol):
    """Durable write path for operator mutations."""

    def write(self, mutation: Mutation) -> None:
        """Persist a mutation or raise."""


def is_active(table: str, record: Record) -> bool:
    """Whether a record belongs in the active view."""
    if table == ORDERS_TABLE and isinstance(record, Order):
        return record.status is not OrderStatus.ARCHIVED
    return True


def apply_optimistic(view: LocalView, mutation: Mutation) -> LocalView:
    """Apply a local guess for a mutation; unknown ids are ignored."""
    if isinstance(mutation, OrderStatusChange):
        order = view.orders.get(mutation.order_id)
        if order is None:
            return view
        return apply_change(
            view,
            ORDERS_TABLE,
            mutation.order_id,
            replace(order, status=mutation.status),
        )
    if isinstance(mutation, MenuAvailabilityChange):
        item = view.menu_items.get(mutation.item_id)
        if item is None:
            return view
        return apply_change(
            view,
            MENU_TABLE,
            mutation.item_id,
            replace(item, available=mutation.available),
        )
    raise TypeError(f"Unsupported mutation: {mutation!r}")


def apply_change(
    view: LocalView, table: str, record_id: object, record: Record | None
) -> LocalView:
    """Replace or drop one record by id."""
    records = dict(_records(view, table))
    if record is None or not is_active(table, record):
        records.pop(record_id, None)
    else:
        records[record_id] = record
    return _with_records(view, table, records)


def reconcile(view: LocalView, table: str, snapshot: Iterable[Record]) -> LocalView:
    """Merge an authoritative snapshot of the active view.

    Records in the snapshot replace the local copy. Ids held locally but
    absent from the snapshot have left the active view and are dropped.
    """
    fresh = {record.id: record for record in snapshot if is_active(table, record)}
    records = dict(_records(view, table))
    for record_id in set(records) - set(fresh):
        del records[record_id]
    records.update(fresh)
    return _with_records(view, table, records)


def _records(view: LocalView, table: str) -> Mapping[object, Record]:
    if table == ORDERS_TABLE:
        return view.orders
    if table == MENU_TABLE:
        return view.menu_items
    raise ValueError(f"Unknown table: {table}")


def _with_records(
    view: LocalView, table: str, records: dict[object, Record]
) -> LocalView:
    frozen = MappingProxyType(records)
    if table == ORDERS_TABLE:
        return replace(view, orders=frozen)
    return replace(view, menu_items=frozen)


@dataclass(frozen=True)
class _SnapshotUpdate:
    table: str
    records: tuple[Record, ...]
    read_mark: int


@dataclass(frozen=True)
class _ChangeUpdate:
    table: str
    record_id: object
    record: Record | None
    read_mark: int


@dataclass(frozen=True)
class _OptimisticUpdate:
    mutation: Mutation


_Update = _SnapshotUpdate | _ChangeUpdate | _OptimisticUpdate


@dataclass
class SyncEngine:
    """Keeps one client's view consistent with the store."""

    source: SnapshotSource
    writer: MutationWriter
    channel: PushChannel | None = None
    tables: tuple[str, ...] = (ORDERS_TABLE, MENU_TABLE)
    poll_interval_seconds: float = 3.0
    view: LocalView = field(default_factory=LocalView, init=False)
    push_healthy: bool = field(default=False, init=False)
    _queue: "asyncio.Queue[_Update]" = field(
        default_factory=asyncio.Queue, init=False
    )
    _listeners: list[ViewListener] = field(default_factory=list, init=False)
    _tasks: list[asyncio.Task] = field(default_factory=list, init=False)
    _fetches: set[asyncio.Task] = field(default_factory=set, init=False)
    _reads_started: int = field(default=0, init=False)
    _reads_in_flight: set[int] = field(default_factory=set, init=False)
    _read_marks: dict[tuple[str, object], int] = field(
        default_factory=dict, init=False
    )

    def add_listener(self, listener: ViewListener) -> None:
        """Run ``listener`` with the new view after every applied update."""
        self._listeners.append(listener)

    def get_item(self, item_id: int) -> MenuItem | None:
        return self.view.menu_items.get(item_id)

    def get_order(self, order_id: str) -> Order | None:
        return self.view.orders.get(order_id)

    async def start(self) -> None:
        """Start the consumer, push subscriptions and the poll loop."""
        self._tasks.append(asyncio.create_task(self.run()))
        if self.channel is not None:
            for table in self.tables:
                await self.subscribe(table)
        self._tasks.append(asyncio.create_task(self._poll_loop()))

    async def stop(self) -> None:
        """Cancel background work and close the push channel."""
        tasks = [*self._tasks, *self._fetches]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._fetches.clear()
        if self.channel is not None:
            await self.channel.close()
        self.push_healthy = False

    async def __aenter__(self) -> "SyncEngine":
        await self.start()
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.stop()

    async def subscribe(
        self, table: str, handler: EventHandler | None = None
    ) -> bool:
        """Register a push listener; returns False when push is unavailable."""
        if self.channel is None:
            return False
        try:
            await self.channel.subscribe(
                table, handler or self.handle_event, self._set_push_health
            )
        except SyncChannelUnavailable:
            _logger.warning(
                "Push channel unavailable for %s, relying on polling", table
            )
            self.push_healthy = False
            return False
        return True

    def handle_event(self, event: ChangeEvent) -> None:
        """Queue one change event from the push channel.

        Change-feed rows do not carry embedded order items, so inserts and
        updates are re-read through the snapshot source before queuing.
        """
        record_id = event.record_id
        if record_id is None:
            _logger.warning("Ignoring change event without id on %s", event.table)
            return
        mark = self._begin_read()
        if event.event_type is ChangeType.DELETE:
            self._queue.put_nowait(_ChangeUpdate(event.table, record_id, None, mark))
            return
        task = asyncio.get_running_loop().create_task(
            self._fetch_and_queue(event.table, record_id, mark)
        )
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)

    async def poll(self, table: str) -> list[Record]:
        """Fetch the active view of a table and queue it for reconciliation."""
        mark = self._begin_read()
        try:
            records = await asyncio.to_thread(self.source.poll, table)
        except Exception:
            self._reads_in_flight.discard(mark)
            raise
        self._queue.put_nowait(_SnapshotUpdate(table, tuple(records), mark))
        return records

    async def mutate(self, mutation: Mutation) -> None:
        """Apply a mutation locally, then write it to the store.

        A failed write is raised to the caller but the optimistic state stays
        until the next authoritative update for that record.
        """
        self._queue.put_nowait(_OptimisticUpdate(mutation))
        try:
            await asyncio.to_thread(self.writer.write, mutation)
        except OrderingError:
            _logger.warning("Mutation rejected: %r", mutation)
            raise
        except Exception as exc:
            _logger.exception("Durable write failed", extra={"mutation": mutation})
            raise WriteFailed(mutation) from exc

    async def run(self) -> None:
        """Consume queued updates forever."""
        while True:
            update = await self._queue.get()
            try:
                await self._apply(update)
            finally:
                self._queue.task_done()

    async def process_pending(self) -> int:
        """Apply every queued update inline and return how many ran."""
        await asyncio.gather(*self._fetches, return_exceptions=True)
        count = 0
        while not self._queue.empty():
            update = self._queue.get_nowait()
            try:
                await self._apply(update)
            finally:
                self._queue.task_done()
            count += 1
        return count

    async def _apply(self, update: _Update) -> None:
        if isinstance(update, _SnapshotUpdate):
            self.view = self._apply_snapshot(update)
            self._finish_read(update.read_mark)
        elif isinstance(update, _ChangeUpdate):
            key = (update.table, update.record_id)
            if self._read_marks.get(key, 0) > update.read_mark:
                _logger.debug("Skipping stale change for %s %s", *key)
            else:
                self._read_marks[key] = update.read_mark
                self.view = apply_change(
                    self.view, update.table, update.record_id, update.record
                )
            self._finish_read(update.read_mark)
        else:
            self.view = apply_optimistic(self.view, update.mutation)
        for listener in self._listeners:
            try:
                await listener(self.view)
            except Exception:
                _logger.exception("View listener failed")

    def _apply_snapshot(self, update: _SnapshotUpdate) -> LocalView:
        """Reconcile a snapshot, keeping ids already refreshed by a newer read."""
        current = _records(self.view, update.table)
        newer = {
            record_id
            for (table, record_id), mark in self._read_marks.items()
            if table == update.table and mark > update.read_mark
        }
        records = [record for record in update.records if record.id not in newer]
        records.extend(
            current[record_id] for record_id in newer if record_id in current
        )
        touched = {record.id for record in update.records} | set(current)
        for record_id in touched - newer:
            self._read_marks[(update.table, record_id)] = update.read_mark
        return reconcile(self.view, update.table, records)

    def _begin_read(self) -> int:
        self._reads_started += 1
        self._reads_in_flight.add(self._reads_started)
        return self._reads_started

    def _finish_read(self, mark: int) -> None:
        # Marks older than every read still in flight can no longer lose a race.
        self._reads_in_flight.discard(mark)
        oldest = min(self._reads_in_flight, default=self._reads_started + 1)
        for key, seen in list(self._read_marks.items()):
            if seen < oldest:
                del self._read_marks[key]

    async def _fetch_and_queue(
        self, table: str, record_id: object, mark: int
    ) -> None:
        try:
            record = await asyncio.to_thread(self.source.fetch, table, record_id)
        except Exception:
            self._reads_in_flight.discard(mark)
            _logger.exception(
                "Failed to read pushed record", extra={"table": table}
            )
            return
        self._queue.put_nowait(_ChangeUpdate(table, record_id, record, mark))

    async def _poll_loop(self) -> None:
        while True:
            for table in self.tables:
                try:
                    await self.poll(table)
                except Exception:
                    _logger.exception("Poll failed", extra={"table": table})
            await asyncio.sleep(self.poll_interval_seconds)

    def _set_push_health(self, healthy: bool) -> None:
        if healthy != self.push_healthy:
            _logger.info("Push channel healthy=%s", healthy)
        self.push_healthy = healthy
