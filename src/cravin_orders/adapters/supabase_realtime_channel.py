"""Supabase Realtime push channel."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from supabase import AsyncClient, acreate_client

from cravin_orders.domain.errors import SyncChannelUnavailable
from cravin_orders.domain.sync import ChangeEvent, ChangeType

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseRealtimeChannel:
    """Subscribes to postgres change feeds through the async Supabase client."""

    supabase_url: str
    supabase_key: str
    schema: str = "public"
    _client: AsyncClient | None = field(default=None, init=False)
    _channels: list[object] = field(default_factory=list, init=False)

    async def subscribe(
        self,
        table: str,
        handler: Callable[[ChangeEvent], None],
        on_status: Callable[[bool], None],
    ) -> None:
        """Deliver every row change on ``table`` to ``handler``."""

        def _on_change(payload: dict[str, object]) -> None:
            event = parse_change_payload(table, payload)
            if event is not None:
                handler(event)

        def _on_subscribe(state: object, error: Exception | None = None) -> None:
            healthy = _state_name(state) == "SUBSCRIBED" and error is None
            if error is not None:
                _logger.warning("Realtime channel error on %s: %s", table, error)
            on_status(healthy)

        try:
            client = await self._get_client()
            channel = client.channel(f"cravin-{table}")
            channel.on_postgres_changes(
                "*", callback=_on_change, table=table, schema=self.schema
            )
            await channel.subscribe(_on_subscribe)
        except Exception as exc:
            raise SyncChannelUnavailable(f"Could not subscribe to {table}") from exc
        self._channels.append(channel)

    async def close(self) -> None:
        """Remove every channel opened by this adapter and drop the socket."""
        if self._client is None:
            return
        for channel in self._channels:
            try:
                await self._client.remove_channel(channel)
            except Exception:
                _logger.exception("Failed to remove realtime channel")
        self._channels.clear()
        try:
            await self._client.realtime.close()
        except Exception:
            _logger.exception("Failed to close realtime socket")
        self._client = None

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(self.supabase_url, self.supabase_key)
        return self._client


def parse_change_payload(table: str, payload: dict[str, object]) -> ChangeEvent | None:
    """Convert a realtime postgres-changes payload into a change event."""
    data = payload.get("data")
    if not isinstance(data, dict):
        data = payload
    raw_type = data.get("type") or data.get("eventType")
    try:
        event_type = ChangeType(str(raw_type).upper())
    except ValueError:
        _logger.warning("Unknown change type %r on %s", raw_type, table)
        return None
    new_row = data.get("record") or data.get("new") or {}
    old_row = data.get("old_record") or data.get("old") or {}
    return ChangeEvent(
        event_type=event_type,
        table=str(data.get("table") or table),
        new_row=dict(new_row),
        old_row=dict(old_row),
    )


def _state_name(state: object) -> str:
    return str(getattr(state, "value", state)).upper()
