"""Tests for container wiring."""

import asyncio

from cravin_orders.adapters.supabase_realtime_channel import SupabaseRealtimeChannel
from cravin_orders.containers import build_container, build_sync_engine


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.order_service is not None
    assert container.menu_service.ttl_seconds == settings.menu_cache_ttl_seconds
    asyncio.run(container.close_resources())


def test_build_sync_engine_uses_settings(settings) -> None:
    container = build_container(settings)

    engine = build_sync_engine(container)

    assert isinstance(engine.channel, SupabaseRealtimeChannel)
    assert engine.poll_interval_seconds == settings.poll_interval_seconds
    assert engine.source is container.snapshot_source
