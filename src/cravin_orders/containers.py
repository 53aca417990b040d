"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from cravin_orders.adapters.supabase_feedback_repository import (
    SupabaseFeedbackRepository,
)
from cravin_orders.adapters.supabase_menu_repository import SupabaseMenuRepository
from cravin_orders.adapters.supabase_order_repository import SupabaseOrderRepository
from cravin_orders.adapters.supabase_realtime_channel import SupabaseRealtimeChannel
from cravin_orders.config import Settings
from cravin_orders.services.admin import AdminService
from cravin_orders.services.cache import InMemoryCache
from cravin_orders.services.feedback import FeedbackService
from cravin_orders.services.menu import MenuService
from cravin_orders.services.orders import OrderService
from cravin_orders.services.pricing import PricingSnapshotter
from cravin_orders.services.store_bridge import (
    RepositorySnapshotSource,
    ServiceMutationWriter,
)
from cravin_orders.services.sync import SyncEngine


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    menu_service: MenuService
    order_service: OrderService
    feedback_service: FeedbackService
    admin_service: AdminService
    snapshot_source: RepositorySnapshotSource
    mutation_writer: ServiceMutationWriter
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    menu_repository = SupabaseMenuRepository(supabase_client)
    order_repository = SupabaseOrderRepository(supabase_client)
    feedback_repository = SupabaseFeedbackRepository(supabase_client)
    menu_service = MenuService(
        repository=menu_repository,
        cache=InMemoryCache(owner="menu"),
        ttl_seconds=resolved_settings.menu_cache_ttl_seconds,
    )
    order_service = OrderService(
        repository=order_repository,
        snapshotter=PricingSnapshotter(menu_repository),
        default_customer_name=resolved_settings.default_customer_name,
        partial_grace_seconds=resolved_settings.partial_order_grace_seconds,
        cancelled_visible_hours=resolved_settings.cancelled_visible_hours,
    )
    feedback_service = FeedbackService(feedback_repository)
    admin_service = AdminService(order_service)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        menu_service=menu_service,
        order_service=order_service,
        feedback_service=feedback_service,
        admin_service=admin_service,
        snapshot_source=RepositorySnapshotSource(order_service, menu_repository),
        mutation_writer=ServiceMutationWriter(order_service, menu_service),
        close_resources=close_resources,
    )


def build_sync_engine(container: AppContainer) -> SyncEngine:
    """Create a client sync engine wired to Supabase push and polling."""
    settings = container.settings
    channel = SupabaseRealtimeChannel(
        supabase_url=settings.supabase_url,
        supabase_key=settings.supabase_service_key,
    )
    return SyncEngine(
        source=container.snapshot_source,
        writer=container.mutation_writer,
        channel=channel,
        poll_interval_seconds=settings.poll_interval_seconds,
    )
