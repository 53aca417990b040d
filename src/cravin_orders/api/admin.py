"""Kitchen console endpoints with simple token auth."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import (
    APIRouter,
    Depends,
    Header,
    HTTPException,
    Query,
    Request,
    status,
)

from cravin_orders.api.models import (
    AvailabilityRequest,
    PriceRequest,
    StatusUpdateRequest,
)
from cravin_orders.domain.errors import (
    InvalidTransition,
    ItemUnavailable,
    OrderNotFound,
)
from cravin_orders.domain.orders import OrderStatus
from cravin_orders.services.admin import serialize_menu_item, serialize_order

if TYPE_CHECKING:
    from cravin_orders.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])

_logger = logging.getLogger(__name__)


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/orders", dependencies=[Depends(require_admin)])
async def list_orders(
    request: Request,
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
) -> dict[str, object]:
    """Return the live order queue."""
    container: AppContainer = request.app.state.container
    return {"orders": container.admin_service.list_orders(status_filter)}


@router.get("/summary", dependencies=[Depends(require_admin)])
async def summary(request: Request) -> dict[str, object]:
    """Return counts, revenue and orders needing attention."""
    container: AppContainer = request.app.state.container
    return container.admin_service.summary()


@router.post("/orders/archive", dependencies=[Depends(require_admin)])
async def archive_orders(request: Request) -> dict[str, int]:
    """End-of-day archive of every open order."""
    container: AppContainer = request.app.state.container
    return {"archived": container.order_service.archive_all()}


@router.post("/orders/{order_id}/status", dependencies=[Depends(require_admin)])
async def update_status(
    order_id: str, body: StatusUpdateRequest, request: Request
) -> dict[str, object]:
    """Move an order to a new status."""
    container: AppContainer = request.app.state.container
    try:
        order = container.order_service.update_status(order_id, body.status)
    except OrderNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except InvalidTransition as exc:
        raise _transition_conflict(exc) from exc
    return serialize_order(order)


@router.post("/orders/{order_id}/cancel", dependencies=[Depends(require_admin)])
async def cancel_order(order_id: str, request: Request) -> dict[str, object]:
    """Cancel an order; the row stays for the customer's tracking page."""
    container: AppContainer = request.app.state.container
    try:
        order = container.order_service.cancel(order_id)
    except OrderNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except InvalidTransition as exc:
        raise _transition_conflict(exc) from exc
    return serialize_order(order)


@router.post("/menu/{item_id}/availability", dependencies=[Depends(require_admin)])
async def set_availability(
    item_id: int, body: AvailabilityRequest, request: Request
) -> dict[str, object]:
    """Mark a menu item in stock or sold out."""
    container: AppContainer = request.app.state.container
    try:
        item = container.menu_service.set_availability(item_id, body.available)
    except ItemUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return serialize_menu_item(item)


@router.post("/menu/{item_id}/price", dependencies=[Depends(require_admin)])
async def set_price(
    item_id: int, body: PriceRequest, request: Request
) -> dict[str, object]:
    """Change a live menu price."""
    container: AppContainer = request.app.state.container
    try:
        item = container.menu_service.update_price(item_id, body.price)
    except ItemUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return serialize_menu_item(item)


@router.delete("/menu/{item_id}", dependencies=[Depends(require_admin)])
async def delete_menu_item(item_id: int, request: Request) -> dict[str, str]:
    """Remove a menu item."""
    container: AppContainer = request.app.state.container
    container.menu_service.remove_item(item_id)
    _logger.info("Menu item %s removed", item_id)
    return {"status": "ok"}


def _transition_conflict(exc: InvalidTransition) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "error": "invalid_transition",
            "from": exc.from_status.value,
            "to": exc.to_status.value,
        },
    )
