"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from cravin_orders.api.admin import router as admin_router
from cravin_orders.api.models import FeedbackRequest, SubmitOrderRequest
from cravin_orders.app_logging import configure_logging
from cravin_orders.containers import AppContainer
from cravin_orders.domain.cart import Variant
from cravin_orders.domain.errors import (
    EmptyCart,
    InvalidFeedback,
    ItemUnavailable,
    OrderNotFound,
    PartialOrderWrite,
)
from cravin_orders.services.admin import (
    serialize_menu_item,
    serialize_order,
    serialize_tracking,
)
from cravin_orders.services.cart import CartAggregator


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/menu")
    async def menu(
        request: Request, available_only: bool = False
    ) -> dict[str, object]:
        """Return the menu."""
        state_container: AppContainer = request.app.state.container
        items = state_container.menu_service.list_menu(available_only=available_only)
        return {"items": [serialize_menu_item(item) for item in items]}

    @app.post("/orders", status_code=status.HTTP_201_CREATED)
    async def submit_order(
        body: SubmitOrderRequest, request: Request
    ) -> dict[str, object]:
        """Build a cart from the submitted lines and place the order."""
        state_container: AppContainer = request.app.state.container
        cart = CartAggregator(state_container.menu_service)
        try:
            for line in body.lines:
                variant = Variant(sugar_free=line.sugar_free)
                for _ in range(line.quantity):
                    added = cart.add_line(line.item_id, variant)
                if line.instructions:
                    cart.set_instructions(added.key, line.instructions)
            order = state_container.order_service.submit(body.customer_name, cart)
        except ItemUnavailable as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"error": "item_unavailable", "item_id": exc.item_id},
            ) from exc
        except EmptyCart as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except PartialOrderWrite as exc:
            logger.error("Order %s needs manual correction", exc.order_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "partial_order", "order_id": exc.order_id},
            ) from exc
        return serialize_order(order)

    @app.get("/orders/{order_id}")
    async def track_order(order_id: str, request: Request) -> dict[str, object]:
        """Return live progress for a customer's order."""
        state_container: AppContainer = request.app.state.container
        try:
            tracking = state_container.order_service.track(order_id)
        except OrderNotFound as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        return serialize_tracking(tracking)

    @app.post("/feedback", status_code=status.HTTP_201_CREATED)
    async def feedback(body: FeedbackRequest, request: Request) -> dict[str, str]:
        """Store a star rating."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.feedback_service.submit(
                body.customer_name, body.rating, body.comment
            )
        except InvalidFeedback as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        return {"status": "ok"}

    return app
