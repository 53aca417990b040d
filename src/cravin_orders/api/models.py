"""Request models for the HTTP API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from cravin_orders.domain.orders import OrderStatus


class CartLineRequest(BaseModel):
    """One cart line as sent by a customer device."""

    item_id: int
    quantity: int = Field(default=1, ge=1)
    sugar_free: bool = False
    instructions: str | None = None


class SubmitOrderRequest(BaseModel):
    """Cart submission payload."""

    customer_name: str | None = None
    lines: list[CartLineRequest]


class StatusUpdateRequest(BaseModel):
    """Operator status command."""

    status: OrderStatus


class AvailabilityRequest(BaseModel):
    available: bool


class PriceRequest(BaseModel):
    price: Decimal = Field(ge=0)


class FeedbackRequest(BaseModel):
    """Star rating left after an order."""

    customer_name: str | None = None
    rating: int = Field(ge=1, le=5)
    comment: str | None = None
