"""Webhook Pydantic schemas."""

from typing import Any

from pydantic import BaseModel, Field


class PolarWebhookPayload(BaseModel):
    """Outer envelope shared by every Polar webhook event."""

    type: str = Field(..., min_length=1, description="Event type (e.g., order.created)")
    data: dict[str, Any] = Field(..., description="Event-specific object")


class PolarCustomer(BaseModel):
    """Customer attached to an order."""

    email: str = Field(..., min_length=1, description="Purchaser email address")
    name: str | None = Field(None, description="Purchaser display name")


class PolarOrderData(BaseModel):
    """The `data` object of an order.created event."""

    id: str | None = Field(None, description="Polar order ID")
    customer: PolarCustomer
    created_at: str | None = Field(None, description="Order creation time (ISO 8601)")


class WebhookResponse(BaseModel):
    """Response returned to the webhook sender."""

    status: str = Field(..., description="Outcome: issued, ignored, rejected, failed")
    detail: str = Field(..., description="Human-readable outcome message")
