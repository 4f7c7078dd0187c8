"""Purchase event data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import ValidationError

from license_server.errors import MalformedPayloadError
from license_server.webhooks.schemas import PolarOrderData, PolarWebhookPayload

# The only event type that mints a license
ORDER_CREATED = "order.created"


@dataclass(frozen=True)
class PurchaseEvent:
    """Normalized view of an authenticated webhook body."""

    type: str
    customer_email: str | None = None
    created_at: str | None = None

    @classmethod
    def from_body(cls, body: bytes | str) -> PurchaseEvent:
        """
        Parse a webhook body strictly.

        Every event must be a JSON object with a string `type` and an
        object `data`. For order.created the customer email is required.

        Raises:
            MalformedPayloadError: If the body does not match that shape
        """
        try:
            envelope = PolarWebhookPayload.model_validate_json(body)
            if envelope.type != ORDER_CREATED:
                return cls(type=envelope.type)
            order = PolarOrderData.model_validate(envelope.data)
        except ValidationError as e:
            raise MalformedPayloadError(f"Invalid webhook payload: {e.error_count()} error(s)") from e

        return cls(
            type=envelope.type,
            customer_email=order.customer.email,
            created_at=order.created_at,
        )


def should_issue(event: PurchaseEvent) -> bool:
    """Check whether the event should mint a license."""
    return event.type == ORDER_CREATED


def utc_timestamp(now: datetime | None = None) -> str:
    """Format a UTC time as YYYY-MM-DDTHH:MM:SSZ."""
    if now is None:
        now = datetime.now(UTC)
    return now.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def resolve_issued_at(event: PurchaseEvent, now: datetime | None = None) -> str:
    """Use the order's created_at, falling back to the current time."""
    if event.created_at:
        return event.created_at
    return utc_timestamp(now)
