"""Webhook receiver router."""

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from license_server.config import get_settings
from license_server.webhooks.issuer import IssuanceState, LicenseIssuer
from license_server.webhooks.schemas import WebhookResponse

settings = get_settings()
router = APIRouter(prefix="/webhook", tags=["webhooks"])

# Terminal state -> (HTTP status, response status, detail)
OUTCOME_RESPONSES: dict[IssuanceState, tuple[int, str, str]] = {
    IssuanceState.REJECTED: (401, "rejected", "Invalid webhook signature"),
    IssuanceState.IGNORED: (200, "ignored", "Ignored event type"),
    IssuanceState.DELIVERED: (200, "issued", "License issued"),
    IssuanceState.DELIVERY_FAILED: (500, "failed", "Email delivery failed"),
    IssuanceState.SIGNING_FAILED: (500, "failed", "License signing unavailable"),
}


@lru_cache
def get_license_issuer() -> LicenseIssuer:
    """Shared issuer built from settings."""
    return LicenseIssuer.from_settings(settings)


@router.post(
    "/{provider}",
    response_model=WebhookResponse,
    responses={401: {"model": WebhookResponse}, 500: {"model": WebhookResponse}},
)
async def receive_webhook(
    provider: str,
    request: Request,
    issuer: LicenseIssuer = Depends(get_license_issuer),
):
    """Receive a purchase webhook and issue a license for new orders.

    The body is read raw: the signature covers the exact bytes sent.
    """
    if provider != settings.WEBHOOK_PROVIDER:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    body = await request.body()
    result = await issuer.handle(body, request.headers)

    status_code, outcome, detail = OUTCOME_RESPONSES[result.state]
    return JSONResponse(
        status_code=status_code,
        content=WebhookResponse(status=outcome, detail=detail).model_dump(),
    )
