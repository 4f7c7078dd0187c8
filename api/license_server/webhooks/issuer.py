"""Webhook to license issuance pipeline."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum

from license_server.config import Settings, get_settings
from license_server.errors import DeliveryError, SigningKeyError, WebhookAuthError
from license_server.licenses.signer import LicensePayload, LicenseSigner
from license_server.notifications.email import ResendMailer
from license_server.webhooks.event import resolve_issued_at, should_issue
from license_server.webhooks.verifier import WebhookVerifier

logger = logging.getLogger(__name__)

SendLicense = Callable[[str, str, str], Awaitable[None]]


class IssuanceState(StrEnum):
    """Terminal states of one webhook request."""

    REJECTED = "rejected"
    IGNORED = "ignored"
    DELIVERED = "delivered"
    DELIVERY_FAILED = "delivery_failed"
    SIGNING_FAILED = "signing_failed"


@dataclass
class IssuanceResult:
    """Outcome of handling one webhook."""

    state: IssuanceState
    event_type: str | None = None
    email: str | None = None
    error_message: str | None = None


class LicenseIssuer:
    """Runs verify, filter, sign and deliver for one webhook at a time.

    Holds only read-only configuration, so a single instance is shared by
    all concurrent requests.
    """

    def __init__(
        self,
        webhook_secret: str,
        signing_key_b64: str,
        email_api_key: str,
        tier: str = "pro",
        send_license: SendLicense | None = None,
    ) -> None:
        self._webhook_secret = webhook_secret.encode("utf-8")
        self._signing_key_b64 = signing_key_b64
        self._email_api_key = email_api_key
        self._tier = tier
        self._send_license = send_license or ResendMailer.send_license
        self._signer: LicenseSigner | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LicenseIssuer:
        settings = settings or get_settings()
        return cls(
            webhook_secret=settings.POLAR_WEBHOOK_SECRET,
            signing_key_b64=settings.ED25519_PRIVATE_KEY,
            email_api_key=settings.RESEND_API_KEY,
            tier=settings.LICENSE_TIER,
        )

    def signer(self) -> LicenseSigner:
        """Load the signing key on first use.

        Raises:
            SigningKeyError: If the configured key is unusable
        """
        if self._signer is None:
            self._signer = LicenseSigner.from_base64(self._signing_key_b64)
        return self._signer

    async def handle(self, body: bytes, headers: Mapping[str, str]) -> IssuanceResult:
        """Process one webhook delivery to a terminal state."""
        try:
            event = WebhookVerifier.verify(body, headers, self._webhook_secret)
        except WebhookAuthError as e:
            logger.info("Rejected webhook: %s", e.reason)
            return IssuanceResult(state=IssuanceState.REJECTED, error_message=e.reason)

        if not should_issue(event):
            logger.debug("Ignoring webhook event type %s", event.type)
            return IssuanceResult(state=IssuanceState.IGNORED, event_type=event.type)

        # customer_email is guaranteed for order.created by PurchaseEvent.from_body
        email = event.customer_email or ""
        payload = LicensePayload(
            email=email,
            issued_at=resolve_issued_at(event),
            tier=self._tier,
        )

        try:
            token = self.signer().sign(payload)
        except SigningKeyError as e:
            logger.critical("License signing key is misconfigured: %s", e)
            return IssuanceResult(
                state=IssuanceState.SIGNING_FAILED,
                event_type=event.type,
                email=email,
                error_message=str(e),
            )

        logger.info("Issued %s license for %s (issued_at: %s)", payload.tier, email, payload.issued_at)

        try:
            await self._send_license(email, token, self._email_api_key)
        except DeliveryError as e:
            logger.error(
                "Failed to send license email to %s (status: %s): %s",
                email,
                e.status_code,
                e.body,
            )
            return IssuanceResult(
                state=IssuanceState.DELIVERY_FAILED,
                event_type=event.type,
                email=email,
                error_message=str(e),
            )

        return IssuanceResult(state=IssuanceState.DELIVERED, event_type=event.type, email=email)
