"""Inbound webhook verification (Standard Webhooks, HMAC-SHA256)."""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import time
from collections.abc import Mapping

from license_server.errors import MissingHeadersError, SignatureMismatchError
from license_server.webhooks.event import PurchaseEvent

logger = logging.getLogger(__name__)

# Header names in lookup order: generic Standard Webhooks first, then Svix
ID_HEADERS = ("webhook-id", "svix-id")
TIMESTAMP_HEADERS = ("webhook-timestamp", "svix-timestamp")
SIGNATURE_HEADERS = ("webhook-signature", "svix-signature")


def _to_bytes(value: bytes | str) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def _first_header(headers: Mapping[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        value = headers.get(name)
        if value:
            return value
    return ""


class WebhookVerifier:
    """Verifies webhook bodies signed by the payment provider."""

    SIGNATURE_PREFIX = "v1,"

    @staticmethod
    def compute_signature(
        msg_id: str,
        timestamp: str,
        body: bytes | str,
        secret: bytes | str,
    ) -> str:
        """
        Compute the expected base64 HMAC-SHA256 for a webhook.

        The MAC covers `id + "." + timestamp + "." + body`. The secret is
        used as raw bytes, exactly as configured.

        Returns:
            The base64-encoded MAC, without a scheme prefix
        """
        message = f"{msg_id}.{timestamp}.".encode() + _to_bytes(body)
        digest = hmac.new(_to_bytes(secret), message, hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")

    @staticmethod
    def verify(
        body: bytes | str,
        headers: Mapping[str, str],
        secret: bytes | str,
    ) -> PurchaseEvent:
        """
        Authenticate a webhook and parse its body.

        Args:
            body: The raw request body, exactly as received
            headers: Request headers; names are matched case-insensitively
            secret: The shared webhook secret

        Returns:
            The parsed PurchaseEvent

        Raises:
            MissingHeadersError: If id, timestamp or signature is absent
            SignatureMismatchError: If no signature entry matches
            MalformedPayloadError: If the authenticated body is malformed
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        msg_id = _first_header(lowered, ID_HEADERS)
        msg_timestamp = _first_header(lowered, TIMESTAMP_HEADERS)
        msg_signature = _first_header(lowered, SIGNATURE_HEADERS)

        if not msg_id or not msg_timestamp or not msg_signature:
            raise MissingHeadersError("Missing webhook signature headers")

        expected = WebhookVerifier.compute_signature(msg_id, msg_timestamp, body, secret)

        # Several entries may be present while the provider rotates secrets
        for entry in msg_signature.split():
            value = entry.removeprefix(WebhookVerifier.SIGNATURE_PREFIX)
            if hmac.compare_digest(value.encode("utf-8"), expected.encode("ascii")):
                break
        else:
            raise SignatureMismatchError("Webhook signature mismatch")

        logger.debug("Verified webhook %s", msg_id)
        return PurchaseEvent.from_body(body)

    @staticmethod
    def get_headers(
        body: bytes | str,
        secret: bytes | str,
        msg_id: str,
        timestamp: int | None = None,
    ) -> dict[str, str]:
        """
        Generate the Standard Webhooks headers a provider would send.

        Args:
            body: The JSON body string
            secret: The shared secret key
            msg_id: The webhook message ID
            timestamp: Unix timestamp (defaults to current time)

        Returns:
            Dictionary of HTTP headers
        """
        if timestamp is None:
            timestamp = int(time.time())

        signature = WebhookVerifier.compute_signature(msg_id, str(timestamp), body, secret)

        return {
            "Content-Type": "application/json",
            "webhook-id": msg_id,
            "webhook-timestamp": str(timestamp),
            "webhook-signature": f"{WebhookVerifier.SIGNATURE_PREFIX}{signature}",
        }
