"""Exception hierarchy for license issuance."""

from __future__ import annotations


class LicenseServerError(Exception):
    """Base class for all license server errors."""


class WebhookAuthError(LicenseServerError):
    """The inbound webhook could not be authenticated.

    Subclasses record which check failed for logging only; callers must
    answer every one of them with the same 401 response.
    """

    reason = "unauthenticated"


class MissingHeadersError(WebhookAuthError):
    """One of the id, timestamp or signature headers is absent."""

    reason = "missing_headers"


class SignatureMismatchError(WebhookAuthError):
    """No signature entry matched the expected HMAC."""

    reason = "signature_mismatch"


class MalformedPayloadError(WebhookAuthError):
    """The authenticated body is not a well-formed purchase event."""

    reason = "malformed_payload"


class SigningKeyError(LicenseServerError):
    """The configured ed25519 private key is unusable."""


class DeliveryError(LicenseServerError):
    """The email provider rejected or never received the send request."""

    def __init__(self, status_code: int | None, body: str | None) -> None:
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"Email delivery failed: {body}"
        else:
            message = f"Resend API error ({status_code}): {body}"
        super().__init__(message)
