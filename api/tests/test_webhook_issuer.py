"""Tests for the LicenseIssuer state machine."""

import base64
import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from license_server.errors import DeliveryError
from license_server.licenses.signer import LicenseSigner, decode_payload, split_token
from license_server.webhooks.issuer import IssuanceState, LicenseIssuer
from license_server.webhooks.verifier import WebhookVerifier

SECRET = "whsec_issuer-secret"


@pytest.fixture
def signer():
    return LicenseSigner.generate()


@pytest.fixture
def send_license():
    return AsyncMock(return_value=None)


@pytest.fixture
def issuer(signer, send_license):
    return LicenseIssuer(
        webhook_secret=SECRET,
        signing_key_b64=signer.private_key_b64(),
        email_api_key="re_key",
        send_license=send_license,
    )


def _signed(body: bytes, msg_id: str = "msg_1") -> dict[str, str]:
    return WebhookVerifier.get_headers(body, SECRET, msg_id, 1704067200)


ORDER = b'{"type":"order.created","data":{"customer":{"email":"a@b.com"},"created_at":"2024-01-01T00:00:00Z"}}'


class TestIssuanceStates:
    """Each path ends in exactly one terminal state."""

    @pytest.mark.asyncio
    async def test_order_is_issued_and_delivered(self, issuer, signer, send_license):
        result = await issuer.handle(ORDER, _signed(ORDER))

        assert result.state == IssuanceState.DELIVERED
        assert result.email == "a@b.com"
        send_license.assert_awaited_once()

        to, token, api_key = send_license.await_args.args
        assert to == "a@b.com"
        assert api_key == "re_key"

        payload_b64, sig_b64 = split_token(token)
        payload = decode_payload(payload_b64)
        assert (payload.email, payload.issued_at, payload.tier) == ("a@b.com", "2024-01-01T00:00:00Z", "pro")
        Ed25519PublicKey.from_public_bytes(base64.b64decode(signer.public_key_b64())).verify(
            base64.b64decode(sig_b64), payload_b64.encode()
        )

    @pytest.mark.asyncio
    async def test_rejected_without_side_effects(self, issuer, send_license):
        headers = _signed(ORDER)
        headers["webhook-signature"] = "v1,AAAA"

        with patch.object(LicenseSigner, "sign") as sign:
            result = await issuer.handle(ORDER, headers)

        assert result.state == IssuanceState.REJECTED
        assert result.error_message == "signature_mismatch"
        sign.assert_not_called()
        send_license.assert_not_awaited()

    @pytest.mark.parametrize("missing", ["webhook-id", "webhook-timestamp", "webhook-signature"])
    @pytest.mark.asyncio
    async def test_missing_header_rejected(self, issuer, send_license, missing):
        headers = _signed(ORDER)
        del headers[missing]

        with patch.object(LicenseSigner, "sign") as sign:
            result = await issuer.handle(ORDER, headers)

        assert result.state == IssuanceState.REJECTED
        sign.assert_not_called()
        send_license.assert_not_awaited()

    @pytest.mark.parametrize("event_type", ["order.refunded", "checkout.created", "subscription.active"])
    @pytest.mark.asyncio
    async def test_other_event_types_ignored(self, issuer, send_license, event_type):
        body = json.dumps({"type": event_type, "data": {"id": "x"}}).encode()

        with patch.object(LicenseSigner, "sign") as sign:
            result = await issuer.handle(body, _signed(body))

        assert result.state == IssuanceState.IGNORED
        assert result.event_type == event_type
        sign.assert_not_called()
        send_license.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delivery_failure(self, issuer, send_license):
        send_license.side_effect = DeliveryError(500, "internal")

        result = await issuer.handle(ORDER, _signed(ORDER))

        assert result.state == IssuanceState.DELIVERY_FAILED
        assert "500" in result.error_message

    @pytest.mark.asyncio
    async def test_invalid_signing_key_fails_without_email(self, send_license):
        issuer = LicenseIssuer(
            webhook_secret=SECRET,
            signing_key_b64="bm90LWEta2V5",
            email_api_key="re_key",
            send_license=send_license,
        )

        result = await issuer.handle(ORDER, _signed(ORDER))

        assert result.state == IssuanceState.SIGNING_FAILED
        send_license.assert_not_awaited()


class TestIssuedAtFallback:
    """issued_at when the order carries no created_at."""

    @pytest.mark.asyncio
    async def test_issued_at_defaults_to_request_time(self, issuer, send_license):
        body = b'{"type":"order.created","data":{"customer":{"email":"a@b.com"}}}'
        now = datetime(2026, 3, 10, 12, 0, 0, tzinfo=UTC)

        with patch("license_server.webhooks.event.datetime") as mock_datetime:
            mock_datetime.now.return_value = now
            result = await issuer.handle(body, _signed(body))

        assert result.state == IssuanceState.DELIVERED
        token = send_license.await_args.args[1]
        assert decode_payload(split_token(token)[0]).issued_at == "2026-03-10T12:00:00Z"

    @pytest.mark.asyncio
    async def test_redelivered_webhook_is_issued_again(self, issuer, send_license):
        await issuer.handle(ORDER, _signed(ORDER))
        await issuer.handle(ORDER, _signed(ORDER))

        assert send_license.await_count == 2


class TestIssuerFromSettings:
    """Construction from application settings."""

    def test_from_settings_uses_configured_secrets(self, webhook_secret):
        issuer = LicenseIssuer.from_settings()

        assert issuer.signer().public_key_b64()
        assert issuer._webhook_secret == webhook_secret.encode()
