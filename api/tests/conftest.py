"""Pytest configuration and fixtures."""

import base64
import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from httpx import ASGITransport, AsyncClient

TEST_WEBHOOK_SECRET = "whsec_test-secret"
TEST_RESEND_API_KEY = "re_test_key"

_test_key = Ed25519PrivateKey.generate()
TEST_PRIVATE_KEY_B64 = base64.b64encode(
    _test_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
).decode()

# Set test environment before importing app
os.environ["TESTING"] = "1"
os.environ["POLAR_WEBHOOK_SECRET"] = TEST_WEBHOOK_SECRET
os.environ["ED25519_PRIVATE_KEY"] = TEST_PRIVATE_KEY_B64
os.environ["RESEND_API_KEY"] = TEST_RESEND_API_KEY

from license_server.main import app  # noqa: E402
from license_server.webhooks.verifier import WebhookVerifier  # noqa: E402

RESEND_URL = "https://api.resend.com/emails"


@pytest.fixture
def webhook_secret() -> str:
    return TEST_WEBHOOK_SECRET


@pytest.fixture
def public_key() -> Ed25519PublicKey:
    """Public half of the configured signing key."""
    return _test_key.public_key()


@pytest.fixture
def order_body() -> bytes:
    """The order.created body from the reference scenario."""
    return (
        b'{"type":"order.created","data":{"customer":{"email":"a@b.com"},'
        b'"created_at":"2024-01-01T00:00:00Z"}}'
    )


@pytest.fixture
def signed_headers(webhook_secret):
    """Build valid webhook headers for a body."""

    def _sign(body: bytes, msg_id: str = "msg_2abc", timestamp: int = 1704067200) -> dict[str, str]:
        return WebhookVerifier.get_headers(body, webhook_secret, msg_id, timestamp)

    return _sign


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client against the ASGI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
