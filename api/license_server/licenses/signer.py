"""License token signing with ed25519."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import asdict, dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from license_server.errors import SigningKeyError

PRIVATE_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64
TOKEN_SEPARATOR = "."


@dataclass(frozen=True)
class LicensePayload:
    """The signed content of a license token."""

    email: str
    issued_at: str
    tier: str = "pro"

    def to_json(self) -> str:
        """Compact JSON with fields in email, issued_at, tier order."""
        return json.dumps(asdict(self), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: bytes | str) -> LicensePayload:
        data = json.loads(raw)
        return cls(email=data["email"], issued_at=data["issued_at"], tier=data["tier"])


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def encode_payload(payload: LicensePayload) -> str:
    """Base64 of the payload's UTF-8 JSON; this string is what gets signed."""
    return b64encode(payload.to_json().encode("utf-8"))


def decode_payload(payload_b64: str) -> LicensePayload:
    """Decode the left half of a token back into a LicensePayload."""
    return LicensePayload.from_json(base64.b64decode(payload_b64, validate=True))


def split_token(token: str) -> tuple[str, str]:
    """Split a token into (payload_b64, signature_b64)."""
    payload_b64, sep, sig_b64 = token.partition(TOKEN_SEPARATOR)
    if not sep or not payload_b64 or not sig_b64:
        raise ValueError("Invalid token format")
    return payload_b64, sig_b64


class LicenseSigner:
    """Signs license payloads into `payload_b64.signature_b64` tokens.

    The signature covers the UTF-8 bytes of the base64 payload string, not
    the JSON it encodes, so a verifier never has to reproduce our JSON
    formatting. ed25519 signatures are deterministic and canonically
    encoded, which a strict verifier requires.
    """

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key = private_key

    @classmethod
    def from_base64(cls, private_key_b64: str) -> LicenseSigner:
        """
        Build a signer from a base64-encoded 32-byte ed25519 seed.

        Raises:
            SigningKeyError: If the key is missing, not base64, or the wrong length
        """
        if not private_key_b64:
            raise SigningKeyError("ED25519_PRIVATE_KEY is not configured")
        try:
            seed = base64.b64decode(private_key_b64.strip(), validate=True)
        except binascii.Error as e:
            raise SigningKeyError("ED25519_PRIVATE_KEY is not valid base64") from e
        if len(seed) != PRIVATE_KEY_LENGTH:
            raise SigningKeyError(
                f"ED25519_PRIVATE_KEY must decode to {PRIVATE_KEY_LENGTH} bytes, got {len(seed)}"
            )
        return cls(Ed25519PrivateKey.from_private_bytes(seed))

    @classmethod
    def generate(cls) -> LicenseSigner:
        """Create a signer around a freshly generated key."""
        return cls(Ed25519PrivateKey.generate())

    def sign(self, payload: LicensePayload) -> str:
        """Produce the license token for a payload."""
        payload_b64 = encode_payload(payload)
        signature = self._private_key.sign(payload_b64.encode("utf-8"))
        return f"{payload_b64}{TOKEN_SEPARATOR}{b64encode(signature)}"

    def private_key_b64(self) -> str:
        raw = self._private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return b64encode(raw)

    def public_key_b64(self) -> str:
        """The base64 public key the desktop client embeds."""
        raw = self._private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return b64encode(raw)
