"""Key management and manual token issuance.

Usage:
  markright-license keygen
  markright-license public-key
  markright-license sign-token customer@example.com [--issued-at 2026-03-10T00:00:00Z]

`public-key` and `sign-token` read the private key from ED25519_PRIVATE_KEY
(or /run/secrets/ed25519_private_key).
"""

from __future__ import annotations

import argparse
import sys

from license_server.config import read_secret
from license_server.errors import SigningKeyError
from license_server.licenses.signer import LicensePayload, LicenseSigner
from license_server.webhooks.event import utc_timestamp


def _load_signer() -> LicenseSigner:
    return LicenseSigner.from_base64(read_secret("ed25519_private_key", ""))


def cmd_keygen(args: argparse.Namespace) -> int:
    signer = LicenseSigner.generate()
    print("Ed25519 Keypair Generated")
    print("========================")
    print()
    print("Private key (base64) - store as the server's ED25519_PRIVATE_KEY secret:")
    print(f"  {signer.private_key_b64()}")
    print()
    print("Public key (base64) - embed in the desktop client:")
    print(f"  {signer.public_key_b64()}")
    return 0


def cmd_public_key(args: argparse.Namespace) -> int:
    print(_load_signer().public_key_b64())
    return 0


def cmd_sign_token(args: argparse.Namespace) -> int:
    signer = _load_signer()
    payload = LicensePayload(
        email=args.email,
        issued_at=args.issued_at or utc_timestamp(),
        tier=args.tier,
    )
    token = signer.sign(payload)

    print(f"Payload: {payload.to_json()}", file=sys.stderr)
    print(f"Email:   {payload.email}", file=sys.stderr)
    print(f"Tier:    {payload.tier}", file=sys.stderr)
    print(f"Issued:  {payload.issued_at}", file=sys.stderr)
    print(file=sys.stderr)

    # Only the token goes to stdout so it can be piped
    print(token)
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="markright-license", description=__doc__.splitlines()[0])
    sub = ap.add_subparsers(dest="command", required=True)

    keygen = sub.add_parser("keygen", help="Generate a new ed25519 keypair")
    keygen.set_defaults(func=cmd_keygen)

    public_key = sub.add_parser("public-key", help="Print the public key for the configured private key")
    public_key.set_defaults(func=cmd_public_key)

    sign = sub.add_parser("sign-token", help="Issue a license token without a webhook")
    sign.add_argument("email", help="Licensee email address")
    sign.add_argument("--issued-at", default="", help="Issue time (defaults to now, UTC)")
    sign.add_argument("--tier", default="pro")
    sign.set_defaults(func=cmd_sign_token)

    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except SigningKeyError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
