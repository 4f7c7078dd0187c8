from .signer import LicensePayload, LicenseSigner, decode_payload, split_token

__all__ = [
    "LicensePayload",
    "LicenseSigner",
    "decode_payload",
    "split_token",
]
