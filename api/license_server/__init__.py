"""MarkRight license issuance server."""

__version__ = "1.0.0"
