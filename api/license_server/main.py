"""MarkRight License Server - Main application."""

import logging

from fastapi import FastAPI

from license_server import __version__
from license_server.config import get_settings
from license_server.webhooks.router import router as webhooks_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="MarkRight License Server",
    description="""
## License Issuance API

Issues signed MarkRight Pro license keys for completed purchases.

### Flow

1. Polar delivers an `order.created` webhook to `/webhook/polar`
2. The Standard Webhooks HMAC signature is verified
3. An ed25519-signed license token is minted for the customer
4. The token is emailed to the customer via Resend

Other event types are acknowledged with `200` and ignored.
    """,
    version=__version__,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
)

app.include_router(webhooks_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "MarkRight License Server",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
