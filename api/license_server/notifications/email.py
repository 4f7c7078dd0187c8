"""License delivery through the Resend email API."""

import logging

import httpx

from license_server.config import get_settings
from license_server.errors import DeliveryError

settings = get_settings()
logger = logging.getLogger(__name__)

LICENSE_EMAIL_TEMPLATE = """
<div style="font-family: system-ui, sans-serif; max-width: 560px; margin: 0 auto; padding: 32px 16px;">
  <h1 style="font-size: 20px; margin-bottom: 8px;">Thank you for supporting MarkRight!</h1>
  <p style="color: #555; margin-bottom: 24px;">Your Pro license key is below. This unlocks cross-file search and all future Pro features.</p>

  <div style="background: #f5f5f5; border: 1px solid #ddd; border-radius: 8px; padding: 16px; margin-bottom: 24px;">
    <p style="font-size: 12px; color: #888; margin: 0 0 8px;">License Key</p>
    <code style="font-size: 11px; word-break: break-all; display: block; line-height: 1.4;">{token}</code>
  </div>

  <h2 style="font-size: 16px; margin-bottom: 12px;">How to activate</h2>
  <ol style="color: #555; padding-left: 20px; line-height: 1.8;">
    <li>Open MarkRight and go to <strong>Settings</strong> (gear icon or Ctrl+,)</li>
    <li>Scroll to the <strong>License</strong> section</li>
    <li>Paste your license key and click <strong>Activate</strong></li>
  </ol>

  <p style="color: #999; font-size: 12px; margin-top: 24px;">
    Alternatively, save the key as <code>license.key</code> in your config directory:<br/>
    Linux: <code>~/.config/markright/license.key</code><br/>
    macOS: <code>~/Library/Application Support/markright/license.key</code><br/>
    Windows: <code>%APPDATA%\\markright\\license.key</code>
  </p>
</div>"""


def render_license_email(token: str) -> str:
    """Render the license email body. The token is inserted byte-for-byte."""
    return LICENSE_EMAIL_TEMPLATE.replace("{token}", token)


class ResendMailer:
    """Sends license emails via Resend."""

    API_URL = settings.RESEND_API_URL

    @classmethod
    def build_message(cls, to: str, token: str) -> dict:
        """Build the JSON body for the Resend /emails endpoint."""
        return {
            "from": settings.EMAIL_FROM,
            "to": [to],
            "subject": settings.EMAIL_SUBJECT,
            "html": render_license_email(token),
        }

    @classmethod
    async def send_license(cls, to: str, token: str, api_key: str) -> None:
        """
        Email a license token to the purchaser.

        Args:
            to: Recipient email address
            token: The signed license token
            api_key: Resend API key

        Raises:
            DeliveryError: If Resend answers non-2xx or cannot be reached
        """
        try:
            async with httpx.AsyncClient(timeout=settings.EMAIL_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    cls.API_URL,
                    json=cls.build_message(to, token),
                    headers={"Authorization": f"Bearer {api_key}"},
                )
        except httpx.TimeoutException as e:
            raise DeliveryError(None, "Request timeout") from e
        except httpx.RequestError as e:
            raise DeliveryError(None, str(e)[:500]) from e

        if not 200 <= response.status_code < 300:
            raise DeliveryError(response.status_code, response.text[:500])

        logger.info("License email accepted by Resend for %s", to)
