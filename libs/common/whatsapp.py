"""
WhatsApp messages through the Twilio REST API.

No-ops (returns False) when Twilio credentials are not configured.
"""

from typing import Optional

import httpx

from libs.common.config import get_settings
from libs.common.errors import UpstreamNotificationError
from libs.common.logging import get_logger

logger = get_logger(__name__)


def whatsapp_address(phone: str) -> str:
    """Ensure the ``whatsapp:`` prefix Twilio expects."""
    phone = phone.strip()
    return phone if phone.startswith("whatsapp:") else f"whatsapp:{phone}"


async def send_whatsapp(
    to_phone: str,
    body: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """
    Send a WhatsApp message.

    Returns False when Twilio is not configured. Raises
    UpstreamNotificationError when Twilio rejects the request or is unreachable.
    """
    settings = get_settings()
    if not settings.whatsapp_configured:
        logger.info("Twilio not configured - skipping WhatsApp to %s", to_phone)
        return False

    url = (
        f"{settings.TWILIO_API_URL}/Accounts/"
        f"{settings.TWILIO_ACCOUNT_SID}/Messages.json"
    )
    data = {
        "From": whatsapp_address(settings.TWILIO_WHATSAPP_FROM),
        "To": whatsapp_address(to_phone),
        "Body": body,
    }
    auth = (settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)

    try:
        if client is not None:
            response = await client.post(url, data=data, auth=auth)
        else:
            async with httpx.AsyncClient(
                timeout=settings.NOTIFICATION_TIMEOUT_SECONDS
            ) as http:
                response = await http.post(url, data=data, auth=auth)
    except httpx.RequestError as e:
        raise UpstreamNotificationError("whatsapp", f"Twilio unreachable: {e}")

    if response.status_code >= 400:
        raise UpstreamNotificationError(
            "whatsapp", f"Twilio returned {response.status_code}: {response.text}"
        )

    logger.info("WhatsApp message queued for %s", to_phone)
    return True
