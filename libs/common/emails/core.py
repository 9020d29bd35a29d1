"""
Core email sending over SMTP.
"""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional, Sequence, Union

from libs.common.config import get_settings
from libs.common.errors import UpstreamNotificationError
from libs.common.logging import get_logger

logger = get_logger(__name__)


def _build_message(
    recipients: list[str],
    subject: str,
    body: str,
    html_body: Optional[str],
    sender: str,
) -> Union[MIMEMultipart, MIMEText]:
    if html_body:
        msg = MIMEMultipart("alternative")
        msg.attach(MIMEText(body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
    else:
        msg = MIMEText(body, "plain", "utf-8")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = ", ".join(recipients)
    return msg


def _deliver(recipients: list[str], msg, sender_email: str, timeout: float) -> None:
    settings = get_settings()
    if settings.SMTP_SECURE:
        server = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=timeout)
    else:
        server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=timeout)
    with server:
        if not settings.SMTP_SECURE:
            server.starttls()
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.sendmail(sender_email, recipients, msg.as_string())


async def send_email(
    to_email: Union[str, Sequence[str]],
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    from_email: Optional[str] = None,
    from_name: Optional[str] = None,
) -> bool:
    """
    Send an email over SMTP.

    Returns True when the message was handed to the server and False when
    SMTP is not configured (the send is skipped). Delivery failures raise
    UpstreamNotificationError.
    """
    settings = get_settings()
    recipients = [to_email] if isinstance(to_email, str) else [e for e in to_email if e]

    if not recipients:
        return False

    if not settings.smtp_configured:
        logger.info(
            "SMTP not configured - skipping email to %s: %s",
            ", ".join(recipients),
            subject,
        )
        logger.debug("Email body: %s...", body[:200])
        return False

    sender_email = from_email or settings.DEFAULT_FROM_EMAIL
    sender = formataddr((from_name or settings.DEFAULT_FROM_NAME, sender_email))
    msg = _build_message(recipients, subject, body, html_body, sender)

    logger.info("Sending email to %s: %s", ", ".join(recipients), subject)
    try:
        await asyncio.to_thread(
            _deliver,
            recipients,
            msg,
            sender_email,
            settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
    except smtplib.SMTPAuthenticationError as e:
        raise UpstreamNotificationError("email", f"SMTP authentication failed: {e}")
    except (smtplib.SMTPException, OSError) as e:
        raise UpstreamNotificationError("email", f"{type(e).__name__}: {e}")

    logger.info("Email sent successfully to %s", ", ".join(recipients))
    return True
