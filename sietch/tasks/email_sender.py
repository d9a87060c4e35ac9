"""SMTP delivery for group notifications.

Messages are plain text. Port 465 uses implicit TLS; any other port upgrades
with STARTTLS. With no ``smtp_host`` configured nothing is sent.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from sietch.config import settings

logger = logging.getLogger(__name__)

SMTPS_PORT = 465


def build_message(to: str, subject: str, body: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = settings.smtp_from
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)
    return message


def _open_connection() -> smtplib.SMTP:
    if settings.smtp_port == SMTPS_PORT:
        return smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port)
    server = smtplib.SMTP(settings.smtp_host, settings.smtp_port)
    server.starttls()
    return server


def deliver(message: EmailMessage) -> bool:
    """Blocking send. Returns False when SMTP is not configured."""
    if not settings.smtp_host:
        logger.warning("SMTP not configured; dropping email: %s", message["Subject"])
        return False
    with _open_connection() as server:
        if settings.smtp_user:
            server.login(settings.smtp_user, settings.smtp_password)
        server.send_message(message)
    logger.info("Email sent: %s", message["Subject"])
    return True


async def send_email(to: str, subject: str, body: str) -> None:
    """Deliver in a worker thread; errors are logged, never raised to the caller."""
    message = build_message(to, subject, body)
    try:
        await asyncio.get_running_loop().run_in_executor(None, deliver, message)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email (%s): %s", subject, exc)
