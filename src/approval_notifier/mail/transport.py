"""Mail transports.

A transport sends one already-rendered message. Retrying is left to the
transport's infrastructure (the local MTA for SMTP); nothing here retries.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from approval_notifier.config import NotifierSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MailMessage:
    sender: str
    to: tuple[str, ...]
    cc: tuple[str, ...]
    subject: str
    html_body: str

    def to_email_message(self) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        if self.to:
            message["To"] = ", ".join(self.to)
        if self.cc:
            message["Cc"] = ", ".join(self.cc)
        message["Subject"] = self.subject
        message.set_content(self.html_body, subtype="html")
        return message


class MailTransport(Protocol):
    """Sends one message, raising on failure."""

    def send(self, message: MailMessage, *, timeout: float) -> None: ...


class LoggingMailTransport:
    """Write messages to the log instead of sending them."""

    def send(self, message: MailMessage, *, timeout: float) -> None:
        logger.info(
            "Mail (not sent)",
            extra={
                "to": list(message.to),
                "cc": list(message.cc),
                "subject": message.subject,
                "body_length": len(message.html_body),
            },
        )


class SmtpMailTransport:
    """Send through an SMTP relay, one connection per message."""

    def __init__(self, *, host: str, port: int) -> None:
        self._host = host
        self._port = port

    def send(self, message: MailMessage, *, timeout: float) -> None:
        recipients = [*message.to, *message.cc]
        if not recipients:
            raise ValueError("Message has no recipients")
        with smtplib.SMTP(self._host, self._port, timeout=timeout) as smtp:
            smtp.send_message(message.to_email_message(), to_addrs=recipients)


def build_transport(settings: NotifierSettings) -> MailTransport:
    if settings.mail_transport == "smtp":
        return SmtpMailTransport(host=settings.smtp_host, port=settings.smtp_port)
    return LoggingMailTransport()
