"""Mail boundary: render dispatch requests and hand them to a transport.

Nothing in here decides who is notified; it only delivers what the rule engine
produced.
"""

from approval_notifier.mail.dispatcher import DeliveryResult, MailDispatcher
from approval_notifier.mail.templates import TemplateNotFoundError, TemplateRenderer
from approval_notifier.mail.transport import (
    LoggingMailTransport,
    MailMessage,
    MailTransport,
    SmtpMailTransport,
    build_transport,
)

__all__ = [
    "DeliveryResult",
    "LoggingMailTransport",
    "MailDispatcher",
    "MailMessage",
    "MailTransport",
    "SmtpMailTransport",
    "TemplateNotFoundError",
    "TemplateRenderer",
    "build_transport",
]
