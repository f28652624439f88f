"""Send dispatch requests concurrently with isolated outcomes.

Each request is rendered and sent on its own worker. A failure is recorded in
that request's `DeliveryResult` and never cancels or delays the others.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from approval_notifier.notifications.models import DispatchRequest

from .templates import TemplateRenderer
from .transport import MailMessage, MailTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    ok: bool
    message: str
    details: dict[str, object] | None = None

    def to_json(self) -> dict[str, object]:
        return {"ok": self.ok, "message": self.message, "details": self.details or {}}


class MailDispatcher:
    def __init__(
        self,
        *,
        transport: MailTransport,
        renderer: TemplateRenderer,
        sender: str,
        max_concurrency: int = 4,
        timeout_seconds: float = 30.0,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._transport = transport
        self._renderer = renderer
        self._sender = sender
        self._max_concurrency = max_concurrency
        self._timeout_seconds = timeout_seconds

    def build_message(self, request: DispatchRequest) -> MailMessage:
        body = self._renderer.render(request.template_id, request.model)
        return MailMessage(
            sender=self._sender,
            to=request.recipients.to,
            cc=request.recipients.cc,
            subject=request.subject,
            html_body=body,
        )

    def send_one(self, request: DispatchRequest) -> DeliveryResult:
        details: dict[str, object] = {
            "rule_id": request.rule_id,
            "template_id": request.template_id,
        }
        try:
            message = self.build_message(request)
            self._transport.send(message, timeout=self._timeout_seconds)
        except Exception as e:
            logger.exception("Notification delivery failed", extra=details)
            return DeliveryResult(ok=False, message=str(e), details=details)

        logger.info("Notification delivered", extra=details)
        return DeliveryResult(ok=True, message="Sent", details=details)

    def send_all(self, requests: Sequence[DispatchRequest]) -> list[DeliveryResult]:
        """Send every request; results are returned in request order."""

        if not requests:
            return []
        workers = min(self._max_concurrency, len(requests))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mail") as pool:
            return list(pool.map(self.send_one, requests))
