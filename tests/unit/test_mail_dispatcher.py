"""Unit tests for template rendering and concurrent mail delivery."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from unittest.mock import Mock

import pytest

from approval_notifier.config import PACKAGED_TEMPLATES_PATH
from approval_notifier.mail.dispatcher import MailDispatcher
from approval_notifier.mail.templates import TemplateNotFoundError, TemplateRenderer
from approval_notifier.mail.transport import LoggingMailTransport, MailMessage, MailTransport
from approval_notifier.notifications.models import DispatchRequest, EmailRecipients
from approval_notifier.notifications.registry import default_registry


def _request(rule_id: str, template_id: str = "note") -> DispatchRequest:
    return DispatchRequest(
        rule_id=rule_id,
        recipients=EmailRecipients.of(to=[f"{rule_id}@example.org"], cc=["cc@example.org"]),
        template_id=template_id,
        subject=f"Subject {rule_id}",
        model={"reference": "WR-1", "title": "<b>Fence</b>"},
    )


@pytest.fixture
def renderer(tmp_path: Path) -> TemplateRenderer:
    template = "<p>{{ reference }}: {{ title }}{{ unknown }}</p>"
    (tmp_path / "note.html").write_text(template, encoding="utf-8")
    return TemplateRenderer(tmp_path)


def test_renderer_escapes_values_and_blanks_undefined_names(renderer) -> None:
    body = renderer.render("note", {"reference": "WR-1", "title": "<b>Fence</b>"})
    assert body == "<p>WR-1: &lt;b&gt;Fence&lt;/b&gt;</p>"


def test_renderer_missing_template(renderer) -> None:
    with pytest.raises(TemplateNotFoundError):
        renderer.render("absent", {})
    with pytest.raises(TemplateNotFoundError):
        renderer.render("../etc/passwd", {})


def test_packaged_templates_cover_every_rule() -> None:
    for rule in default_registry():
        assert (PACKAGED_TEMPLATES_PATH / f"{rule.template}.html").exists(), rule.rule_id


def test_send_all_returns_results_in_request_order(renderer) -> None:
    transport = Mock(spec=MailTransport)
    dispatcher = MailDispatcher(
        transport=transport, renderer=renderer, sender="from@example.org", max_concurrency=2
    )

    results = dispatcher.send_all([_request("a"), _request("b"), _request("c")])

    assert [r.ok for r in results] == [True, True, True]
    assert [r.details["rule_id"] for r in results] == ["a", "b", "c"]
    assert transport.send.call_count == 3
    sent: MailMessage = transport.send.call_args_list[0].args[0]
    assert sent.sender == "from@example.org"
    assert sent.cc == ("cc@example.org",)
    assert transport.send.call_args_list[0].kwargs == {"timeout": 30.0}


def test_one_failed_delivery_does_not_affect_the_others(renderer) -> None:
    transport = Mock(spec=MailTransport)

    def send(message: MailMessage, *, timeout: float) -> None:
        if message.to == ("b@example.org",):
            raise ConnectionRefusedError("relay down")

    transport.send.side_effect = send
    dispatcher = MailDispatcher(transport=transport, renderer=renderer, sender="f@example.org")

    results = dispatcher.send_all([_request("a"), _request("b"), _request("c", "absent")])

    assert results[0].ok is True
    assert results[1].ok is False
    assert results[1].message == "relay down"
    assert results[2].ok is False
    assert "absent" in results[2].message
    assert transport.send.call_count == 2


def test_concurrency_is_bounded(renderer) -> None:
    lock = threading.Lock()
    active = 0
    peak = 0

    class SlowTransport:
        def send(self, message: MailMessage, *, timeout: float) -> None:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1

    dispatcher = MailDispatcher(
        transport=SlowTransport(), renderer=renderer, sender="f@example.org", max_concurrency=2
    )
    results = dispatcher.send_all([_request(str(i)) for i in range(6)])

    assert all(r.ok for r in results)
    assert peak <= 2


def test_send_all_with_nothing_to_send(renderer) -> None:
    dispatcher = MailDispatcher(
        transport=LoggingMailTransport(), renderer=renderer, sender="f@example.org"
    )
    assert dispatcher.send_all([]) == []


def test_dispatcher_rejects_zero_concurrency(renderer) -> None:
    with pytest.raises(ValueError):
        MailDispatcher(
            transport=LoggingMailTransport(),
            renderer=renderer,
            sender="f@example.org",
            max_concurrency=0,
        )


def test_mail_message_headers() -> None:
    message = MailMessage(
        sender="from@example.org",
        to=("a@example.org", "b@example.org"),
        cc=(),
        subject="Hi",
        html_body="<p>x</p>",
    ).to_email_message()
    assert message["To"] == "a@example.org, b@example.org"
    assert message["Cc"] is None
    assert message.get_content_subtype() == "html"
