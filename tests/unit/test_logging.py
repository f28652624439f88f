from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator

import pytest

from approval_notifier.logging import JsonFormatter, configure_logging


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="approval_notifier.notifications.engine",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Notification rule failed",
        args=(),
        exc_info=None,
    )
    record.rule_id = "completed-service-provider"
    record.phase = "recipients"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["message"] == "Notification rule failed"
    assert payload["extra"] == {"rule_id": "completed-service-provider", "phase": "recipients"}


def test_configure_logging_writes_one_json_line_per_record(restore_root_logger) -> None:
    stream = io.StringIO()
    configure_logging("info", stream=stream)
    configure_logging("info", stream=stream)

    logging.getLogger("approval_notifier.test").info("hello", extra={"entity_id": "req-1"})
    logging.getLogger("approval_notifier.test").debug("hidden")

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["extra"] == {"entity_id": "req-1"}
