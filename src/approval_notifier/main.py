"""CLI entrypoint for the approval notifier.

Reads a workflow snapshot from a JSON file and either reports the last actor or
evaluates the notification rules for a status change.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from approval_notifier import __version__
from approval_notifier.config import NotifierSettings
from approval_notifier.logging import configure_logging
from approval_notifier.mail.dispatcher import MailDispatcher
from approval_notifier.mail.templates import TemplateRenderer
from approval_notifier.mail.transport import build_transport
from approval_notifier.notifications.engine import BatchFailure
from approval_notifier.notifications.recipients import load_recipient_config
from approval_notifier.notifications.registry import default_registry
from approval_notifier.service import NotificationService
from approval_notifier.workflow.last_actor import ResolutionError, describe_last_actor
from approval_notifier.workflow.snapshot import WorkflowSnapshot
from approval_notifier.workflow.status import ApprovalStatus, StatusTransition, parse_datetime
from approval_notifier.workflow.steps import DEFAULT_STEPS

logger = logging.getLogger(__name__)

_STATUS_CHOICES = [status.value for status in ApprovalStatus]


def _load_snapshot(path: Path) -> WorkflowSnapshot:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Snapshot file must contain a JSON object: {path}")
    return WorkflowSnapshot.from_json(raw)


def _transition_from_args(args: argparse.Namespace, snapshot: WorkflowSnapshot) -> StatusTransition:
    occurred_at = (
        parse_datetime(args.occurred_at) if args.occurred_at else datetime.now(tz=UTC)
    )
    return StatusTransition(
        entity_id=snapshot.entity_id,
        old_status=ApprovalStatus(args.old_status),
        new_status=ApprovalStatus(args.new_status),
        occurred_at=occurred_at,
    )


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def _add_transition_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--snapshot", type=Path, required=True, help="Path to a workflow snapshot JSON file"
    )
    parser.add_argument(
        "--old-status", required=True, choices=_STATUS_CHOICES, help="Status before the change"
    )
    parser.add_argument(
        "--new-status", required=True, choices=_STATUS_CHOICES, help="Status after the change"
    )
    parser.add_argument(
        "--occurred-at",
        default=None,
        help="ISO timestamp of the change (defaults to now, UTC)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="approval-notifier",
        description="Resolve the last actor of an approval workflow and notify on status changes",
    )
    parser.add_argument("--version", action="version", version=f"approval-notifier {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    last_actor = subparsers.add_parser(
        "last-actor", help="Report which workflow stage acted most recently"
    )
    last_actor.add_argument(
        "--snapshot", type=Path, required=True, help="Path to a workflow snapshot JSON file"
    )

    preview = subparsers.add_parser(
        "preview", help="Show which notifications a status change would send"
    )
    _add_transition_args(preview)

    notify = subparsers.add_parser(
        "notify", help="Render and send the notifications for a status change"
    )
    _add_transition_args(notify)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = NotifierSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        snapshot = _load_snapshot(args.snapshot)

        if args.command == "last-actor":
            actor = describe_last_actor(DEFAULT_STEPS, snapshot)
            _print_json({"last_actor": actor.to_json() if actor is not None else None})
            return 0

        transition = _transition_from_args(args, snapshot)
        config = load_recipient_config(settings.distribution_lists_path)

        if args.command == "preview":
            service = NotificationService(rules=default_registry(), config=config)
            _print_json(service.preview(snapshot, transition).to_json())
            return 0

        if args.command == "notify":
            dispatcher = MailDispatcher(
                transport=build_transport(settings),
                renderer=TemplateRenderer(settings.templates_path),
                sender=settings.mail_sender,
                max_concurrency=settings.mail_max_concurrency,
                timeout_seconds=settings.mail_timeout_seconds,
            )
            service = NotificationService(
                rules=default_registry(), config=config, dispatcher=dispatcher
            )
            report = service.notify(snapshot, transition)
            _print_json(report.to_json())
            return 0 if report.all_delivered else 1

        parser.error(f"Unknown command: {args.command}")
        return 2

    except BatchFailure as e:
        logger.error("Notification batch failed", extra={"error": str(e)})
        _print_json({"error": str(e), "diagnostics": [d.to_json() for d in e.diagnostics]})
        return 1
    except ResolutionError as e:
        logger.error("Last actor resolution failed", extra={"step": e.step_name})
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        logger.exception("Command failed", extra={"command": args.command})
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
