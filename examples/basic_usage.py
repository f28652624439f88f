#!/usr/bin/env python3
"""Programmatic notification preview example.

This demonstrates using the notifier components directly:

* load settings from `.env`
* build a workflow snapshot in code
* resolve which stage acted last
* evaluate the notification rules for a completion
"""

from __future__ import annotations

import argparse
import json
from datetime import UTC, datetime
from typing import Sequence

from approval_notifier.config import NotifierSettings
from approval_notifier.logging import configure_logging
from approval_notifier.notifications.engine import dispatch
from approval_notifier.notifications.recipients import load_recipient_config
from approval_notifier.notifications.registry import default_registry
from approval_notifier.workflow.last_actor import describe_last_actor
from approval_notifier.workflow.snapshot import Stage, StageFields, WorkflowSnapshot
from approval_notifier.workflow.status import ApprovalStatus, Decision, StatusTransition
from approval_notifier.workflow.steps import DEFAULT_STEPS


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Preview completion notifications.")
    parser.add_argument("--region", default="north", help='Region key, e.g. "north"')
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = NotifierSettings()
    configure_logging(settings.log_level)

    now = datetime.now(tz=UTC)
    snapshot = WorkflowSnapshot(
        entity_id="req-42",
        reference="WR-0042",
        title="Replace footpath lighting",
        status=ApprovalStatus.COMPLETED,
        region=args.region,
        requestor_email="requestor@example.org",
        stages={
            Stage.ENDORSEMENT: StageFields(retained="Endorsed", decided_by="E. Dorser"),
            Stage.COMPLETION: StageFields(
                retained="Signed off",
                decided_by="R. Manager",
                decision=Decision.APPROVED,
                decision_date=now,
            ),
        },
    )
    transition = StatusTransition(
        entity_id=snapshot.entity_id,
        old_status=ApprovalStatus.AWAITING_REGIONAL_APPROVAL,
        new_status=ApprovalStatus.COMPLETED,
        occurred_at=now,
    )

    actor = describe_last_actor(DEFAULT_STEPS, snapshot)
    print("Last actor:", json.dumps(actor.to_json() if actor else None))

    outcome = dispatch(
        default_registry(),
        snapshot,
        transition,
        load_recipient_config(settings.distribution_lists_path),
    )
    print(json.dumps(outcome.to_json(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
