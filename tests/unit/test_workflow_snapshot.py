"""Unit tests for workflow snapshots and status transitions."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from approval_notifier.workflow.snapshot import Stage, StageFields, WorkflowSnapshot
from approval_notifier.workflow.status import ApprovalStatus, Decision, StatusTransition


def _snapshot_json() -> dict[str, object]:
    return {
        "entity_id": "req-7",
        "reference": "WR-0007",
        "title": "Fence repair",
        "status": "awaiting_regional_approval",
        "region": "south",
        "requestor_email": "owner@example.org",
        "stages": {
            "endorsement": {"retained": "ok", "decided_by": "E", "decision": "approved"},
            "job_manager": {
                "retained": "fine",
                "decision_date": "2025-01-02T03:04:05Z",
            },
        },
    }


def test_snapshot_from_json() -> None:
    snapshot = WorkflowSnapshot.from_json(_snapshot_json())

    assert snapshot.status is ApprovalStatus.AWAITING_REGIONAL_APPROVAL
    assert snapshot.endorser_email is None
    assert snapshot.stage(Stage.ENDORSEMENT).decision is Decision.APPROVED
    assert snapshot.stage(Stage.JOB_MANAGER).decision_date == datetime(
        2025, 1, 2, 3, 4, 5, tzinfo=UTC
    )
    assert snapshot.stage(Stage.COMPLETION) == StageFields()


def test_snapshot_json_roundtrip_keeps_stage_fields() -> None:
    snapshot = WorkflowSnapshot.from_json(_snapshot_json())
    again = WorkflowSnapshot.from_json(snapshot.to_json())
    assert again.stage(Stage.JOB_MANAGER) == snapshot.stage(Stage.JOB_MANAGER)
    assert again.region == "south"


def test_snapshot_rejects_unknown_stage() -> None:
    raw = _snapshot_json()
    raw["stages"] = {"board": {"retained": "x"}}
    with pytest.raises(ValueError):
        WorkflowSnapshot.from_json(raw)


def test_snapshot_requires_entity_id() -> None:
    raw = _snapshot_json()
    raw["entity_id"] = "  "
    with pytest.raises(ValueError):
        WorkflowSnapshot.from_json(raw)


def test_snapshot_stages_are_read_only() -> None:
    snapshot = WorkflowSnapshot.from_json(_snapshot_json())
    with pytest.raises(TypeError):
        snapshot.stages[Stage.COMPLETION] = StageFields(retained="x")  # type: ignore[index]


def test_transition_from_json() -> None:
    transition = StatusTransition.from_json(
        {
            "entity_id": "req-7",
            "old_status": "awaiting_regional_approval",
            "new_status": "completed",
            "occurred_at": "2025-03-14T09:30:00+00:00",
        }
    )
    assert transition.new_status is ApprovalStatus.COMPLETED
    assert transition.is_change
    assert transition.to_json()["occurred_at"] == "2025-03-14T09:30:00+00:00"


def test_transition_rejects_unknown_status() -> None:
    with pytest.raises(ValueError):
        StatusTransition.from_json(
            {
                "entity_id": "req-7",
                "old_status": "draft",
                "new_status": "archived",
                "occurred_at": "2025-03-14T09:30:00+00:00",
            }
        )
