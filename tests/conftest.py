"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from approval_notifier.notifications.recipients import RecipientConfig
from approval_notifier.workflow.snapshot import Stage, StageFields, WorkflowSnapshot
from approval_notifier.workflow.status import ApprovalStatus, StatusTransition

OCCURRED_AT = datetime(2025, 3, 14, 9, 30, tzinfo=UTC)


@pytest.fixture
def recipient_config() -> RecipientConfig:
    """Provide distribution lists for the north and south regions."""
    return RecipientConfig.model_validate(
        {
            "region": {"north": "north-rm@example.org", "south": "south-rm@example.org"},
            "planning": {"north": "north-plan@example.org", "south": "south-plan@example.org"},
            "service-provider": {
                "north": "north-sp@example.com",
                "south": "south-sp@example.com",
            },
        }
    )


@pytest.fixture
def make_snapshot() -> Callable[..., WorkflowSnapshot]:
    """Build a snapshot with the given stages populated (retained field only)."""

    def _make(
        *acted: Stage,
        status: ApprovalStatus = ApprovalStatus.AWAITING_APPROVAL,
        region: str = "north",
        endorser_email: str | None = "endorser@example.org",
        stages: dict[Stage, StageFields] | None = None,
    ) -> WorkflowSnapshot:
        all_stages = {stage: StageFields(retained=f"{stage.value} comment") for stage in acted}
        all_stages.update(stages or {})
        return WorkflowSnapshot(
            entity_id="req-1",
            reference="WR-0001",
            title="Resurface car park",
            status=status,
            region=region,
            requestor_email="owner@example.org",
            endorser_email=endorser_email,
            stages=all_stages,
        )

    return _make


@pytest.fixture
def make_transition() -> Callable[[ApprovalStatus, ApprovalStatus], StatusTransition]:
    def _make(old: ApprovalStatus, new: ApprovalStatus) -> StatusTransition:
        return StatusTransition(
            entity_id="req-1", old_status=old, new_status=new, occurred_at=OCCURRED_AT
        )

    return _make
