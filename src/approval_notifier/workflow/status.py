from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ApprovalStatus(str, Enum):
    DRAFT = "draft"
    AWAITING_ENDORSEMENT = "awaiting_endorsement"
    AWAITING_APPROVAL = "awaiting_approval"
    AWAITING_REGIONAL_APPROVAL = "awaiting_regional_approval"
    AWAITING_REVISION = "awaiting_revision"
    WITHDRAWN = "withdrawn"
    COMPLETED = "completed"


class Decision(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    REVISION_REQUESTED = "revision_requested"


def parse_datetime(value: str) -> datetime:
    # The trailing "Z" is not accepted by fromisoformat on every supported version.
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True, slots=True)
class StatusTransition:
    """A status change detected on a workflow entity.

    The transition is a fact reported by the caller. Whether it was a legal move
    through the workflow is not checked here.
    """

    entity_id: str
    old_status: ApprovalStatus
    new_status: ApprovalStatus
    occurred_at: datetime

    @property
    def is_change(self) -> bool:
        return self.old_status != self.new_status

    def to_json(self) -> dict[str, object]:
        return {
            "entity_id": self.entity_id,
            "old_status": self.old_status.value,
            "new_status": self.new_status.value,
            "occurred_at": self.occurred_at.isoformat(),
        }

    @staticmethod
    def from_json(obj: dict[str, object]) -> StatusTransition:
        entity_id = obj.get("entity_id")
        old_raw = obj.get("old_status")
        new_raw = obj.get("new_status")
        occurred_raw = obj.get("occurred_at")
        if not isinstance(entity_id, str) or not entity_id.strip():
            raise ValueError("Transition requires a non-empty 'entity_id'")
        if not isinstance(old_raw, str) or not isinstance(new_raw, str):
            raise ValueError("Transition requires 'old_status' and 'new_status'")
        if not isinstance(occurred_raw, str):
            raise ValueError("Transition requires an ISO 'occurred_at' timestamp")
        return StatusTransition(
            entity_id=entity_id,
            old_status=ApprovalStatus(old_raw),
            new_status=ApprovalStatus(new_raw),
            occurred_at=parse_datetime(occurred_raw),
        )
