from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType

from .status import ApprovalStatus, Decision, parse_datetime


class Stage(str, Enum):
    ENDORSEMENT = "endorsement"
    JOB_MANAGER = "job_manager"
    REGIONAL_MANAGER = "regional_manager"
    COMPLETION = "completion"


@dataclass(frozen=True, slots=True)
class StageFields:
    """The persisted fields of one approval stage.

    `retained` is the field whose presence proves the stage acted (typically the
    stage comment). The other fields only describe what the stage decided.
    """

    retained: str | None = None
    decided_by: str | None = None
    decision: Decision | None = None
    decision_date: datetime | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {}
        if self.retained is not None:
            out["retained"] = self.retained
        if self.decided_by is not None:
            out["decided_by"] = self.decided_by
        if self.decision is not None:
            out["decision"] = self.decision.value
        if self.decision_date is not None:
            out["decision_date"] = self.decision_date.isoformat()
        return out

    @staticmethod
    def from_json(obj: dict[str, object]) -> StageFields:
        retained_raw = obj.get("retained")
        decided_by_raw = obj.get("decided_by")
        decision_raw = obj.get("decision")
        date_raw = obj.get("decision_date")
        return StageFields(
            retained=retained_raw if isinstance(retained_raw, str) else None,
            decided_by=decided_by_raw if isinstance(decided_by_raw, str) else None,
            decision=Decision(decision_raw) if isinstance(decision_raw, str) else None,
            decision_date=parse_datetime(date_raw) if isinstance(date_raw, str) else None,
        )


_EMPTY_STAGE = StageFields()


def _freeze_stages(stages: Mapping[Stage, StageFields]) -> Mapping[Stage, StageFields]:
    return MappingProxyType(dict(stages))


@dataclass(frozen=True, slots=True)
class WorkflowSnapshot:
    """A read-only view of a workflow entity at one point in time.

    Callers own the snapshot; resolvers and rules only read it for the duration
    of a single call.
    """

    entity_id: str
    reference: str
    status: ApprovalStatus
    region: str
    requestor_email: str
    title: str = ""
    endorser_email: str | None = None
    stages: Mapping[Stage, StageFields] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "stages", _freeze_stages(self.stages))

    def stage(self, stage: Stage) -> StageFields:
        return self.stages.get(stage, _EMPTY_STAGE)

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "entity_id": self.entity_id,
            "reference": self.reference,
            "title": self.title,
            "status": self.status.value,
            "region": self.region,
            "requestor_email": self.requestor_email,
            "stages": {stage.value: fields.to_json() for stage, fields in self.stages.items()},
        }
        if self.endorser_email is not None:
            out["endorser_email"] = self.endorser_email
        return out

    @staticmethod
    def from_json(obj: dict[str, object]) -> WorkflowSnapshot:
        def _str(key: str) -> str:
            value = obj.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Snapshot requires a non-empty '{key}'")
            return value

        status_raw = _str("status")
        title_raw = obj.get("title")
        endorser_raw = obj.get("endorser_email")

        stages_raw = obj.get("stages") or {}
        if not isinstance(stages_raw, dict):
            raise ValueError("Snapshot 'stages' must be an object keyed by stage name")
        stages: dict[Stage, StageFields] = {}
        for key, value in stages_raw.items():
            if not isinstance(value, dict):
                raise ValueError(f"Stage '{key}' must be an object")
            stages[Stage(key)] = StageFields.from_json(value)

        return WorkflowSnapshot(
            entity_id=_str("entity_id"),
            reference=_str("reference"),
            title=title_raw if isinstance(title_raw, str) else "",
            status=ApprovalStatus(status_raw),
            region=_str("region"),
            requestor_email=_str("requestor_email"),
            endorser_email=endorser_raw if isinstance(endorser_raw, str) else None,
            stages=stages,
        )
