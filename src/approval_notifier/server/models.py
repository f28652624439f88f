"""Pydantic models for the REST server."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from approval_notifier.workflow.snapshot import Stage, StageFields, WorkflowSnapshot
from approval_notifier.workflow.status import ApprovalStatus, Decision, StatusTransition


class ApiStageFields(BaseModel):
    retained: str | None = None
    decided_by: str | None = None
    decision: Decision | None = None
    decision_date: datetime | None = None

    def to_domain(self) -> StageFields:
        return StageFields(
            retained=self.retained,
            decided_by=self.decided_by,
            decision=self.decision,
            decision_date=self.decision_date,
        )


class ApiSnapshot(BaseModel):
    entity_id: str = Field(min_length=1)
    reference: str = Field(min_length=1)
    title: str = ""
    status: ApprovalStatus
    region: str = Field(min_length=1)
    requestor_email: str = Field(min_length=1)
    endorser_email: str | None = None
    stages: dict[Stage, ApiStageFields] = Field(default_factory=dict)

    def to_domain(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            entity_id=self.entity_id,
            reference=self.reference,
            title=self.title,
            status=self.status,
            region=self.region,
            requestor_email=self.requestor_email,
            endorser_email=self.endorser_email,
            stages={stage: fields.to_domain() for stage, fields in self.stages.items()},
        )


class LastActorRequest(BaseModel):
    snapshot: ApiSnapshot


class LastActorResponse(BaseModel):
    found: bool
    stage: str | None = None
    rank: int | None = None
    decided_by: str | None = None
    decision: str | None = None
    decision_date: str | None = None


class PreviewRequest(BaseModel):
    snapshot: ApiSnapshot
    old_status: ApprovalStatus
    new_status: ApprovalStatus
    occurred_at: datetime

    def transition(self) -> StatusTransition:
        return StatusTransition(
            entity_id=self.snapshot.entity_id,
            old_status=self.old_status,
            new_status=self.new_status,
            occurred_at=self.occurred_at,
        )


class ApiRecipients(BaseModel):
    to: list[str]
    cc: list[str]


class ApiDispatchRequest(BaseModel):
    rule_id: str
    recipients: ApiRecipients
    template_id: str
    subject: str
    model: dict[str, object]


class ApiDiagnostic(BaseModel):
    rule_id: str
    phase: str
    reason: str
    error_type: str


class PreviewResponse(BaseModel):
    requests: list[ApiDispatchRequest] = Field(default_factory=list)
    diagnostics: list[ApiDiagnostic] = Field(default_factory=list)
    evaluated: int = 0
