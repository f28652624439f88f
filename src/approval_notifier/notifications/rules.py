"""Notification rules, one class per notification scenario.

Rules are independent and more than one may apply to the same transition. On
completion, for example, both the requestor and the service provider are told.

`applies_to` matches exhaustively over `ApprovalStatus`: adding a status makes
every rule fail type checking until it has been reconsidered.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, assert_never

from approval_notifier.workflow.last_actor import describe_last_actor
from approval_notifier.workflow.snapshot import WorkflowSnapshot
from approval_notifier.workflow.status import ApprovalStatus, StatusTransition
from approval_notifier.workflow.steps import DEFAULT_STEPS

from .models import EmailRecipients
from .recipients import DistributionCategory, RecipientConfig


class MissingRecipientError(LookupError):
    pass


class NotificationRule(ABC):
    """Abstract base class for notification rules.

    Subclasses set `rule_id`, `template` and `subject_line`, and implement the
    predicate and the recipient resolver. Rules must not have side effects; the
    recipient resolver may only read the distribution lists.
    """

    rule_id: ClassVar[str]
    template: ClassVar[str]
    subject_line: ClassVar[str]

    @abstractmethod
    def applies_to(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> bool:
        """Whether this rule fires for the transition."""

    @abstractmethod
    def recipients(self, snapshot: WorkflowSnapshot, config: RecipientConfig) -> EmailRecipients:
        """Resolve who receives the notification.

        Raises:
            ConfigLookupError: If a required distribution list entry is missing.
            MissingRecipientError: If the entity lacks a required individual.
        """

    def template_id(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> str:
        return self.template

    def subject(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> str:
        return f"{snapshot.reference}: {self.subject_line}"

    def model(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> dict[str, object]:
        """Values made available to the email template."""

        last_actor = describe_last_actor(DEFAULT_STEPS, snapshot)
        model: dict[str, object] = {
            "entity_id": snapshot.entity_id,
            "reference": snapshot.reference,
            "title": snapshot.title,
            "region": snapshot.region,
            "requestor_email": snapshot.requestor_email,
            "old_status": transition.old_status.value,
            "new_status": transition.new_status.value,
            "occurred_at": transition.occurred_at.isoformat(),
            "last_actor_stage": "",
            "last_actor_name": "",
            "last_actor_decision": "",
            "last_actor_decision_date": "",
        }
        if last_actor is not None:
            model["last_actor_stage"] = last_actor.step.name
            model["last_actor_name"] = last_actor.decided_by or ""
            if last_actor.decision is not None:
                model["last_actor_decision"] = last_actor.decision.value
            if last_actor.decision_date is not None:
                model["last_actor_decision_date"] = last_actor.decision_date.isoformat()
        return model

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rule_id={self.rule_id!r})"


class EndorsementRequestedRule(NotificationRule):
    rule_id = "endorsement-requested"
    template = "endorsement_requested"
    subject_line = "Endorsement requested"

    def applies_to(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> bool:
        match transition.new_status:
            case ApprovalStatus.AWAITING_ENDORSEMENT:
                return True
            case (
                ApprovalStatus.DRAFT
                | ApprovalStatus.AWAITING_APPROVAL
                | ApprovalStatus.AWAITING_REGIONAL_APPROVAL
                | ApprovalStatus.AWAITING_REVISION
                | ApprovalStatus.WITHDRAWN
                | ApprovalStatus.COMPLETED
            ):
                return False
            case _ as unreachable:
                assert_never(unreachable)

    def recipients(self, snapshot: WorkflowSnapshot, config: RecipientConfig) -> EmailRecipients:
        if not snapshot.endorser_email or not snapshot.endorser_email.strip():
            raise MissingRecipientError(f"Entity {snapshot.entity_id} has no endorser")
        return EmailRecipients.of(to=[snapshot.endorser_email], cc=[snapshot.requestor_email])


class ApprovalRequestedRule(NotificationRule):
    rule_id = "approval-requested"
    template = "approval_requested"
    subject_line = "Approval requested"

    def applies_to(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> bool:
        match transition.new_status:
            case ApprovalStatus.AWAITING_APPROVAL:
                return True
            case (
                ApprovalStatus.DRAFT
                | ApprovalStatus.AWAITING_ENDORSEMENT
                | ApprovalStatus.AWAITING_REGIONAL_APPROVAL
                | ApprovalStatus.AWAITING_REVISION
                | ApprovalStatus.WITHDRAWN
                | ApprovalStatus.COMPLETED
            ):
                return False
            case _ as unreachable:
                assert_never(unreachable)

    def recipients(self, snapshot: WorkflowSnapshot, config: RecipientConfig) -> EmailRecipients:
        planning = config.lookup(DistributionCategory.PLANNING, snapshot.region)
        return EmailRecipients.of(to=[planning])


class RegionalApprovalRequestedRule(NotificationRule):
    rule_id = "regional-approval-requested"
    template = "regional_approval_requested"
    subject_line = "Regional approval requested"

    def applies_to(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> bool:
        match transition.new_status:
            case ApprovalStatus.AWAITING_REGIONAL_APPROVAL:
                return True
            case (
                ApprovalStatus.DRAFT
                | ApprovalStatus.AWAITING_ENDORSEMENT
                | ApprovalStatus.AWAITING_APPROVAL
                | ApprovalStatus.AWAITING_REVISION
                | ApprovalStatus.WITHDRAWN
                | ApprovalStatus.COMPLETED
            ):
                return False
            case _ as unreachable:
                assert_never(unreachable)

    def recipients(self, snapshot: WorkflowSnapshot, config: RecipientConfig) -> EmailRecipients:
        regional = config.lookup(DistributionCategory.REGION, snapshot.region)
        planning = config.lookup(DistributionCategory.PLANNING, snapshot.region)
        return EmailRecipients.of(to=[regional], cc=[planning])


class RevisionRequestedRule(NotificationRule):
    rule_id = "revision-requested"
    template = "revision_requested"
    subject_line = "Revision requested"

    def applies_to(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> bool:
        match transition.new_status:
            case ApprovalStatus.AWAITING_REVISION:
                return True
            case (
                ApprovalStatus.DRAFT
                | ApprovalStatus.AWAITING_ENDORSEMENT
                | ApprovalStatus.AWAITING_APPROVAL
                | ApprovalStatus.AWAITING_REGIONAL_APPROVAL
                | ApprovalStatus.WITHDRAWN
                | ApprovalStatus.COMPLETED
            ):
                return False
            case _ as unreachable:
                assert_never(unreachable)

    def recipients(self, snapshot: WorkflowSnapshot, config: RecipientConfig) -> EmailRecipients:
        return EmailRecipients.of(to=[snapshot.requestor_email])


class WithdrawnRule(NotificationRule):
    """Tell planning when a request leaves the workflow.

    Withdrawing a draft is silent: nobody but the requestor has seen it yet.
    """

    rule_id = "withdrawn"
    template = "withdrawn"
    subject_line = "Request withdrawn"

    def applies_to(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> bool:
        match transition.new_status:
            case ApprovalStatus.WITHDRAWN:
                return transition.old_status is not ApprovalStatus.DRAFT
            case (
                ApprovalStatus.DRAFT
                | ApprovalStatus.AWAITING_ENDORSEMENT
                | ApprovalStatus.AWAITING_APPROVAL
                | ApprovalStatus.AWAITING_REGIONAL_APPROVAL
                | ApprovalStatus.AWAITING_REVISION
                | ApprovalStatus.COMPLETED
            ):
                return False
            case _ as unreachable:
                assert_never(unreachable)

    def recipients(self, snapshot: WorkflowSnapshot, config: RecipientConfig) -> EmailRecipients:
        planning = config.lookup(DistributionCategory.PLANNING, snapshot.region)
        return EmailRecipients.of(to=[planning], cc=[snapshot.requestor_email])


class CompletedRequestorRule(NotificationRule):
    rule_id = "completed-requestor"
    template = "completed_requestor"
    subject_line = "Request completed"

    def applies_to(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> bool:
        match transition.new_status:
            case ApprovalStatus.COMPLETED:
                return True
            case (
                ApprovalStatus.DRAFT
                | ApprovalStatus.AWAITING_ENDORSEMENT
                | ApprovalStatus.AWAITING_APPROVAL
                | ApprovalStatus.AWAITING_REGIONAL_APPROVAL
                | ApprovalStatus.AWAITING_REVISION
                | ApprovalStatus.WITHDRAWN
            ):
                return False
            case _ as unreachable:
                assert_never(unreachable)

    def recipients(self, snapshot: WorkflowSnapshot, config: RecipientConfig) -> EmailRecipients:
        return EmailRecipients.of(to=[snapshot.requestor_email])


class CompletedServiceProviderRule(NotificationRule):
    rule_id = "completed-service-provider"
    template = "completed_service_provider"
    subject_line = "Work approved for delivery"

    def applies_to(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> bool:
        match transition.new_status:
            case ApprovalStatus.COMPLETED:
                return True
            case (
                ApprovalStatus.DRAFT
                | ApprovalStatus.AWAITING_ENDORSEMENT
                | ApprovalStatus.AWAITING_APPROVAL
                | ApprovalStatus.AWAITING_REGIONAL_APPROVAL
                | ApprovalStatus.AWAITING_REVISION
                | ApprovalStatus.WITHDRAWN
            ):
                return False
            case _ as unreachable:
                assert_never(unreachable)

    def recipients(self, snapshot: WorkflowSnapshot, config: RecipientConfig) -> EmailRecipients:
        provider = config.lookup(DistributionCategory.SERVICE_PROVIDER, snapshot.region)
        planning = config.lookup(DistributionCategory.PLANNING, snapshot.region)
        return EmailRecipients.of(to=[provider], cc=[planning])
