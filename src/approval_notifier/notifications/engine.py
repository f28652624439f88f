"""Evaluate notification rules against a status transition.

The engine only builds data. It never renders templates or sends mail, so rule
matching can be tested without any transport.

Failure policy:
  - A rule that raises (predicate, recipients, template, subject or model) is
    skipped and reported as a diagnostic; sibling rules still run.
  - A malformed snapshot (`ResolutionError`) is not a rule failure. It
    propagates and fails the whole call.
  - If every registered rule fails, `BatchFailure` is raised.
  - No applying rule is not an error: the outcome is simply empty.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from approval_notifier.workflow.last_actor import ResolutionError
from approval_notifier.workflow.snapshot import WorkflowSnapshot
from approval_notifier.workflow.status import StatusTransition

from .models import DispatchOutcome, DispatchRequest, RuleDiagnostic
from .recipients import RecipientConfig
from .rules import NotificationRule

logger = logging.getLogger(__name__)


class RuleEvaluationError(RuntimeError):
    """One rule failed; carries the rule id and the phase that raised."""

    def __init__(self, rule_id: str, phase: str, cause: BaseException) -> None:
        super().__init__(f"Rule '{rule_id}' failed during {phase}: {cause}")
        self.rule_id = rule_id
        self.phase = phase
        self.cause = cause

    def to_diagnostic(self) -> RuleDiagnostic:
        return RuleDiagnostic(
            rule_id=self.rule_id,
            phase=self.phase,
            reason=str(self.cause),
            error_type=type(self.cause).__name__,
        )


class BatchFailure(RuntimeError):
    """Every rule failed, so no notification could be produced."""

    def __init__(self, diagnostics: Iterable[RuleDiagnostic]) -> None:
        self.diagnostics = tuple(diagnostics)
        rule_ids = ", ".join(d.rule_id for d in self.diagnostics)
        super().__init__(f"All {len(self.diagnostics)} notification rules failed: {rule_ids}")


def evaluate_rule(
    rule: NotificationRule,
    snapshot: WorkflowSnapshot,
    transition: StatusTransition,
    config: RecipientConfig,
) -> DispatchRequest | None:
    """Evaluate one rule; return its request, or None if it does not apply.

    Raises:
        ResolutionError: If the snapshot's stage data cannot be read.
        RuleEvaluationError: If any other part of the rule raises.
    """

    phase = "applies_to"
    try:
        if not rule.applies_to(snapshot, transition):
            return None
        phase = "recipients"
        recipients = rule.recipients(snapshot, config)
        phase = "template"
        template_id = rule.template_id(snapshot, transition)
        phase = "subject"
        subject = rule.subject(snapshot, transition)
        phase = "model"
        return DispatchRequest(
            rule_id=rule.rule_id,
            recipients=recipients,
            template_id=template_id,
            subject=subject,
            model=rule.model(snapshot, transition),
        )
    except ResolutionError:
        raise
    except Exception as e:
        raise RuleEvaluationError(rule.rule_id, phase, e) from e


def dispatch(
    rules: Iterable[NotificationRule],
    snapshot: WorkflowSnapshot,
    transition: StatusTransition,
    config: RecipientConfig,
) -> DispatchOutcome:
    """Build one dispatch request per applying rule, in registration order.

    Raises:
        ValueError: If the transition belongs to a different entity than the snapshot.
        ResolutionError: If the snapshot's stage data is malformed.
        BatchFailure: If every rule failed to evaluate.
    """

    if transition.entity_id != snapshot.entity_id:
        raise ValueError(
            f"Transition entity '{transition.entity_id}' does not match "
            f"snapshot entity '{snapshot.entity_id}'"
        )

    if not transition.is_change:
        logger.debug(
            "Ignoring transition without a status change",
            extra={"entity_id": snapshot.entity_id, "status": transition.new_status.value},
        )
        return DispatchOutcome()

    requests: list[DispatchRequest] = []
    diagnostics: list[RuleDiagnostic] = []
    evaluated = 0

    for rule in rules:
        evaluated += 1
        try:
            request = evaluate_rule(rule, snapshot, transition, config)
        except RuleEvaluationError as e:
            logger.warning(
                "Notification rule failed",
                extra={
                    "rule_id": e.rule_id,
                    "phase": e.phase,
                    "entity_id": snapshot.entity_id,
                    "reason": str(e.cause),
                },
            )
            diagnostics.append(e.to_diagnostic())
            continue
        if request is not None:
            requests.append(request)

    if evaluated and len(diagnostics) == evaluated:
        logger.error(
            "Every notification rule failed",
            extra={"entity_id": snapshot.entity_id, "rules": evaluated},
        )
        raise BatchFailure(diagnostics)

    logger.info(
        "Notification rules evaluated",
        extra={
            "entity_id": snapshot.entity_id,
            "old_status": transition.old_status.value,
            "new_status": transition.new_status.value,
            "fired": [r.rule_id for r in requests],
            "failed": [d.rule_id for d in diagnostics],
        },
    )
    return DispatchOutcome(
        requests=tuple(requests), diagnostics=tuple(diagnostics), evaluated=evaluated
    )
