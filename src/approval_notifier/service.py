"""Entry point used by whatever detects status changes.

The caller supplies an immutable snapshot and the transition it observed. The
service evaluates the rules and, when a dispatcher is configured, sends the
resulting notifications.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from approval_notifier.mail.dispatcher import DeliveryResult, MailDispatcher
from approval_notifier.notifications.engine import dispatch
from approval_notifier.notifications.models import DispatchOutcome
from approval_notifier.notifications.recipients import RecipientConfig
from approval_notifier.notifications.registry import RuleRegistry
from approval_notifier.workflow.snapshot import WorkflowSnapshot
from approval_notifier.workflow.status import StatusTransition

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NotificationReport:
    outcome: DispatchOutcome
    deliveries: tuple[DeliveryResult, ...]

    @property
    def all_delivered(self) -> bool:
        return all(d.ok for d in self.deliveries)

    def to_json(self) -> dict[str, object]:
        return {
            **self.outcome.to_json(),
            "deliveries": [d.to_json() for d in self.deliveries],
        }


class NotificationService:
    def __init__(
        self,
        *,
        rules: RuleRegistry,
        config: RecipientConfig,
        dispatcher: MailDispatcher | None = None,
    ) -> None:
        self._rules = rules
        self._config = config
        self._dispatcher = dispatcher

    def preview(self, snapshot: WorkflowSnapshot, transition: StatusTransition) -> DispatchOutcome:
        return dispatch(self._rules, snapshot, transition, self._config)

    def notify(
        self, snapshot: WorkflowSnapshot, transition: StatusTransition
    ) -> NotificationReport:
        """Evaluate the rules and send what fired.

        Raises:
            RuntimeError: If no dispatcher was configured.
            BatchFailure: If every rule failed.
            ResolutionError: If the snapshot's stage data is malformed.
        """

        if self._dispatcher is None:
            raise RuntimeError("NotificationService was created without a mail dispatcher")

        outcome = self.preview(snapshot, transition)
        deliveries = self._dispatcher.send_all(outcome.requests)
        failed = [d for d in deliveries if not d.ok]
        if failed:
            logger.warning(
                "Some notifications were not delivered",
                extra={"entity_id": snapshot.entity_id, "failed": len(failed)},
            )
        return NotificationReport(outcome=outcome, deliveries=tuple(deliveries))
