"""Notification rules and the engine that evaluates them.

A rule is an independent (predicate, recipients, template) unit for one
notification scenario. The engine evaluates every registered rule against a
status transition and builds dispatch requests; it never sends mail.
"""

from approval_notifier.notifications.engine import BatchFailure, RuleEvaluationError, dispatch
from approval_notifier.notifications.models import (
    DispatchOutcome,
    DispatchRequest,
    EmailRecipients,
    RuleDiagnostic,
)
from approval_notifier.notifications.recipients import ConfigLookupError, RecipientConfig
from approval_notifier.notifications.registry import RuleRegistry, default_registry
from approval_notifier.notifications.rules import NotificationRule

__all__ = [
    "BatchFailure",
    "ConfigLookupError",
    "DispatchOutcome",
    "DispatchRequest",
    "EmailRecipients",
    "NotificationRule",
    "RecipientConfig",
    "RuleDiagnostic",
    "RuleEvaluationError",
    "RuleRegistry",
    "default_registry",
    "dispatch",
]
