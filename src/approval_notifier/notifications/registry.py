from __future__ import annotations

from collections.abc import Iterable, Iterator

from .rules import (
    ApprovalRequestedRule,
    CompletedRequestorRule,
    CompletedServiceProviderRule,
    EndorsementRequestedRule,
    NotificationRule,
    RegionalApprovalRequestedRule,
    RevisionRequestedRule,
    WithdrawnRule,
)


class DuplicateRuleError(ValueError):
    pass


class RuleRegistry:
    """An ordered, immutable set of notification rules.

    Registration order only fixes the order of the engine's output.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[NotificationRule]) -> None:
        ordered = tuple(rules)
        seen: set[str] = set()
        for rule in ordered:
            if rule.rule_id in seen:
                raise DuplicateRuleError(f"Rule '{rule.rule_id}' registered twice")
            seen.add(rule.rule_id)
        self._rules = ordered

    def __iter__(self) -> Iterator[NotificationRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def get(self, rule_id: str) -> NotificationRule | None:
        for rule in self._rules:
            if rule.rule_id == rule_id:
                return rule
        return None

    @property
    def rule_ids(self) -> list[str]:
        return [rule.rule_id for rule in self._rules]


def default_registry() -> RuleRegistry:
    return RuleRegistry(
        [
            EndorsementRequestedRule(),
            ApprovalRequestedRule(),
            RegionalApprovalRequestedRule(),
            RevisionRequestedRule(),
            WithdrawnRule(),
            CompletedRequestorRule(),
            CompletedServiceProviderRule(),
        ]
    )
