from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class EmailRecipients:
    """Addresses for one notification.

    Empty lists are legal. Addresses are kept in order and never deduplicated,
    even when the same address appears in both `to` and `cc`.
    """

    to: tuple[str, ...] = ()
    cc: tuple[str, ...] = ()

    @staticmethod
    def of(to: Iterable[str] = (), cc: Iterable[str] = ()) -> EmailRecipients:
        return EmailRecipients(to=tuple(to), cc=tuple(cc))

    def to_json(self) -> dict[str, object]:
        return {"to": list(self.to), "cc": list(self.cc)}


@dataclass(frozen=True, slots=True)
class DispatchRequest:
    """A fully resolved notification, ready to be rendered and sent."""

    rule_id: str
    recipients: EmailRecipients
    template_id: str
    subject: str
    model: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "model", MappingProxyType(dict(self.model)))

    def to_json(self) -> dict[str, object]:
        return {
            "rule_id": self.rule_id,
            "recipients": self.recipients.to_json(),
            "template_id": self.template_id,
            "subject": self.subject,
            "model": dict(self.model),
        }


@dataclass(frozen=True, slots=True)
class RuleDiagnostic:
    """Why one rule produced no request."""

    rule_id: str
    phase: str
    reason: str
    error_type: str

    def to_json(self) -> dict[str, object]:
        return {
            "rule_id": self.rule_id,
            "phase": self.phase,
            "reason": self.reason,
            "error_type": self.error_type,
        }


@dataclass(frozen=True, slots=True)
class DispatchOutcome:
    requests: tuple[DispatchRequest, ...] = ()
    diagnostics: tuple[RuleDiagnostic, ...] = ()
    evaluated: int = 0

    def to_json(self) -> dict[str, object]:
        return {
            "requests": [request.to_json() for request in self.requests],
            "diagnostics": [diagnostic.to_json() for diagnostic in self.diagnostics],
            "evaluated": self.evaluated,
        }
