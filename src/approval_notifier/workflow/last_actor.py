"""Infer which approval stage acted most recently.

There is no audit log to consult. Stages persist their fields as the workflow
moves forward, so the highest-ranked stage with a populated retained field is
taken to be the one that acted last. Stages may be skipped (fast-track), so the
populated ranks need not be contiguous.

If a rework cycle leaves a higher stage populated while a lower stage acts
again, the higher stage is still reported. That is accepted behaviour.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .snapshot import WorkflowSnapshot
from .status import Decision
from .steps import StepDescriptor, StepSequence


class ResolutionError(RuntimeError):
    """A step accessor failed on the snapshot (malformed input)."""

    def __init__(self, step_name: str, cause: BaseException) -> None:
        super().__init__(f"Failed to read step '{step_name}': {cause}")
        self.step_name = step_name


@dataclass(frozen=True, slots=True)
class LastActor:
    step: StepDescriptor
    decided_by: str | None
    decision: Decision | None
    decision_date: datetime | None

    def to_json(self) -> dict[str, object]:
        return {
            "stage": self.step.name,
            "rank": self.step.rank,
            "decided_by": self.decided_by,
            "decision": self.decision.value if self.decision is not None else None,
            "decision_date": (
                self.decision_date.isoformat() if self.decision_date is not None else None
            ),
        }


def has_acted(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _read(step: StepDescriptor, accessor_name: str, snapshot: WorkflowSnapshot) -> object:
    accessor = getattr(step, accessor_name)
    try:
        return accessor(snapshot)
    except Exception as e:
        raise ResolutionError(step.name, e) from e


def _ordered(steps: Iterable[StepDescriptor]) -> StepSequence:
    return steps if isinstance(steps, StepSequence) else StepSequence(steps)


def resolve(
    steps: Iterable[StepDescriptor], snapshot: WorkflowSnapshot
) -> StepDescriptor | None:
    """Return the highest-ranked step that has acted, or None if none has.

    None is the normal answer for a workflow that has not left its initial state.

    Raises:
        ResolutionError: If reading a retained field fails.
    """

    for step in _ordered(steps):
        if has_acted(_read(step, "retained_field", snapshot)):
            return step
    return None


def describe_last_actor(
    steps: Iterable[StepDescriptor], snapshot: WorkflowSnapshot
) -> LastActor | None:
    """Resolve the last actor and report its decision details."""

    step = resolve(steps, snapshot)
    if step is None:
        return None

    decided_by = _read(step, "decided_by", snapshot)
    decision = _read(step, "decision", snapshot)
    decision_date = _read(step, "decision_date", snapshot)
    return LastActor(
        step=step,
        decided_by=decided_by if isinstance(decided_by, str) else None,
        decision=decision if isinstance(decision, Decision) else None,
        decision_date=decision_date if isinstance(decision_date, datetime) else None,
    )
