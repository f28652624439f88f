from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from .snapshot import Stage, WorkflowSnapshot

Accessor = Callable[[WorkflowSnapshot], object]


class DuplicateRankError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class StepDescriptor:
    """One approval stage, described by plain accessors over a snapshot.

    `retained_field` decides whether the stage acted. The remaining accessors are
    only read to report the details of the stage that won.
    """

    name: str
    rank: int
    retained_field: Accessor
    decided_by: Accessor
    decision: Accessor
    decision_date: Accessor


class StepSequence:
    """An immutable set of step descriptors, ordered highest rank first."""

    __slots__ = ("_steps",)

    def __init__(self, steps: Iterable[StepDescriptor]) -> None:
        ordered = tuple(sorted(steps, key=lambda step: step.rank, reverse=True))
        seen: set[int] = set()
        for step in ordered:
            if step.rank in seen:
                raise DuplicateRankError(f"Duplicate step rank {step.rank} ({step.name})")
            seen.add(step.rank)
        self._steps = ordered

    def __iter__(self) -> Iterator[StepDescriptor]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        names = ", ".join(f"{step.name}={step.rank}" for step in self._steps)
        return f"StepSequence({names})"


def stage_step(stage: Stage, rank: int) -> StepDescriptor:
    """Build a descriptor whose accessors read one stage group of the snapshot."""

    return StepDescriptor(
        name=stage.value,
        rank=rank,
        retained_field=lambda snapshot: snapshot.stage(stage).retained,
        decided_by=lambda snapshot: snapshot.stage(stage).decided_by,
        decision=lambda snapshot: snapshot.stage(stage).decision,
        decision_date=lambda snapshot: snapshot.stage(stage).decision_date,
    )


DEFAULT_STEPS = StepSequence(
    [
        stage_step(Stage.ENDORSEMENT, 1),
        stage_step(Stage.JOB_MANAGER, 2),
        stage_step(Stage.REGIONAL_MANAGER, 3),
        stage_step(Stage.COMPLETION, 4),
    ]
)
