"""Approval workflow domain concepts.

This package introduces first-class types for:
- Workflow statuses and status transitions
- Immutable snapshots of a workflow entity's stage fields
- Step descriptors, one per approval stage
- The last-actor resolver

Everything here is pure: nothing is persisted and nothing is mutated.
"""

__all__: list[str] = []
