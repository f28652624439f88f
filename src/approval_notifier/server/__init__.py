"""FastAPI server adapter for approval-notifier.

Design intent:
- Keep business logic in `approval_notifier.workflow` and `approval_notifier.notifications`
- Keep server-specific concerns (routing, request validation) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from approval_notifier.server.app import create_app
