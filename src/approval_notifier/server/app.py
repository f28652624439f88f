"""FastAPI app factory.

Endpoints are intentionally thin wrappers over the resolver and the rule engine.
Nothing here sends mail.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException

from approval_notifier import __version__
from approval_notifier.config import NotifierSettings
from approval_notifier.notifications.engine import BatchFailure, dispatch
from approval_notifier.notifications.recipients import load_recipient_config
from approval_notifier.notifications.registry import default_registry
from approval_notifier.server.models import (
    LastActorRequest,
    LastActorResponse,
    PreviewRequest,
    PreviewResponse,
)
from approval_notifier.workflow.last_actor import ResolutionError, describe_last_actor
from approval_notifier.workflow.steps import DEFAULT_STEPS

logger = logging.getLogger(__name__)


def create_app(settings: NotifierSettings | None = None) -> FastAPI:
    settings = settings or NotifierSettings()

    app = FastAPI(
        title="Approval Notifier",
        version=__version__,
        description="Last-actor resolution and notification previews for approval workflows.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Built once; both are read-only for the lifetime of the app.
    rules = default_registry()
    recipient_config = load_recipient_config(settings.distribution_lists_path)

    app.state.settings = settings
    app.state.rules = rules
    app.state.recipient_config = recipient_config

    @app.get("/api/v1/health")
    def health() -> dict[str, object]:
        return {"status": "ok", "version": __version__, "rules": rules.rule_ids}

    @app.post("/api/v1/last-actor", response_model=LastActorResponse)
    def last_actor(req: LastActorRequest) -> LastActorResponse:
        try:
            actor = describe_last_actor(DEFAULT_STEPS, req.snapshot.to_domain())
        except ResolutionError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        if actor is None:
            return LastActorResponse(found=False)
        return LastActorResponse.model_validate({"found": True, **actor.to_json()})

    @app.post("/api/v1/notifications/preview", response_model=PreviewResponse)
    def preview(req: PreviewRequest) -> PreviewResponse:
        try:
            outcome = dispatch(rules, req.snapshot.to_domain(), req.transition(), recipient_config)
        except ResolutionError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        except BatchFailure as e:
            logger.error("Notification preview failed", extra={"error": str(e)})
            raise HTTPException(
                status_code=422,
                detail={
                    "error": str(e),
                    "diagnostics": [d.to_json() for d in e.diagnostics],
                },
            ) from e
        return PreviewResponse.model_validate(outcome.to_json())

    return app
