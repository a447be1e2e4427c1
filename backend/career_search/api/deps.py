from __future__ import annotations

from fastapi import Request

from career_search.core.config import Settings
from career_search.services.orchestrator import SearchOrchestrator


def get_search_orchestrator(request: Request) -> SearchOrchestrator:
    orchestrator = getattr(request.app.state, "search_orchestrator", None)
    if orchestrator is None:
        msg = "Search orchestrator has not been initialised"
        raise RuntimeError(msg)
    return orchestrator


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
