from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from career_search.api.deps import get_app_settings, get_search_orchestrator
from career_search.core.config import Settings
from career_search.services.health import (
    build_diagnostics_report,
    build_health_payload,
)
from career_search.services.orchestrator import SearchOrchestrator

router = APIRouter()


@router.get("", summary="Health probe")
def healthcheck(settings: Settings = Depends(get_app_settings)) -> dict[str, Any]:
    return build_health_payload(settings)


@router.get("/diagnostics", summary="Provider configuration and connectivity report")
async def diagnostics(
    query: str = Query(
        "test query", min_length=1, max_length=255, description="Probe query"
    ),
    settings: Settings = Depends(get_app_settings),
    orchestrator: SearchOrchestrator = Depends(get_search_orchestrator),
) -> dict[str, Any]:
    return await build_diagnostics_report(orchestrator, settings, query=query)
