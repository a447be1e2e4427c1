from __future__ import annotations

from json import JSONDecodeError
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from career_search.api.deps import get_search_orchestrator
from career_search.schemas import SearchEnvelope
from career_search.services.orchestrator import (
    QUERY_REQUIRED_MESSAGE,
    SearchOrchestrator,
    SearchValidationError,
    parse_search_request,
)
from career_search.services.search import (
    SearchConfigurationError,
    SearchExecutionError,
)

router = APIRouter()
_logger = structlog.get_logger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred during the search"


async def _read_body(request: Request) -> Any:
    try:
        return await request.json()
    except (JSONDecodeError, UnicodeDecodeError) as exc:
        raise SearchValidationError(QUERY_REQUIRED_MESSAGE) from exc


@router.post(
    "",
    summary="Career search with AI insights",
    response_model=SearchEnvelope,
    responses={
        400: {"description": "Missing or invalid query"},
        500: {"description": "Search provider not configured or internal error"},
        502: {"description": "Search provider request failed"},
    },
)
async def search_careers(
    request: Request,
    orchestrator: SearchOrchestrator = Depends(get_search_orchestrator),
) -> JSONResponse:
    try:
        search_request = parse_search_request(await _read_body(request))
        outcome = await orchestrator.search(search_request)
    except SearchValidationError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc)},
        )
    except SearchConfigurationError as exc:
        _logger.error("search.configuration_error", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )
    except SearchExecutionError as exc:
        content: dict[str, Any] = {"success": False, "error": str(exc)}
        if exc.search_time_ms is not None:
            content["searchTime"] = exc.search_time_ms
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=content)
    except Exception as exc:
        _logger.exception("search.unexpected_error", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": GENERIC_ERROR_MESSAGE},
        )

    envelope = SearchEnvelope(
        data=outcome.response, cached=outcome.cached, warnings=outcome.warnings
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=envelope.to_wire())
