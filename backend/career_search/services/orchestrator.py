from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, TypeVar

import structlog
from pydantic import ValidationError

from career_search.core.config import Settings, settings
from career_search.schemas import (
    CareerInsights,
    MarketInsights,
    SearchMetadata,
    SearchRequest,
    SearchResponse,
    SearchStatus,
)
from career_search.services.insights import GeneratedInsights, InsightGenerator
from career_search.services.search import (
    SearchConfigurationError,
    SearchExecutionError,
    SerpApiSearchService,
    WebsiteSearchResult,
)
from career_search.services.search_cache import (
    CachedSearch,
    SearchResultCache,
    build_search_cache,
    cache_key,
)

_logger = structlog.get_logger(__name__)

QUERY_REQUIRED_MESSAGE = "Query is required and must be a string"
AI_NOT_CONFIGURED_WARNING = (
    "AI insights are unavailable because the OpenAI API key is not configured"
)

InsightT = TypeVar("InsightT", CareerInsights, MarketInsights)


class SearchValidationError(ValueError):
    """Raised when a search request body is missing or malformed."""


@dataclass(frozen=True, slots=True)
class SearchOutcome:
    response: SearchResponse
    cached: bool
    warnings: str | None = None


def parse_search_request(payload: Any) -> SearchRequest:
    """Validate a decoded request body.

    A missing, non-string or blank ``query`` is reported with one fixed
    message; other malformed fields get their own message.
    """

    if not isinstance(payload, dict):
        raise SearchValidationError(QUERY_REQUIRED_MESSAGE)
    query = payload.get("query")
    if not isinstance(query, str) or not query.strip():
        raise SearchValidationError(QUERY_REQUIRED_MESSAGE)
    try:
        return SearchRequest.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
        raise SearchValidationError(
            f"Invalid search request: {', '.join(fields) or 'body'}"
        ) from exc


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


async def _skipped(value: InsightT) -> GeneratedInsights[InsightT]:
    return GeneratedInsights(value)


class SearchOrchestrator:
    """Serve a search request from cache or by fanning out to both providers."""

    def __init__(
        self,
        *,
        search_service: SerpApiSearchService,
        insight_generator: InsightGenerator | None,
        cache: SearchResultCache,
        settings_obj: Settings | None = None,
    ) -> None:
        self._settings = settings_obj or settings
        self.search_service = search_service
        self.insight_generator = insight_generator
        self.cache = cache

    @property
    def degraded(self) -> bool:
        return self.insight_generator is None

    async def search(self, request: SearchRequest) -> SearchOutcome:
        query = request.query
        key = cache_key(query)

        cached = self.cache.get(key)
        if cached is not None:
            _logger.info("search.cache_hit", query=key)
            return SearchOutcome(
                response=cached.response, cached=True, warnings=cached.warnings
            )

        _logger.info("search.cache_miss", query=key)
        if not self.search_service.configured:
            raise SearchConfigurationError("SerpAPI key is not configured")

        started = time.perf_counter()
        search_result, career_result, market_result = await asyncio.gather(
            self.search_service.search(query, request.filters),
            self._career_insights(request),
            self._market_insights(query),
            return_exceptions=True,
        )

        if isinstance(search_result, BaseException):
            elapsed = _elapsed_ms(started)
            if isinstance(search_result, SearchExecutionError):
                search_result.search_time_ms = elapsed
                raise search_result
            if isinstance(search_result, SearchConfigurationError):
                raise search_result
            _logger.error(
                "search.fetch_failed",
                error=str(search_result),
                exc_info=search_result,
            )
            raise SearchExecutionError(
                "Failed to fetch search results", search_time_ms=elapsed
            ) from search_result

        warnings: list[str] = []
        if self.degraded:
            warnings.append(AI_NOT_CONFIGURED_WARNING)
        career = self._settle_insight(
            "career", career_result, CareerInsights.empty(), warnings
        )
        market = self._settle_insight(
            "market", market_result, MarketInsights.neutral(), warnings
        )

        response = self._assemble(search_result, career, market, _elapsed_ms(started))
        warning_text = " ".join(warnings) or None
        self.cache.set(key, CachedSearch(response=response, warnings=warning_text))
        _logger.info(
            "search.complete",
            query=key,
            websites=len(response.recommended_websites),
            search_time_ms=response.search_metadata.search_time,
            degraded=bool(warnings),
        )
        return SearchOutcome(response=response, cached=False, warnings=warning_text)

    def _career_insights(
        self, request: SearchRequest
    ) -> Awaitable[GeneratedInsights[CareerInsights]]:
        if self.insight_generator is None:
            return _skipped(CareerInsights.empty())
        return self.insight_generator.generate_career_insights(
            request.query, request.user_profile
        )

    def _market_insights(self, query: str) -> Awaitable[GeneratedInsights[MarketInsights]]:
        if self.insight_generator is None:
            return _skipped(MarketInsights.neutral())
        return self.insight_generator.generate_market_insights(query)

    def _settle_insight(
        self,
        kind: str,
        result: GeneratedInsights[InsightT] | BaseException,
        fallback: InsightT,
        warnings: list[str],
    ) -> InsightT:
        if isinstance(result, BaseException):
            _logger.warning(
                "search.insights_failed",
                kind=kind,
                error=str(result),
                error_type=type(result).__name__,
            )
            warnings.append(f"{kind.capitalize()} insights are temporarily unavailable.")
            return fallback
        if result.is_fallback:
            warnings.append(
                f"{kind.capitalize()} insights could not be generated and were left empty."
            )
        return result.value

    def _assemble(
        self,
        search_result: WebsiteSearchResult,
        career: CareerInsights,
        market: MarketInsights,
        elapsed_ms: int,
    ) -> SearchResponse:
        return SearchResponse(
            practical_guides=career.practical_guides,
            theoretical_insight=career.theoretical_insight,
            contradictory_take=career.contradictory_take,
            related_searches=career.related_searches,
            market_insights=market,
            recommended_websites=search_result.websites,
            search_metadata=SearchMetadata(
                total_results=search_result.total_results,
                search_time=elapsed_ms,
                cache_hit=False,
                api_version=self._settings.api_version,
            ),
            status=SearchStatus(),
        )


def build_search_orchestrator(settings_obj: Settings | None = None) -> SearchOrchestrator:
    """Wire the production services; AI insights are skipped when unconfigured."""

    active = settings_obj or settings
    generator = InsightGenerator(settings_obj=active) if active.ai_enabled else None
    if generator is None:
        _logger.warning("search.ai_disabled", reason="openai_api_key missing")
    return SearchOrchestrator(
        search_service=SerpApiSearchService(settings_obj=active),
        insight_generator=generator,
        cache=build_search_cache(active),
        settings_obj=active,
    )


__all__ = [
    "AI_NOT_CONFIGURED_WARNING",
    "QUERY_REQUIRED_MESSAGE",
    "SearchOrchestrator",
    "SearchOutcome",
    "SearchValidationError",
    "build_search_orchestrator",
    "parse_search_request",
]
