from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import urlsplit

import httpx
import structlog

from career_search.core.config import Settings, settings
from career_search.schemas import SearchFilters, WebsiteRecommendation
from career_search.services import classification

_logger = structlog.get_logger(__name__)

_DEFAULT_HEADERS = {"User-Agent": "CareerSearch/2.0", "Accept": "application/json"}
_NO_RESULTS_MARKER = "hasn't returned any results"


class SearchConfigurationError(RuntimeError):
    """Raised when search cannot be performed due to missing configuration."""


class SearchExecutionError(RuntimeError):
    """Raised when the upstream search request fails."""

    def __init__(self, message: str, *, search_time_ms: int | None = None) -> None:
        super().__init__(message)
        self.search_time_ms = search_time_ms


class AsyncHttpClient(Protocol):
    async def __aenter__(self) -> AsyncHttpClient: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> None: ...

    async def get(
        self,
        url: str,
        *,
        params: dict[str, Any],
        timeout: httpx.Timeout,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response: ...


HttpClientFactory = Callable[[httpx.Timeout], AsyncHttpClient]


@dataclass(slots=True)
class OrganicResult:
    title: str | None
    link: str
    snippet: str | None
    position: int


@dataclass(slots=True)
class WebsiteSearchResult:
    websites: list[WebsiteRecommendation]
    search_time_ms: int

    @property
    def total_results(self) -> int:
        return len(self.websites)


@dataclass(slots=True)
class ProviderProbe:
    status: str
    result_count: int = 0
    first_result_title: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    message: str | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status}
        if self.status == "success":
            payload.update(
                {
                    "metadata": self.metadata,
                    "hasResults": self.result_count > 0,
                    "resultCount": self.result_count,
                    "firstResultTitle": self.first_result_title,
                }
            )
        else:
            payload["message"] = self.message
        return payload


def _default_http_client_factory(timeout: httpx.Timeout) -> AsyncHttpClient:
    return httpx.AsyncClient(timeout=timeout)


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


def _has_host(link: str) -> bool:
    try:
        return bool(urlsplit(link).hostname)
    except ValueError:
        return False


class SerpApiSearchService:
    """Fetch organic web results from SerpAPI and shape them into recommendations."""

    def __init__(
        self,
        *,
        settings_obj: Settings | None = None,
        http_client_factory: HttpClientFactory | None = None,
    ) -> None:
        self._settings = settings_obj or settings
        self._http_client_factory = http_client_factory or _default_http_client_factory
        self._timeout = httpx.Timeout(
            self._settings.serpapi_timeout,
            connect=self._settings.serpapi_connect_timeout,
        )

    @property
    def configured(self) -> bool:
        return self._settings.search_enabled

    async def search(
        self, query: str, filters: SearchFilters | None = None
    ) -> WebsiteSearchResult:
        if not self.configured:
            raise SearchConfigurationError("SerpAPI key is not configured")

        if filters is not None:
            _logger.debug(
                "serpapi.filters_ignored",
                filters=filters.model_dump(exclude_none=True),
            )

        started = time.perf_counter()
        prepared_query = self._apply_suffix(query)
        try:
            payload = await self._fetch(prepared_query, self._settings.search_result_limit)
            organic = self._extract_organic(payload)
        except SearchExecutionError as exc:
            exc.search_time_ms = _elapsed_ms(started)
            raise

        websites = self._build_recommendations(organic)
        elapsed = _elapsed_ms(started)
        _logger.info(
            "serpapi.search_complete",
            query=prepared_query,
            organic=len(organic),
            recommended=len(websites),
            elapsed_ms=elapsed,
        )
        return WebsiteSearchResult(
            websites=websites,
            search_time_ms=elapsed,
        )

    async def probe(self, query: str) -> ProviderProbe:
        """Issue a one-result request and report on it without raising."""

        if not self.configured:
            return ProviderProbe(status="error", message="SerpAPI key is not configured")
        try:
            payload = await self._fetch(query, 1)
            organic = self._extract_organic(payload)
        except SearchExecutionError as exc:
            return ProviderProbe(status="error", message=str(exc))

        raw_metadata = payload.get("search_metadata")
        metadata: dict[str, Any] = {}
        if isinstance(raw_metadata, dict):
            metadata = {
                key: raw_metadata[key]
                for key in ("id", "status", "total_time_taken")
                if key in raw_metadata
            }
        return ProviderProbe(
            status="success",
            result_count=len(organic),
            first_result_title=organic[0].title if organic else None,
            metadata=metadata,
        )

    async def _fetch(self, query: str, num: int) -> dict[str, Any]:
        url = self._settings.serpapi_url
        params: dict[str, Any] = {
            "engine": self._settings.serpapi_engine,
            "q": query,
            "num": num,
            "gl": self._settings.search_locale_country,
            "hl": self._settings.search_locale_language,
            "api_key": self._settings.serpapi_key,
        }
        try:
            async with self._http_client_factory(self._timeout) as client:
                response = await client.get(
                    url,
                    params=params,
                    timeout=self._timeout,
                    headers=_DEFAULT_HEADERS,
                )
        except httpx.HTTPError as exc:
            _logger.warning("serpapi.http_error", error=str(exc), url=url)
            raise SearchExecutionError("Failed to query SerpAPI") from exc

        if response.status_code >= 400:
            detail = self._error_detail(response)
            _logger.warning(
                "serpapi.bad_status",
                status_code=response.status_code,
                error=detail,
            )
            message = f"SerpAPI request failed with status {response.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise SearchExecutionError(message)

        try:
            data = response.json()
        except ValueError as exc:
            _logger.warning("serpapi.invalid_json", error=str(exc))
            raise SearchExecutionError("SerpAPI returned malformed JSON") from exc
        if not isinstance(data, dict):
            raise SearchExecutionError("SerpAPI returned an unexpected payload")

        error = data.get("error")
        if isinstance(error, str) and error.strip():
            if _NO_RESULTS_MARKER in error:
                _logger.info("serpapi.no_results", query=query)
                return {key: value for key, value in data.items() if key != "error"}
            _logger.warning("serpapi.provider_error", error=error)
            raise SearchExecutionError(f"SerpAPI error: {error}")
        return data

    def _error_detail(self, response: httpx.Response) -> str | None:
        try:
            data = response.json()
        except ValueError:
            return None
        if isinstance(data, dict):
            return self._clean_string(data.get("error"))
        return None

    def _extract_organic(self, payload: dict[str, Any]) -> list[OrganicResult]:
        raw_items = payload.get("organic_results")
        if raw_items is None:
            return []
        if not isinstance(raw_items, list):
            raise SearchExecutionError("SerpAPI returned malformed organic results")

        results: list[OrganicResult] = []
        for position, raw in enumerate(raw_items):
            if not isinstance(raw, dict):
                continue
            link = self._clean_string(raw.get("link"))
            if link is None or not link.lower().startswith(("http://", "https://")):
                continue
            if not _has_host(link):
                _logger.debug("serpapi.unparseable_link", link=link)
                continue
            results.append(
                OrganicResult(
                    title=self._clean_string(raw.get("title")),
                    link=link,
                    snippet=self._clean_string(raw.get("snippet")),
                    position=position,
                )
            )
        return results

    def _build_recommendations(
        self, organic: list[OrganicResult]
    ) -> list[WebsiteRecommendation]:
        recommendations: list[WebsiteRecommendation] = []
        for result in organic:
            if classification.is_job_board(result.link):
                continue
            access = classification.access_type(result.link)
            recommendations.append(
                WebsiteRecommendation(
                    title=result.title or classification.match_target(result.link),
                    url=result.link,
                    description=result.snippet or "",
                    category=classification.classify_category(result.link),
                    relevance_score=classification.relevance_score(result.position),
                    trust_score=classification.trust_score(result.link),
                    features=classification.extract_features(result.snippet),
                    is_premium=classification.is_premium(result.link),
                    access_type=access,
                )
            )
        recommendations.sort(key=lambda item: item.relevance_score, reverse=True)
        return recommendations[: self._settings.search_result_limit]

    def _apply_suffix(self, query: str) -> str:
        suffix = self._settings.search_query_suffix.strip()
        if not suffix:
            return query
        return f"{query} {suffix}"

    def _clean_string(self, value: Any) -> str | None:
        if isinstance(value, str):
            stripped = value.strip()
            return stripped if stripped else None
        return None


__all__ = [
    "ProviderProbe",
    "SearchConfigurationError",
    "SearchExecutionError",
    "SerpApiSearchService",
    "WebsiteSearchResult",
]
