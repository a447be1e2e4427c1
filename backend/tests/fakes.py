from __future__ import annotations

import json
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any, cast

import httpx
import openai
from openai import AsyncOpenAI

from career_search.core.config import Settings
from career_search.services.insights import MARKET_SYSTEM_PROMPT, InsightGenerator
from career_search.services.orchestrator import SearchOrchestrator
from career_search.services.search import AsyncHttpClient, SerpApiSearchService
from career_search.services.search_cache import SearchResultCache

CAREER_PAYLOAD: dict[str, Any] = {
    "practicalGuides": [
        "List the product decisions you already influence in your current role",
        "Run customer interviews for a small internal tool",
        "Write a one-page product spec and get feedback from a PM",
        "Learn basic product analytics with a free SQL course",
        "Apply for associate product manager roles at mid-size companies",
    ],
    "theoreticalInsight": "Product management rewards judgement built from many small bets.",
    "contradictoryTake": "A PM title is not required to practise product thinking.",
    "relatedSearches": [
        "associate product manager interview",
        "product manager skills checklist",
        "engineer to product manager",
        "product management certification",
    ],
}

MARKET_PAYLOAD: dict[str, Any] = {
    "demandTrend": "rising",
    "trendPercentage": 12,
    "averageSalary": "$135,000",
    "salaryTrend": "up",
    "topCompanies": [
        {"name": "Atlassian", "jobCount": 42, "avgSalary": "$150,000"},
        {"name": "Shopify", "jobCount": 30},
    ],
    "requiredSkills": [
        {"skill": "Roadmapping", "demandScore": 90, "growthRate": "15%"},
        {"skill": "SQL", "demandScore": 75, "growthRate": "10%"},
    ],
    "jobGrowthRate": "10%",
    "locationInsights": [
        {"city": "Austin", "jobCount": 120, "avgSalary": "$128,000"},
    ],
    "industryBreakdown": [
        {"industry": "Software", "percentage": 65},
        {"industry": "Finance", "percentage": 35},
    ],
}


def organic(link: str, title: str = "Result", snippet: str = "") -> dict[str, Any]:
    return {"title": title, "link": link, "snippet": snippet}


SERP_PAYLOAD: dict[str, Any] = {
    "search_metadata": {"id": "abc123", "status": "Success", "total_time_taken": 0.8},
    "organic_results": [
        organic(
            "https://www.coursera.org/specializations/product-management",
            "Product Management Specialization",
            "An online course and guide to product strategy.",
        ),
        organic(
            "https://www.indeed.com/jobs?q=product+manager",
            "Product Manager Jobs",
            "Browse 10,000 open roles.",
        ),
        organic(
            "https://github.com/pm-resources/awesome-product-management",
            "Awesome Product Management",
            "A curated list of documentation and articles.",
        ),
        organic(
            "https://medium.com/@pm/switching-to-product",
            "Switching to product",
            "An article about changing careers.",
        ),
        organic(
            "https://www.reddit.com/r/ProductManagement/",
            "r/ProductManagement",
            "Community discussion.",
        ),
    ],
}


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "environment": "test",
        "debug": False,
        "serpapi_key": "test-serp-key",
        "openai_api_key": "test-openai-key",
        "search_cache_max_entries": 100,
        "search_cache_ttl_seconds": 3600,
    }
    values.update(overrides)
    return Settings(**values)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAsyncHttpClient:
    """Replays queued replies; each reply is a payload, ``(status, payload)``,
    raw ``bytes`` or an exception to raise."""

    def __init__(self, replies: list[Any], calls: list[dict[str, Any]]) -> None:
        self._replies = replies
        self.calls = calls

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> None:
        return None

    async def get(
        self,
        url: str,
        *,
        params: dict[str, Any],
        timeout: httpx.Timeout,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        self.calls.append(
            {"url": url, "params": params, "timeout": timeout, "headers": headers}
        )
        if not self._replies:
            raise AssertionError("Unexpected HTTP call")
        reply = self._replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        request = httpx.Request("GET", url, params=params)
        if isinstance(reply, bytes):
            return httpx.Response(status_code=200, content=reply, request=request)
        status_code, payload = reply if isinstance(reply, tuple) else (200, reply)
        return httpx.Response(status_code=status_code, json=payload, request=request)


def http_factory(
    replies: list[Any], calls: list[dict[str, Any]]
) -> Callable[[httpx.Timeout], AsyncHttpClient]:
    def factory(timeout: httpx.Timeout) -> AsyncHttpClient:
        return FakeAsyncHttpClient(replies, calls)

    return factory


def completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeCompletions:
    """Answers career and market prompts independently of call order."""

    def __init__(self, career: Any, market: Any) -> None:
        self._replies = {"career": career, "market": market}
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        system_prompt = kwargs["messages"][0]["content"]
        kind = "market" if system_prompt == MARKET_SYSTEM_PROMPT else "career"
        reply = self._replies[kind]
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, dict):
            reply = json.dumps(reply)
        return completion(reply)


class FakeCompletionClient:
    def __init__(self, career: Any = None, market: Any = None) -> None:
        self.completions = FakeCompletions(
            CAREER_PAYLOAD if career is None else career,
            MARKET_PAYLOAD if market is None else market,
        )
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.completions.calls


def connection_error() -> Exception:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return openai.APIConnectionError(request=request)


def make_orchestrator(
    settings: Settings,
    *,
    serp_replies: list[Any],
    http_calls: list[dict[str, Any]] | None = None,
    completion_client: FakeCompletionClient | None = None,
    clock: FakeClock | None = None,
) -> SearchOrchestrator:
    """Build an orchestrator around fakes; no completion client means degraded mode."""

    calls = http_calls if http_calls is not None else []
    generator = None
    if completion_client is not None:
        generator = InsightGenerator(
            settings_obj=settings, client=cast(AsyncOpenAI, completion_client)
        )
    return SearchOrchestrator(
        search_service=SerpApiSearchService(
            settings_obj=settings, http_client_factory=http_factory(serp_replies, calls)
        ),
        insight_generator=generator,
        cache=SearchResultCache(
            max_entries=settings.search_cache_max_entries,
            ttl_seconds=settings.search_cache_ttl_seconds,
            timer=clock or FakeClock(),
        ),
        settings_obj=settings,
    )
