"""AI-generated career and market insights.

Both completions ask for a JSON object and are validated against pydantic
models before use. Output that fails validation is replaced by a neutral
fallback; only transport and provider failures raise.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import openai
import structlog
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator

from career_search.core.config import Settings, settings
from career_search.schemas import (
    CareerInsights,
    CompanyDemand,
    IndustryShare,
    LocationInsight,
    MarketInsights,
    SkillDemand,
    UserProfile,
)

_logger = structlog.get_logger(__name__)

MIN_PRACTICAL_GUIDES = 4
MAX_PRACTICAL_GUIDES = 6
MAX_RELATED_SEARCHES = 6

CAREER_SYSTEM_PROMPT = (
    "You are a career development expert. Be concise and practical. "
    "Always answer with a single JSON object and nothing else."
)
MARKET_SYSTEM_PROMPT = (
    "You are a labour market analyst. Give realistic, conservative estimates. "
    "Always answer with a single JSON object and nothing else."
)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)

ModelT = TypeVar("ModelT", bound=BaseModel)
InsightT = TypeVar("InsightT", CareerInsights, MarketInsights)


class InsightConfigurationError(RuntimeError):
    """Raised when a generator is built without a completion credential."""


class InsightGenerationError(RuntimeError):
    """Raised when the completion provider cannot be reached or rejects a call."""


@dataclass(frozen=True, slots=True)
class ParseOutcome(Generic[ModelT]):
    """Either a validated ``value`` or the ``reason`` validation failed."""

    value: ModelT | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


@dataclass(frozen=True, slots=True)
class GeneratedInsights(Generic[InsightT]):
    value: InsightT
    fallback_reason: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None


class _CareerInsightsPayload(CareerInsights):
    practical_guides: list[str]
    theoretical_insight: str
    contradictory_take: str

    @field_validator("practical_guides")
    @classmethod
    def _bound_guides(cls, value: list[str]) -> list[str]:
        cleaned = [item.strip() for item in value if item.strip()]
        if len(cleaned) < MIN_PRACTICAL_GUIDES:
            raise ValueError(
                f"expected at least {MIN_PRACTICAL_GUIDES} practical guides, got {len(cleaned)}"
            )
        return cleaned[:MAX_PRACTICAL_GUIDES]

    @field_validator("related_searches")
    @classmethod
    def _bound_related(cls, value: list[str]) -> list[str]:
        return [item.strip() for item in value if item.strip()][:MAX_RELATED_SEARCHES]


def _stringify_number(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


_MARKET_ITEM_MODELS: dict[str, type[BaseModel]] = {
    "top_companies": CompanyDemand,
    "required_skills": SkillDemand,
    "location_insights": LocationInsight,
    "industry_breakdown": IndustryShare,
}
_NUMERIC_TEXT_KEYS = frozenset({"avgSalary", "avg_salary", "growthRate", "growth_rate"})


class _MarketInsightsPayload(MarketInsights):
    @field_validator("average_salary", "job_growth_rate", mode="before")
    @classmethod
    def _text_from_number(cls, value: Any) -> Any:
        return _stringify_number(value)

    @field_validator(
        "top_companies",
        "required_skills",
        "location_insights",
        "industry_breakdown",
        mode="before",
    )
    @classmethod
    def _keep_valid_items(cls, value: Any, info: ValidationInfo) -> Any:
        """Drop list entries that do not validate instead of rejecting the block."""

        if value is None:
            return []
        if not isinstance(value, list):
            return value
        item_model = _MARKET_ITEM_MODELS[info.field_name]
        kept: list[BaseModel] = []
        for item in value:
            if isinstance(item, dict):
                item = {
                    key: _stringify_number(raw) if key in _NUMERIC_TEXT_KEYS else raw
                    for key, raw in item.items()
                }
            try:
                kept.append(item_model.model_validate(item))
            except ValidationError as exc:
                _logger.debug(
                    "insights.market_item_dropped",
                    field=info.field_name,
                    reason=_summarize_validation_error(exc),
                )
        return kept

    @field_validator("demand_trend", "salary_trend", mode="before")
    @classmethod
    def _lowercase_trend(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("trend_percentage", mode="before")
    @classmethod
    def _strip_percent(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().rstrip("%").strip() or 0
        return value


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text


def _summarize_validation_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid payload"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "payload"
    summary = f"{location}: {first.get('msg', 'invalid value')}"
    if len(errors) > 1:
        summary = f"{summary} (+{len(errors) - 1} more)"
    return summary


def parse_structured_output(
    content: str | None, model: type[ModelT]
) -> ParseOutcome[ModelT]:
    """Validate a model's text output against ``model``."""

    if content is None or not content.strip():
        return ParseOutcome(reason="empty completion")
    try:
        return ParseOutcome(value=model.model_validate_json(_strip_code_fence(content)))
    except ValidationError as exc:
        return ParseOutcome(reason=_summarize_validation_error(exc))


def build_career_prompt(query: str, profile: UserProfile | None = None) -> str:
    lines = [f'For the career question "{query}", answer with this JSON object:', "{"]
    lines.extend(
        [
            '  "practicalGuides": [4 to 6 short, actionable steps],',
            '  "theoreticalInsight": "1-2 sentences on the underlying dynamics",',
            '  "contradictoryTake": "1-2 sentences challenging the common advice",',
            '  "relatedSearches": [4 related search queries]',
            "}",
        ]
    )
    if profile is not None and not profile.is_empty():
        lines.append("Tailor the answer to this person:")
        if profile.current_role:
            lines.append(f"- Current role: {profile.current_role}")
        if profile.experience:
            lines.append(f"- Experience: {profile.experience}")
        if profile.skills:
            lines.append(f"- Skills: {', '.join(profile.skills)}")
        if profile.location:
            lines.append(f"- Location: {profile.location}")
    return "\n".join(lines)


def build_market_prompt(query: str) -> str:
    return "\n".join(
        [
            f'Describe the current job market for "{query}" as this JSON object:',
            "{",
            '  "demandTrend": "rising" | "stable" | "declining",',
            '  "trendPercentage": number,',
            '  "averageSalary": "e.g. $120,000",',
            '  "salaryTrend": "up" | "down" | "stable",',
            '  "topCompanies": [{"name": string, "jobCount": number, "avgSalary": string}],',
            '  "requiredSkills": [{"skill": string, "demandScore": 0-100, "growthRate": "e.g. 15%"}],',
            '  "jobGrowthRate": "e.g. 12%",',
            '  "locationInsights": [{"city": string, "jobCount": number, "avgSalary": string}],',
            '  "industryBreakdown": [{"industry": string, "percentage": 0-100}]',
            "}",
            "List at most 5 entries in each array.",
        ]
    )


def create_completion_client(settings_obj: Settings) -> AsyncOpenAI:
    if not settings_obj.ai_enabled:
        raise InsightConfigurationError("OpenAI API key is not configured")
    return AsyncOpenAI(
        api_key=settings_obj.openai_api_key,
        timeout=settings_obj.openai_timeout,
        max_retries=settings_obj.openai_max_attempts - 1,
    )


class InsightGenerator:
    """Request career and market insights from the completion provider."""

    def __init__(
        self,
        *,
        settings_obj: Settings | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._settings = settings_obj or settings
        self._client = client if client is not None else create_completion_client(self._settings)

    async def generate_career_insights(
        self, query: str, profile: UserProfile | None = None
    ) -> GeneratedInsights[CareerInsights]:
        content = await self._complete(
            "career", CAREER_SYSTEM_PROMPT, build_career_prompt(query, profile)
        )
        outcome = parse_structured_output(content, _CareerInsightsPayload)
        if outcome.value is None:
            _logger.warning("insights.fallback", kind="career", reason=outcome.reason)
            return GeneratedInsights(CareerInsights.empty(), outcome.reason)
        return GeneratedInsights(CareerInsights.model_validate(outcome.value.model_dump()))

    async def generate_market_insights(
        self, query: str
    ) -> GeneratedInsights[MarketInsights]:
        content = await self._complete(
            "market", MARKET_SYSTEM_PROMPT, build_market_prompt(query)
        )
        outcome = parse_structured_output(content, _MarketInsightsPayload)
        if outcome.value is None:
            _logger.warning("insights.fallback", kind="market", reason=outcome.reason)
            return GeneratedInsights(MarketInsights.neutral(), outcome.reason)
        return GeneratedInsights(MarketInsights.model_validate(outcome.value.model_dump()))

    async def _complete(self, kind: str, system_prompt: str, user_prompt: str) -> str | None:
        try:
            completion = await self._client.chat.completions.create(
                model=self._settings.openai_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
                temperature=self._settings.insights_temperature,
            )
        except openai.APIError as exc:
            _logger.warning("insights.provider_error", kind=kind, error=str(exc))
            raise InsightGenerationError(f"{kind.capitalize()} insights request failed") from exc

        choices = getattr(completion, "choices", None) or []
        if not choices:
            return None
        return choices[0].message.content


__all__ = [
    "GeneratedInsights",
    "InsightConfigurationError",
    "InsightGenerationError",
    "InsightGenerator",
    "ParseOutcome",
    "build_career_prompt",
    "build_market_prompt",
    "parse_structured_output",
]
