from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class WebsiteCategory(StrEnum):
    LEARNING_PLATFORM = "Learning Platform"
    INDUSTRY_BLOG = "Industry Blog"
    PROFESSIONAL_NETWORK = "Professional Network"
    COURSE = "Course"
    COMMUNITY = "Community"
    JOB_BOARD = "Job Board"
    CAREER_GUIDE = "Career Guide"
    TECH_BLOG = "Tech Blog"
    CODE_REPOSITORY = "Code Repository"
    QA_FORUM = "Q&A Forum"
    REFERENCE = "Reference"
    RESOURCE = "Resource"


class AccessType(StrEnum):
    FREE = "free"
    PREMIUM = "premium"
    REGISTRATION = "registration"
    UNKNOWN = "unknown"


class SearchFilters(CamelModel):
    """Optional job filters sent by the UI; informational only."""

    location: str | None = None
    salary_range: str | None = None
    job_type: str | None = None
    experience_level: str | None = None


class UserProfile(CamelModel):
    skills: list[str] = Field(default_factory=list)
    experience: str | None = None
    location: str | None = None
    current_role: str | None = None

    @field_validator("skills", mode="before")
    @classmethod
    def _drop_missing_skills(cls, value: object) -> object:
        return [] if value is None else value

    def is_empty(self) -> bool:
        return not (self.skills or self.experience or self.location or self.current_role)


class SearchRequest(CamelModel):
    """Validated body of ``POST /api/search``."""

    query: StrictStr
    filters: SearchFilters | None = None
    user_profile: UserProfile | None = None

    @field_validator("query")
    @classmethod
    def _require_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("query must not be blank")
        return stripped


class WebsiteRecommendation(CamelModel):
    """One organic search hit, classified and scored."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    description: str = ""
    category: WebsiteCategory = WebsiteCategory.RESOURCE
    relevance_score: int = Field(ge=0, le=100)
    trust_score: int = Field(ge=0, le=100)
    features: list[str] = Field(default_factory=list)
    is_premium: bool = False
    access_type: AccessType = AccessType.UNKNOWN


class CompanyDemand(CamelModel):
    name: str
    job_count: int = Field(default=0, ge=0)
    avg_salary: str | None = None


class SkillDemand(CamelModel):
    skill: str
    demand_score: int = Field(ge=0, le=100)
    growth_rate: str = ""


class LocationInsight(CamelModel):
    city: str
    job_count: int = Field(default=0, ge=0)
    avg_salary: str = ""


class IndustryShare(CamelModel):
    industry: str
    percentage: float = Field(ge=0, le=100)


class MarketInsights(CamelModel):
    """Aggregate labour-market view produced by the completion provider."""

    demand_trend: Literal["rising", "stable", "declining"]
    trend_percentage: float = 0
    average_salary: str
    salary_trend: Literal["up", "down", "stable"]
    top_companies: list[CompanyDemand] = Field(default_factory=list)
    required_skills: list[SkillDemand] = Field(default_factory=list)
    job_growth_rate: str
    location_insights: list[LocationInsight] = Field(default_factory=list)
    industry_breakdown: list[IndustryShare] = Field(default_factory=list)

    @classmethod
    def neutral(cls) -> MarketInsights:
        return cls(
            demand_trend="stable",
            trend_percentage=0,
            average_salary="Unknown",
            salary_trend="stable",
            job_growth_rate="Unknown",
        )


class CareerInsights(CamelModel):
    practical_guides: list[str] = Field(default_factory=list)
    theoretical_insight: str = ""
    contradictory_take: str = ""
    related_searches: list[str] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> CareerInsights:
        return cls()


class SearchMetadata(CamelModel):
    """Facts about the search that produced a response.

    ``cache_hit`` describes the original computation and stays ``False`` when
    the response is later replayed from the cache; the envelope's ``cached``
    field reports a hit.
    """

    total_results: int = Field(ge=0)
    search_time: int = Field(ge=0, description="Milliseconds spent on the search")
    cache_hit: bool = Field(
        default=False,
        description="Always false in stored responses; see SearchEnvelope.cached",
    )
    api_version: str


class SearchStatus(CamelModel):
    phase: Literal["searching", "analyzing", "generating", "complete"] = "complete"
    message: str = "Search completed successfully"
    progress: int = Field(default=100, ge=0, le=100)


class SearchResponse(CamelModel):
    """Orchestration result; cached as-is and returned as ``data``."""

    practical_guides: list[str] = Field(default_factory=list)
    theoretical_insight: str = ""
    contradictory_take: str = ""
    related_searches: list[str] = Field(default_factory=list)
    market_insights: MarketInsights
    recommended_websites: list[WebsiteRecommendation] = Field(default_factory=list)
    search_metadata: SearchMetadata
    status: SearchStatus = Field(default_factory=SearchStatus)
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "practicalGuides": [
                        "Map your transferable skills to product work",
                        "Shadow a product manager for one sprint",
                        "Ship a small side project end to end",
                        "Learn the basics of product analytics",
                    ],
                    "theoreticalInsight": "Product management rewards breadth.",
                    "contradictoryTake": "A PM title is not required to do PM work.",
                    "relatedSearches": ["product manager interview questions"],
                    "marketInsights": {
                        "demandTrend": "rising",
                        "trendPercentage": 8,
                        "averageSalary": "$135,000",
                        "salaryTrend": "up",
                        "topCompanies": [],
                        "requiredSkills": [],
                        "jobGrowthRate": "10%",
                        "locationInsights": [],
                        "industryBreakdown": [],
                    },
                    "recommendedWebsites": [
                        {
                            "title": "Product Management Specialization",
                            "url": "https://www.coursera.org/specializations/pm",
                            "description": "A course on product strategy.",
                            "category": "Learning Platform",
                            "relevanceScore": 100,
                            "trustScore": 80,
                            "features": ["Course"],
                            "isPremium": True,
                            "accessType": "premium",
                        }
                    ],
                    "searchMetadata": {
                        "totalResults": 1,
                        "searchTime": 1200,
                        "cacheHit": False,
                        "apiVersion": "2.0.0",
                    },
                    "status": {
                        "phase": "complete",
                        "message": "Search completed successfully",
                        "progress": 100,
                    },
                }
            ]
        },
    )


class SearchEnvelope(CamelModel):
    """Success payload of ``POST /api/search``."""

    success: Literal[True] = True
    data: SearchResponse
    cached: bool = False
    warnings: str | None = None

    def to_wire(self) -> dict[str, object]:
        payload = self.model_dump(mode="json", by_alias=True)
        if not self.warnings:
            payload.pop("warnings", None)
        return payload
