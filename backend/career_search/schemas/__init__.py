from .search import (
    AccessType,
    CareerInsights,
    CompanyDemand,
    IndustryShare,
    LocationInsight,
    MarketInsights,
    SearchEnvelope,
    SearchFilters,
    SearchMetadata,
    SearchRequest,
    SearchResponse,
    SearchStatus,
    SkillDemand,
    UserProfile,
    WebsiteCategory,
    WebsiteRecommendation,
)

__all__ = [
    "AccessType",
    "CareerInsights",
    "CompanyDemand",
    "IndustryShare",
    "LocationInsight",
    "MarketInsights",
    "SearchEnvelope",
    "SearchFilters",
    "SearchMetadata",
    "SearchRequest",
    "SearchResponse",
    "SearchStatus",
    "SkillDemand",
    "UserProfile",
    "WebsiteCategory",
    "WebsiteRecommendation",
]
