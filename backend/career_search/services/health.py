from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from career_search.core.config import Settings
from career_search.services.orchestrator import SearchOrchestrator

CREDENTIAL_SET = "✓ Set"
CREDENTIAL_MISSING = "✗ Missing"


@dataclass(slots=True)
class HealthComponent:
    name: str
    status: str
    details: Mapping[str, object]

    def to_dict(self) -> dict[str, object]:
        return {"status": self.status, **self.details}


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _overall_status(components: list[HealthComponent]) -> str:
    status_rank = {"ok": 0, "skipped": 0, "degraded": 1, "error": 2}
    worst = 0
    for component in components:
        worst = max(worst, status_rank.get(component.status, 1))
    for label, rank in status_rank.items():
        if rank == worst:
            return label
    return "degraded"


def build_health_payload(settings: Settings) -> dict[str, str]:
    return {
        "status": "healthy",
        "version": settings.api_version,
        "timestamp": utc_timestamp(),
    }


def describe_credentials(settings: Settings) -> dict[str, str]:
    """Report which provider keys are present without exposing their values."""

    return {
        "OPENAI_API_KEY": CREDENTIAL_SET if settings.ai_enabled else CREDENTIAL_MISSING,
        "SERPAPI_KEY": CREDENTIAL_SET if settings.search_enabled else CREDENTIAL_MISSING,
    }


async def _probe_search_provider(
    orchestrator: SearchOrchestrator, query: str
) -> HealthComponent:
    if not orchestrator.search_service.configured:
        return HealthComponent(
            name="serpapi",
            status="error",
            details={"message": "SerpAPI key is not configured"},
        )
    start = time.perf_counter()
    probe = await orchestrator.search_service.probe(query)
    details: dict[str, Any] = probe.as_dict()
    details.pop("status", None)
    details["latencyMs"] = round((time.perf_counter() - start) * 1000, 3)
    status = "ok" if probe.status == "success" else "error"
    return HealthComponent(name="serpapi", status=status, details=details)


def _completion_component(orchestrator: SearchOrchestrator) -> HealthComponent:
    if orchestrator.degraded:
        return HealthComponent(
            name="openai",
            status="degraded",
            details={"message": "AI insights disabled; fallback values are served"},
        )
    return HealthComponent(name="openai", status="ok", details={})


def _cache_component(orchestrator: SearchOrchestrator) -> HealthComponent:
    cache = orchestrator.cache
    return HealthComponent(
        name="cache",
        status="ok",
        details={
            "entries": len(cache),
            "maxEntries": cache.max_entries,
            "ttlSeconds": cache.ttl_seconds,
        },
    )


async def build_diagnostics_report(
    orchestrator: SearchOrchestrator,
    settings: Settings,
    *,
    query: str = "test query",
) -> dict[str, object]:
    components = [
        await _probe_search_provider(orchestrator, query),
        _completion_component(orchestrator),
        _cache_component(orchestrator),
    ]
    return {
        "status": _overall_status(components),
        "timestamp": utc_timestamp(),
        "environment": describe_credentials(settings),
        "components": {component.name: component.to_dict() for component in components},
    }


__all__ = [
    "HealthComponent",
    "build_diagnostics_report",
    "build_health_payload",
    "describe_credentials",
]
