from __future__ import annotations

from fastapi import APIRouter

from .endpoints import health, search

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
