from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import api_router
from .core.config import Settings, settings
from .core.logging import configure_logging
from .services.orchestrator import SearchOrchestrator, build_search_orchestrator


def create_application(
    settings_obj: Settings | None = None,
    *,
    orchestrator: SearchOrchestrator | None = None,
) -> FastAPI:
    active = settings_obj or settings
    configure_logging(active)

    app = FastAPI(
        title=active.app_name,
        version=active.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = active
    # One cache per process; every request shares this orchestrator.
    app.state.search_orchestrator = orchestrator or build_search_orchestrator(active)

    origins = active.cors_origins or []
    if active.debug and not origins:
        origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    app.include_router(api_router, prefix="/api")
    return app


app = create_application()
