# api/main.py
"""
FastAPI application entry point.

Responsibilities:
- Resolve settings (missing Supabase credentials abort startup)
- Configure global middleware (CORS)
- Register API routers
- Expose health and service metadata endpoints

Run with:
    uvicorn api.main:create_app --factory
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import router
from src.config.settings import Settings, load_settings
from src.utils.logger import get_logger

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Raises ConfigurationError when called without settings and the
    environment lacks SUPABASE_URL / SUPABASE_ANON_KEY.
    """
    settings = settings or load_settings(require_supabase=True)

    app = FastAPI(
        title="Species Catalog API",
        description="Species catalog editing and species speed chart data",
        version="1.0.0",
    )
    app.state.settings = settings

    configure_middleware(app, settings)
    register_routes(app)

    logger.info("[api] Application created")
    return app


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Session cookies travel with requests, so only the site origin is allowed.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.site_url],
        allow_credentials=True,
        allow_methods=["GET", "PATCH"],
        allow_headers=["*"],
    )


def register_routes(app: FastAPI) -> None:
    """
    Register all API routers and system endpoints.
    """
    app.include_router(router)

    @app.get("/health", tags=["system"])
    def health_check():
        return {"status": "ok"}

    @app.get("/", tags=["system"])
    def root():
        return {
            "service": "Species Catalog API",
            "status": "running",
            "docs": "/docs",
            "health": "/health",
        }
