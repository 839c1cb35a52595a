"""SoraGen — FastAPI application entry point.

Mounts the API routes and resumes any task that was in flight when the
process last stopped.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from soragen.api.router import api_router
from soragen.config import get_settings
from soragen.service import GenerationService

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(service: GenerationService | None = None) -> FastAPI:
    """Build the application. ``service`` is injectable for tests."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Resume the persisted session on startup, stop polling on shutdown."""
        svc = service or GenerationService.from_settings(settings)
        app.state.service = svc
        logger.info("%s starting up (api=%s)", settings.APP_NAME, settings.API_BASE_URL)

        resumed = await svc.resume()
        if resumed:
            logger.info("Resumed in-flight task %s", resumed)

        yield

        await svc.aclose()
        logger.info("%s shut down", settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Submit Sora video generation jobs and track them to completion",
        lifespan=lifespan,
    )
    # CORS — allow the frontend form (configurable via CORS_ORIGINS env)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "app": settings.APP_NAME}

    return app


app = create_app()
