"""
Main FastAPI application.

This is the entry point for the pipeline board API. The app hosts one board
session: a single PipelineService created at startup around one backend client.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from hr_pipeline import __version__
from hr_pipeline.core.config import settings
from hr_pipeline.core.logging import configure_logging
from hr_pipeline.errors import AppError, app_error_handler
from hr_pipeline.repositories.backend_client import BackendClient
from hr_pipeline.repositories.pipeline_repository import PipelineRepository
from hr_pipeline.repositories.user_repository import UserRepository
from hr_pipeline.routers import health, pipeline
from hr_pipeline.services.pipeline_service import PipelineService

logger = logging.getLogger(__name__)


def build_pipeline_service(client: BackendClient) -> PipelineService:
    return PipelineService(PipelineRepository(client), UserRepository(client))


def create_app(service: Optional[PipelineService] = None) -> FastAPI:
    """
    Build the application.

    Pass ``service`` to run against an already-wired board session (tests,
    embedding); otherwise the lifespan connects to ``settings.BACKEND_URL``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        logger.info("Starting %s...", settings.APP_NAME)
        if service is not None:
            app.state.pipeline_service = service
            yield
        else:
            async with BackendClient() as client:
                app.state.pipeline_service = build_pipeline_service(client)
                yield
        logger.info("Shutting down %s...", settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Candidate pipeline board: paginated stages, optimistic moves, user conversion",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_exception_handler(AppError, app_error_handler)

    # Include routers (API endpoints)
    app.include_router(health.router, tags=["Health"])
    app.include_router(pipeline.router)

    return app


app = create_app()
