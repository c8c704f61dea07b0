"""
Study Timer API

FastAPI application factory. The lifespan builds the container (engine,
stores, services), creates missing tables and disposes the engine on
shutdown. Tests pass in a container built on a temporary database.

Run:
    uvicorn studytimer.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studytimer.config import settings
from studytimer.container import Container, build_container
from studytimer.dependencies import RequireAPIKey
from studytimer.logging_setup import setup_logging
from studytimer.middleware.error_handling import setup_error_handling
from studytimer.routers import (
    calendar_router,
    groups_router,
    health_router,
    reviews_router,
    sessions_router,
    settings_router,
    stats_router,
    tasks_router,
)

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        container: Prebuilt container to serve (built from settings when None).
            A passed-in container is not disposed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = container is None
        app.state.container = container or build_container()
        await app.state.container.init()
        logger.info(f"{settings.APP_NAME} started")
        yield
        if owned:
            await app.state.container.dispose()
        logger.info(f"{settings.APP_NAME} stopped")

    app = FastAPI(title=f"{settings.APP_NAME} API", lifespan=lifespan)

    if container is not None:
        # Available before startup for clients that skip the lifespan
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handling(app, debug=settings.DEBUG)

    app.include_router(health_router.router)
    for module in (
        tasks_router,
        groups_router,
        sessions_router,
        reviews_router,
        stats_router,
        calendar_router,
        settings_router,
    ):
        app.include_router(module.router, dependencies=[RequireAPIKey])

    @app.get("/")
    async def root():
        return {"message": f"{settings.APP_NAME} API"}

    return app


def _create_default_app() -> FastAPI:
    setup_logging()
    return create_app()


app = _create_default_app()
