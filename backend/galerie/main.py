"""
Galerie Pictogrammes - FastAPI Application Entry Point

This module builds the FastAPI application: middleware, routes and the
lifespan that prepares the database before the first request.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from galerie import __version__
from galerie.core import database
from galerie.core.ban_list import BanList
from galerie.core.cache import TTLCache
from galerie.core.config import Settings, settings as default_settings
from galerie.core.logging_config import get_logger, setup_logging
from galerie.middleware import RequestLoggingMiddleware
from galerie.repositories.downloads import DownloadRepository
from galerie.repositories.users import UserRepository
from galerie.services.catalog import CatalogService


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup:
        - Set up logging
        - Apply pending migrations (preflight + runner) when enabled
        - Load the ban list and purge stale anonymous download counters
        - Build the caches and the catalog service

    Shutdown:
        - Dispose of the engine
    """
    app_settings: Settings = app.state.settings
    engine: AsyncEngine = app.state.engine

    setup_logging(level=app_settings.log_level, json_format=app_settings.log_json)

    if app_settings.run_migrations_on_startup:
        await database.run_migrations(
            engine,
            app_settings.migrations_folder,
            app_settings.migration_preflight_enabled,
        )

    session_maker = database.get_session_maker(engine)
    app.state.session_maker = session_maker

    ban_list = BanList()
    async with session_maker() as session:
        await ban_list.load(UserRepository(session))
        purged = await DownloadRepository(session).cleanup_anonymous(
            app_settings.anonymous_download_retention_days
        )
        await session.commit()
    app.state.ban_list = ban_list

    app.state.token_cache = TTLCache(
        ttl_seconds=app_settings.token_cache_ttl_seconds,
        max_size=app_settings.token_cache_max_size,
    )
    app.state.catalog = CatalogService(
        session_maker,
        TTLCache(ttl_seconds=app_settings.manifest_cache_ttl_seconds),
    )

    logger.info(
        "Application started",
        extra={
            "environment": app_settings.environment,
            "banned_count": len(ban_list),
            "anonymous_downloads_purged": purged,
        },
    )

    yield

    await engine.dispose()
    logger.info("Application stopped")


def create_app(
    app_settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the global settings)
        engine: Engine to use (defaults to the global engine)
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title=app_settings.project_name,
        version=__version__,
        description="Pictogram gallery backend",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.engine = engine or database.engine

    # Middleware runs in reverse order of registration
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from galerie.api.v1 import health

    app.include_router(health.router, tags=["health"])

    @app.get("/")
    async def root():
        """Basic API information."""
        return {
            "message": app_settings.project_name,
            "version": __version__,
            "docs": "/docs",
        }

    return app


app = create_app()
