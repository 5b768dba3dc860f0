"""FastAPI application factory and configuration."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from housewipe import __version__
from housewipe.api.routes import alerts, favorites, listings, scraper, searches, swipes, users
from housewipe.config import Settings, load_settings, settings_path_from_env
from housewipe.database.engine import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the configured store and settings unless they were injected."""
    owns_database = app.state.database is None
    if owns_database:
        app.state.database = Database.from_path()
    if app.state.settings is None:
        app.state.settings = load_settings(settings_path_from_env())
    yield
    if owns_database:
        app.state.database.dispose()
        app.state.database = None


def create_app(database: Database | None = None, settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        database: Store handle. Opened from the environment at startup when omitted.
        settings: Application settings. Loaded from HOUSEWIPE_CONFIG (or the
            default config file) at startup when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="HouseWipe API",
        description="Swipe through real-estate listings with price tracking and alerts",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.settings = settings

    # Include API routers
    app.include_router(scraper.router, prefix="/api/scraper", tags=["scraper"])
    app.include_router(listings.router, prefix="/api/listings", tags=["listings"])
    app.include_router(swipes.router, prefix="/api/swipes", tags=["swipes"])
    app.include_router(favorites.router, prefix="/api/favorites", tags=["favorites"])
    app.include_router(alerts.router, prefix="/api/alerts", tags=["alerts"])
    app.include_router(searches.router, prefix="/api/searches", tags=["searches"])
    app.include_router(users.router, prefix="/api", tags=["users"])

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


# Create app instance for uvicorn
app = create_app()
