"""FastAPI dependency injection for database sessions and services."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from housewipe.config import Settings
from housewipe.database.engine import Database
from housewipe.models.pydantic_models import UserRead
from housewipe.services.feed_service import FeedService


def get_database(request: Request) -> Database:
    """Dependency that provides the application's store handle."""
    database: Database | None = request.app.state.database
    if database is None:
        raise RuntimeError("Database not initialized")
    return database


def get_settings(request: Request) -> Settings:
    """Dependency that provides the application settings."""
    settings: Settings | None = request.app.state.settings
    return settings if settings is not None else Settings()


def get_db(
    database: Annotated[Database, Depends(get_database)],
) -> Generator[Session, None, None]:
    """Dependency that provides a database session.

    Yields:
        Database session that is automatically closed after use.
    """
    with database.session() as session:
        yield session


def get_feed_service(
    session: Annotated[Session, Depends(get_db)],
) -> FeedService:
    """Dependency that provides a FeedService instance.

    Args:
        session: Database session from get_db dependency.

    Returns:
        FeedService instance.
    """
    return FeedService(session)


def get_current_user(
    service: Annotated[FeedService, Depends(get_feed_service)],
    x_user_id: Annotated[str, Header(min_length=1, max_length=200)],
    x_user_email: Annotated[str | None, Header()] = None,
    x_user_name: Annotated[str | None, Header()] = None,
) -> UserRead:
    """Dependency that resolves the calling user from the X-User-Id header.

    The user is created on first sight.
    """
    return service.get_or_create_user(x_user_id, email=x_user_email, name=x_user_name)


# Type aliases for cleaner dependency injection
DatabaseDep = Annotated[Database, Depends(get_database)]
DbSession = Annotated[Session, Depends(get_db)]
FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
CurrentUser = Annotated[UserRead, Depends(get_current_user)]
