"""Database module."""

from housewipe.database.engine import Database, create_db_engine, get_database_url
from housewipe.database.repository import (
    AlertRepository,
    ListingRepository,
    SavedSearchRepository,
    ScrapeRunRepository,
    UpsertResult,
    UserRepository,
)

__all__ = [
    "AlertRepository",
    "Database",
    "ListingRepository",
    "SavedSearchRepository",
    "ScrapeRunRepository",
    "UpsertResult",
    "UserRepository",
    "create_db_engine",
    "get_database_url",
]
