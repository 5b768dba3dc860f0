"""Service layer for HouseWipe business logic."""

from housewipe.services.alert_service import AlertDeriver, classify_event, saved_search_matches
from housewipe.services.feed_service import FeedService
from housewipe.services.reconciler import Reconciler, ReconcileTally
from housewipe.services.scrape_service import (
    EmptyExtractionError,
    ScrapeCoordinator,
    ScrapeRunInProgressError,
    StoreUnavailableError,
)

__all__ = [
    "AlertDeriver",
    "EmptyExtractionError",
    "FeedService",
    "ReconcileTally",
    "Reconciler",
    "ScrapeCoordinator",
    "ScrapeRunInProgressError",
    "StoreUnavailableError",
    "classify_event",
    "saved_search_matches",
]
