"""Data models for HouseWipe."""

from housewipe.models.pydantic_models import (
    AlertPolicy,
    AlertType,
    ListingSnapshot,
    ReconcileResult,
    ScrapeRunStatus,
    SwipeDirection,
)

__all__ = [
    "AlertPolicy",
    "AlertType",
    "ListingSnapshot",
    "ReconcileResult",
    "ScrapeRunStatus",
    "SwipeDirection",
]
