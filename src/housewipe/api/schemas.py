"""API request and response schemas."""

from typing import Any

from pydantic import BaseModel, Field

from housewipe.models.pydantic_models import (
    AlertRead,
    FavoriteRead,
    ListingRead,
    SavedSearchRead,
    ScrapeRunRead,
    SwipeDirection,
)


class FeedResponse(BaseModel):
    """Page of the swipe feed."""

    listings: list[ListingRead]
    count: int = Field(description="Number of listings in this response")
    limit: int = Field(description="Maximum results per page")
    offset: int = Field(description="Number of results skipped")


class IngestRequest(BaseModel):
    """Listings posted by an external collector for one pass."""

    listings: list[dict[str, Any]] = Field(..., description="Raw listing records")


class ScrapeRunListResponse(BaseModel):
    """Response for listing scrape runs."""

    runs: list[ScrapeRunRead]
    count: int = Field(description="Number of runs in this response")


class SwipeCreate(BaseModel):
    """Request body for recording a swipe."""

    listing_id: int
    direction: SwipeDirection


class SwipeResponse(BaseModel):
    """Recorded swipe."""

    success: bool
    listing_id: int
    direction: SwipeDirection


class FavoriteUpdate(BaseModel):
    """Request body for updating a favorite; omitted fields are kept."""

    notes: str | None = None
    rating: int | None = Field(None, ge=1, le=5)
    alerts_enabled: bool | None = None


class FavoriteListResponse(BaseModel):
    favorites: list[FavoriteRead]
    count: int


class AlertListResponse(BaseModel):
    alerts: list[AlertRead]
    count: int


class SavedSearchListResponse(BaseModel):
    searches: list[SavedSearchRead]
    count: int


class DeleteResponse(BaseModel):
    """Response for delete operations."""

    success: bool
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
