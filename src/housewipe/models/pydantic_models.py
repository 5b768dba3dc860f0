"""Pydantic models for data validation."""

import re
from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class ScrapeRunStatus(str, Enum):
    """Lifecycle state of a reconciliation pass."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class AlertType(str, Enum):
    """Kind of user-facing alert."""

    NEW_LISTING = "new_listing"
    PRICE_DROP = "price_drop"
    PRICE_INCREASE = "price_increase"


class AlertPolicy(str, Enum):
    """Which users are considered interested in a listing event."""

    SAVED_SEARCH = "saved_search"
    FAVORITES = "favorites"
    BOTH = "both"


class SwipeDirection(str, Enum):
    """Direction of a swipe in the feed."""

    LEFT = "left"
    RIGHT = "right"
    SUPER = "super"


_PRICE_JUNK = re.compile(r"[^\d]")


class ListingSnapshot(BaseModel):
    """One observed instance of a listing at scrape time.

    Validated once at the extractor boundary. Accepts the camelCase keys
    posted by the browser userscript as well as snake_case names.
    """

    source_url: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("source_url", "detailUrl", "url"),
    )
    price: int | None = Field(None, ge=0, description="Price in whole currency units")
    street: str = Field(..., min_length=1)
    town: str | None = None
    province: str | None = None
    beds: int | None = Field(None, ge=0)
    baths: float | None = Field(None, ge=0)
    sqft: int | None = Field(None, ge=0)
    lat: float | None = Field(None, ge=-90, le=90)
    lng: float | None = Field(None, ge=-180, le=180)
    image_urls: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("image_urls", "imageUrls"),
    )
    listed_at: datetime | None = Field(
        None, validation_alias=AliasChoices("listed_at", "listedAt")
    )
    observed_at: datetime = Field(
        default_factory=utc_now,
        validation_alias=AliasChoices("observed_at", "scrapedAt", "scraped_at"),
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def _single_image(cls, data: object) -> object:
        """Fall back to a lone ``imageUrl`` when no image list is given."""
        if isinstance(data, dict) and not data.get("imageUrls") and not data.get("image_urls"):
            image_url = data.get("imageUrl")
            if image_url:
                data = {**data, "image_urls": [image_url]}
        return data

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: object) -> object:
        """Accept display text such as ``"$649,900"`` or ``"$649,900.00"``."""
        if isinstance(value, str):
            whole = value.split(".", 1)[0]
            digits = _PRICE_JUNK.sub("", whole)
            return int(digits) if digits else None
        return value

    @field_validator("town", "province", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("image_urls", mode="before")
    @classmethod
    def _drop_empty_images(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [url for url in value if url]
        return value

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def full_address(self) -> str:
        """Address string suitable for geocoding."""
        parts = [self.street, self.town or "", self.province or "", "Canada"]
        return ", ".join(parts)


class Coordinates(BaseModel):
    """Latitude/longitude pair."""

    lat: float
    lng: float

    model_config = ConfigDict(frozen=True)


class ReconcileResult(BaseModel):
    """Outcome of reconciling one snapshot against the store."""

    listing_id: int
    source_url: str
    is_new: bool
    price_changed: bool = False
    old_price: int | None = None
    new_price: int | None = None

    model_config = ConfigDict(frozen=True)


class PassStats(BaseModel):
    """Counters accumulated over one reconciliation pass."""

    found: int = 0
    new: int = 0
    updated: int = 0
    price_changes: int = 0
    failed: int = 0
    retired: int = 0


class FeedFilters(BaseModel):
    """User-supplied criteria for the swipe feed."""

    min_price: int | None = Field(None, ge=0)
    max_price: int | None = Field(None, ge=0)
    min_beds: int | None = Field(None, ge=0)
    min_baths: float | None = Field(None, ge=0)
    province: str | None = None


class PricePointRead(BaseModel):
    """Single price history entry."""

    price: int
    recorded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ListingRead(BaseModel):
    """Listing data as read from the database."""

    id: int
    source_url: str
    price: int | None = None
    street: str
    town: str | None = None
    province: str | None = None
    beds: int = 0
    baths: float = 0
    sqft: int | None = None
    lat: float | None = None
    lng: float | None = None
    image_urls: list[str] = Field(default_factory=list)
    listed_at: datetime | None = None
    first_seen_at: datetime
    last_seen_at: datetime
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class ListingDetail(ListingRead):
    """Listing with its price history and the viewer's favorite annotation."""

    price_history: list[PricePointRead] = Field(default_factory=list)
    is_favorite: bool = False
    notes: str | None = None
    rating: int | None = None


class FavoriteRead(ListingRead):
    """Favorited listing with the user's notes."""

    notes: str | None = None
    rating: int | None = None
    alerts_enabled: bool = True
    favorited_at: datetime
    price_history: list[PricePointRead] = Field(default_factory=list)


class ScrapeRunRead(BaseModel):
    """Scrape run data as read from the database."""

    id: int
    status: ScrapeRunStatus
    started_at: datetime
    finished_at: datetime | None = None
    listings_found: int = 0
    listings_new: int = 0
    listings_updated: int = 0
    price_changes: int = 0
    listings_failed: int = 0
    listings_retired: int = 0
    errors: list[str] = Field(default_factory=list)
    error: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AlertRead(BaseModel):
    """Alert as shown to its owner."""

    id: int
    user_id: int
    listing_id: int
    saved_search_id: int | None = None
    alert_type: AlertType
    old_price: int | None = None
    new_price: int | None = None
    read_at: datetime | None = None
    created_at: datetime
    street: str | None = None
    town: str | None = None
    price: int | None = None
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class SavedSearchCreate(BaseModel):
    """Data required to create a saved search."""

    name: str = Field(..., min_length=1)
    min_price: int | None = Field(None, ge=0)
    max_price: int | None = Field(None, ge=0)
    min_beds: int | None = Field(None, ge=0)
    min_baths: float | None = Field(None, ge=0)
    towns: list[str] = Field(default_factory=list)
    provinces: list[str] = Field(default_factory=list)
    lat: float | None = Field(None, ge=-90, le=90)
    lng: float | None = Field(None, ge=-180, le=180)
    radius_km: int | None = Field(None, gt=0)
    alerts_enabled: bool = True


class SavedSearchRead(SavedSearchCreate):
    """Saved search as read from the database."""

    id: int
    user_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserRead(BaseModel):
    """Application user."""

    id: int
    external_id: str
    email: str | None = None
    name: str | None = None
    avatar_url: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserStats(BaseModel):
    """Per-user activity counters."""

    swipes: dict[str, int]
    total_swipes: int
    favorites: int
    unread_alerts: int
