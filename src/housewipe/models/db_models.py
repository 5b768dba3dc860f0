"""SQLAlchemy ORM models."""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from housewipe.models.pydantic_models import AlertType, ScrapeRunStatus, SwipeDirection


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class User(Base):
    """Application user, keyed by the identity provider's user id."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(300), nullable=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, external_id='{self.external_id}')>"


class Listing(Base):
    """Real-estate listing, one row per source URL."""

    __tablename__ = "listings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_url: Mapped[str] = mapped_column(String(1000), nullable=False, unique=True)

    # Pricing (whole currency units)
    price: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    # Address
    street: Mapped[str] = mapped_column(String(300), nullable=False)
    town: Mapped[str | None] = mapped_column(String(150), nullable=True, index=True)
    province: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    # Property details
    beds: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
    baths: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    sqft: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Location
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)

    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Timestamps
    listed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    first_seen_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    price_history: Mapped[list["PriceHistory"]] = relationship(
        "PriceHistory",
        back_populates="listing",
        cascade="all, delete-orphan",
        order_by=lambda: (PriceHistory.recorded_at, PriceHistory.id),
    )
    alerts: Mapped[list["Alert"]] = relationship(
        "Alert", back_populates="listing", cascade="all, delete-orphan"
    )
    favorites: Mapped[list["Favorite"]] = relationship(
        "Favorite", back_populates="listing", cascade="all, delete-orphan"
    )
    swipes: Mapped[list["Swipe"]] = relationship(
        "Swipe", back_populates="listing", cascade="all, delete-orphan"
    )

    @property
    def first_image_url(self) -> str | None:
        return self.image_urls[0] if self.image_urls else None

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, street='{self.street[:30]}', price={self.price})>"


class PriceHistory(Base):
    """Append-only price observations for a listing."""

    __tablename__ = "price_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    listing: Mapped["Listing"] = relationship("Listing", back_populates="price_history")


class ScrapeRun(Base):
    """Record of one reconciliation pass."""

    __tablename__ = "scrape_runs"
    # At most one run may be running; the enum is stored by member name
    __table_args__ = (
        Index(
            "uq_scrape_runs_single_running",
            "status",
            unique=True,
            sqlite_where=text("status = 'RUNNING'"),
            postgresql_where=text("status = 'RUNNING'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    status: Mapped[ScrapeRunStatus] = mapped_column(
        Enum(ScrapeRunStatus), default=ScrapeRunStatus.RUNNING, nullable=False, index=True
    )
    listings_found: Mapped[int] = mapped_column(Integer, default=0)
    listings_new: Mapped[int] = mapped_column(Integer, default=0)
    listings_updated: Mapped[int] = mapped_column(Integer, default=0)
    price_changes: Mapped[int] = mapped_column(Integer, default=0)
    listings_failed: Mapped[int] = mapped_column(Integer, default=0)
    listings_retired: Mapped[int] = mapped_column(Integer, default=0)
    errors: Mapped[list[str]] = mapped_column(JSON, default=list)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ScrapeRun(id={self.id}, status={self.status})>"


class SavedSearch(Base):
    """User-defined search criteria, optionally alerting on matches."""

    __tablename__ = "saved_searches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    min_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    min_beds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    min_baths: Mapped[float | None] = mapped_column(Float, nullable=True)
    towns: Mapped[list[str]] = mapped_column(JSON, default=list)
    provinces: Mapped[list[str]] = mapped_column(JSON, default=list)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    radius_km: Mapped[int | None] = mapped_column(Integer, nullable=True)
    alerts_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<SavedSearch(id={self.id}, user_id={self.user_id}, name='{self.name}')>"


class Favorite(Base):
    """Listing saved by a user, with notes and rating."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "listing_id", name="uq_favorites_user_listing"),
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_favorites_rating"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    listing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    alerts_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    # Relationships
    listing: Mapped["Listing"] = relationship("Listing", back_populates="favorites")


class Swipe(Base):
    """A user's decision on a listing in the feed."""

    __tablename__ = "swipes"
    __table_args__ = (UniqueConstraint("user_id", "listing_id", name="uq_swipes_user_listing"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    listing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False
    )
    direction: Mapped[SwipeDirection] = mapped_column(Enum(SwipeDirection), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    listing: Mapped["Listing"] = relationship("Listing", back_populates="swipes")


class Alert(Base):
    """Notification derived from a new listing or a price change."""

    __tablename__ = "alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    listing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False
    )
    saved_search_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("saved_searches.id", ondelete="CASCADE"), nullable=True
    )
    alert_type: Mapped[AlertType] = mapped_column(Enum(AlertType), nullable=False)
    old_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    new_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    read_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    listing: Mapped["Listing"] = relationship("Listing", back_populates="alerts")

    def __repr__(self) -> str:
        return f"<Alert(id={self.id}, user_id={self.user_id}, type={self.alert_type})>"
