"""Repository layer for database operations."""

import functools
from collections.abc import Callable, Collection
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from sqlalchemy import desc, func, update
from sqlalchemy import select as sa_select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Query, Session, joinedload
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from typing_extensions import ParamSpec

from housewipe.models.db_models import (
    Alert,
    Favorite,
    Listing,
    PriceHistory,
    SavedSearch,
    ScrapeRun,
    Swipe,
    User,
    utc_now,
)
from housewipe.models.pydantic_models import (
    FeedFilters,
    ListingSnapshot,
    PassStats,
    SavedSearchCreate,
    ScrapeRunStatus,
    SwipeDirection,
)

P = ParamSpec("P")
R = TypeVar("R")

# Retry configuration for database operations
DB_RETRY_MAX_ATTEMPTS = 5
DB_RETRY_WAIT_MIN = 1  # seconds
DB_RETRY_WAIT_MAX = 8  # seconds
DB_RETRY_WAIT_MULTIPLIER = 2

# Keeps IN (...) lists well below SQLite's bound-parameter limit
RETIRE_BATCH_SIZE = 500

# Per-snapshot error strings kept on a scrape run
MAX_RUN_ERRORS = 50


def with_db_retry(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to retry database operations on SQLite lock errors.

    Retries on sqlalchemy.exc.OperationalError using exponential backoff.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        for attempt in Retrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(DB_RETRY_MAX_ATTEMPTS),
            wait=wait_exponential(
                multiplier=DB_RETRY_WAIT_MULTIPLIER,
                min=DB_RETRY_WAIT_MIN,
                max=DB_RETRY_WAIT_MAX,
            ),
            reraise=True,
        ):
            with attempt:
                return func(*args, **kwargs)
        raise RuntimeError("Retry logic failed unexpectedly")

    return wrapper


def _as_naive_utc(value: datetime) -> datetime:
    """Normalize to naive UTC, the form timestamps are stored in."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _is_before(value: datetime, other: datetime) -> bool:
    return _as_naive_utc(value) < _as_naive_utc(other)


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of a single listing upsert."""

    listing_id: int
    is_new: bool
    price_changed: bool
    old_price: int | None
    new_price: int | None


class ListingRepository:
    """Repository for Listing and PriceHistory operations.

    The only writer of listing price/active fields and of price history rows.
    """

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    # ========== READ ==========

    def get_listing_by_id(self, listing_id: int) -> Listing | None:
        """Get a listing by its ID.

        Args:
            listing_id: Listing ID.

        Returns:
            Listing if found, None otherwise.
        """
        return self._session.query(Listing).filter(Listing.id == listing_id).first()

    def get_listing_by_url(self, source_url: str) -> Listing | None:
        """Get a listing by its source URL.

        Args:
            source_url: Listing URL on the source site.

        Returns:
            Listing if found, None otherwise.
        """
        return self._session.query(Listing).filter(Listing.source_url == source_url).first()

    def count_listings(self, active_only: bool = False) -> int:
        """Count listings, optionally only active ones."""
        query = self._session.query(Listing)
        if active_only:
            query = query.filter(Listing.is_active.is_(True))
        return query.count()

    def _apply_feed_filters(self, query: Query[Listing], filters: FeedFilters) -> Query[Listing]:
        """Apply user-supplied feed filters to a listing query.

        Args:
            query: SQLAlchemy query to filter.
            filters: Price range, minimum beds/baths and province.

        Returns:
            Filtered query.
        """
        if filters.min_price is not None:
            query = query.filter(Listing.price >= filters.min_price)

        if filters.max_price is not None:
            query = query.filter(Listing.price <= filters.max_price)

        if filters.min_beds is not None:
            query = query.filter(Listing.beds >= filters.min_beds)

        if filters.min_baths is not None:
            query = query.filter(Listing.baths >= filters.min_baths)

        if filters.province is not None:
            query = query.filter(Listing.province == filters.province)

        return query

    def get_feed(
        self,
        user_id: int,
        filters: FeedFilters | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Listing]:
        """Get active listings the user has not swiped on yet.

        Args:
            user_id: Viewing user.
            filters: Optional feed filters.
            limit: Maximum number of results.
            offset: Number of results to skip.

        Returns:
            Listings ordered by listed_at (newest first, unknown last),
            then first_seen_at (newest first).
        """
        swiped = sa_select(Swipe.id).where(
            Swipe.user_id == user_id,
            Swipe.listing_id == Listing.id,
        )
        query = self._session.query(Listing).filter(
            Listing.is_active.is_(True),
            ~swiped.exists(),
        )
        if filters is not None:
            query = self._apply_feed_filters(query, filters)

        return (
            query.order_by(
                Listing.listed_at.desc().nulls_last(),
                desc(Listing.first_seen_at),
                desc(Listing.id),
            )
            .offset(offset)
            .limit(limit)
            .all()
        )

    # ========== UPSERT ==========

    @with_db_retry
    def upsert_listing(self, snapshot: ListingSnapshot, now: datetime | None = None) -> UpsertResult:
        """Insert or refresh the listing for a snapshot in one transaction.

        Args:
            snapshot: Validated listing snapshot.
            now: Observation time. Defaults to the current UTC time.

        Returns:
            UpsertResult describing what changed.
        """
        now = now or utc_now()
        try:
            try:
                result = self._apply_snapshot(snapshot, now)
                self._session.commit()
            except IntegrityError:
                # A concurrent writer inserted the same URL first
                self._session.rollback()
                if self.get_listing_by_url(snapshot.source_url) is None:
                    raise
                result = self._apply_snapshot(snapshot, now)
                self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return result

    def _apply_snapshot(self, snapshot: ListingSnapshot, now: datetime) -> UpsertResult:
        existing = self._session.execute(
            sa_select(Listing)
            .where(Listing.source_url == snapshot.source_url)
            .with_for_update()
        ).scalar_one_or_none()

        if existing is None:
            listing = Listing(
                source_url=snapshot.source_url,
                price=snapshot.price,
                street=snapshot.street,
                town=snapshot.town,
                province=snapshot.province,
                beds=snapshot.beds or 0,
                baths=snapshot.baths or 0,
                sqft=snapshot.sqft,
                lat=snapshot.lat,
                lng=snapshot.lng,
                image_urls=list(snapshot.image_urls),
                listed_at=snapshot.listed_at,
                first_seen_at=now,
                last_seen_at=now,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            self._session.add(listing)
            self._session.flush()

            # Record initial price
            if snapshot.price is not None:
                self._add_price_point(listing.id, snapshot.price, now)

            return UpsertResult(
                listing_id=listing.id,
                is_new=True,
                price_changed=False,
                old_price=None,
                new_price=snapshot.price,
            )

        old_price = existing.price
        last_point = self.get_latest_price_point(existing.id)

        existing.street = snapshot.street
        existing.town = snapshot.town or existing.town
        existing.province = snapshot.province or existing.province
        existing.beds = snapshot.beds if snapshot.beds is not None else existing.beds
        existing.baths = snapshot.baths if snapshot.baths is not None else existing.baths
        existing.sqft = snapshot.sqft if snapshot.sqft is not None else existing.sqft
        existing.listed_at = snapshot.listed_at or existing.listed_at
        if snapshot.has_coordinates:
            existing.lat = snapshot.lat
            existing.lng = snapshot.lng
        if snapshot.image_urls:
            existing.image_urls = list(snapshot.image_urls)

        # Timestamps never move backwards, even for a late or replayed snapshot
        if not _is_before(now, existing.last_seen_at):
            existing.last_seen_at = now
        existing.updated_at = now
        existing.is_active = True

        # An unknown price keeps the last known one
        price_changed = False
        if snapshot.price is not None:
            if last_point is None or last_point.price != snapshot.price:
                recorded_at = now
                if last_point is not None and _is_before(now, last_point.recorded_at):
                    recorded_at = last_point.recorded_at
                self._add_price_point(existing.id, snapshot.price, recorded_at)
            price_changed = old_price is not None and old_price != snapshot.price
            existing.price = snapshot.price

        return UpsertResult(
            listing_id=existing.id,
            is_new=False,
            price_changed=price_changed,
            old_price=old_price,
            new_price=snapshot.price,
        )

    # ========== RETIREMENT ==========

    @with_db_retry
    def retire_missing_listings(
        self,
        active_urls: Collection[str],
        grace: timedelta,
        now: datetime | None = None,
    ) -> int:
        """Mark absent listings inactive once they exceed the grace window.

        Args:
            active_urls: Source URLs successfully reconciled in this pass.
            grace: Minimum time since last observation before retirement.
            now: Reference time. Defaults to the current UTC time.

        Returns:
            Number of listings retired.
        """
        now = now or utc_now()
        cutoff = now - grace
        active = set(active_urls)

        candidates = self._session.execute(
            sa_select(Listing.id, Listing.source_url).where(
                Listing.is_active.is_(True),
                Listing.last_seen_at < cutoff,
            )
        ).all()
        retire_ids = [row.id for row in candidates if row.source_url not in active]

        retired = 0
        try:
            for start in range(0, len(retire_ids), RETIRE_BATCH_SIZE):
                chunk = retire_ids[start : start + RETIRE_BATCH_SIZE]
                result = self._session.execute(
                    update(Listing)
                    .where(
                        Listing.id.in_(chunk),
                        Listing.is_active.is_(True),
                        Listing.last_seen_at < cutoff,
                    )
                    .values(is_active=False, updated_at=now)
                    .execution_options(synchronize_session=False)
                )
                retired += result.rowcount or 0
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        return retired

    # ========== PRICE HISTORY ==========

    def _add_price_point(self, listing_id: int, price: int, recorded_at: datetime) -> PriceHistory:
        history = PriceHistory(listing_id=listing_id, price=price, recorded_at=recorded_at)
        self._session.add(history)
        return history

    def get_latest_price_point(self, listing_id: int) -> PriceHistory | None:
        """Get the most recent price observation for a listing."""
        return (
            self._session.query(PriceHistory)
            .filter(PriceHistory.listing_id == listing_id)
            .order_by(desc(PriceHistory.recorded_at), desc(PriceHistory.id))
            .first()
        )

    def get_price_history(self, listing_id: int) -> list[PriceHistory]:
        """Get price history for a listing.

        Args:
            listing_id: Listing ID.

        Returns:
            List of PriceHistory records, oldest first.
        """
        return (
            self._session.query(PriceHistory)
            .filter(PriceHistory.listing_id == listing_id)
            .order_by(PriceHistory.recorded_at, PriceHistory.id)
            .all()
        )

    # ========== DELETE ==========

    @with_db_retry
    def delete_listing(self, listing_id: int) -> bool:
        """Delete a listing and, by cascade, its history and alerts.

        Args:
            listing_id: Listing ID to delete.

        Returns:
            True if deleted, False if not found.
        """
        listing = self.get_listing_by_id(listing_id)
        if listing is None:
            return False

        self._session.delete(listing)
        self._session.commit()
        return True


class ScrapeRunRepository:
    """Repository for ScrapeRun lifecycle operations."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    @with_db_retry
    def create_run(self, now: datetime | None = None) -> ScrapeRun:
        """Open a new run in the running state.

        Raises:
            IntegrityError: If another run is already running.
        """
        run = ScrapeRun(status=ScrapeRunStatus.RUNNING, started_at=now or utc_now(), errors=[])
        self._session.add(run)
        try:
            self._session.commit()
        except IntegrityError:
            self._session.rollback()
            raise
        self._session.refresh(run)
        return run

    def get_run(self, run_id: int) -> ScrapeRun | None:
        """Get a run by ID."""
        return self._session.query(ScrapeRun).filter(ScrapeRun.id == run_id).first()

    def get_running_run(self) -> ScrapeRun | None:
        """Get the oldest run still marked running, if any."""
        return (
            self._session.query(ScrapeRun)
            .filter(ScrapeRun.status == ScrapeRunStatus.RUNNING)
            .order_by(ScrapeRun.started_at)
            .first()
        )

    def get_recent_runs(self, limit: int = 20) -> list[ScrapeRun]:
        """Get recent runs, newest first.

        Args:
            limit: Maximum number of runs to return.

        Returns:
            List of ScrapeRun objects.
        """
        return (
            self._session.query(ScrapeRun)
            .order_by(desc(ScrapeRun.started_at), desc(ScrapeRun.id))
            .limit(limit)
            .all()
        )

    def _finish(
        self,
        run_id: int,
        status: ScrapeRunStatus,
        stats: PassStats | None,
        errors: list[str] | None,
        error: str | None,
        now: datetime | None,
    ) -> ScrapeRun:
        run = self.get_run(run_id)
        if run is None:
            raise ValueError(f"Scrape run {run_id} not found")
        if run.status != ScrapeRunStatus.RUNNING:
            raise ValueError(f"Scrape run {run_id} already {run.status.value}")

        run.status = status
        run.finished_at = now or utc_now()
        run.error = error
        if stats is not None:
            run.listings_found = stats.found
            run.listings_new = stats.new
            run.listings_updated = stats.updated
            run.price_changes = stats.price_changes
            run.listings_failed = stats.failed
            run.listings_retired = stats.retired
        if errors:
            run.errors = list(errors[:MAX_RUN_ERRORS])

        self._session.commit()
        self._session.refresh(run)
        return run

    @with_db_retry
    def complete_run(
        self,
        run_id: int,
        stats: PassStats,
        errors: list[str] | None = None,
        now: datetime | None = None,
    ) -> ScrapeRun:
        """Mark a running run completed with its final counts.

        Raises:
            ValueError: If the run does not exist or is no longer running.
        """
        return self._finish(run_id, ScrapeRunStatus.COMPLETED, stats, errors, None, now)

    @with_db_retry
    def fail_run(
        self,
        run_id: int,
        error: str,
        stats: PassStats | None = None,
        errors: list[str] | None = None,
        now: datetime | None = None,
    ) -> ScrapeRun:
        """Mark a running run failed with error detail.

        Raises:
            ValueError: If the run does not exist or is no longer running.
        """
        return self._finish(run_id, ScrapeRunStatus.FAILED, stats, errors, error, now)

    @with_db_retry
    def fail_stale_runs(self, older_than: timedelta, now: datetime | None = None) -> int:
        """Fail runs left running by a process that died without cleanup.

        Args:
            older_than: Age after which a running run is considered abandoned.
            now: Reference time. Defaults to the current UTC time.

        Returns:
            Number of runs marked failed.
        """
        now = now or utc_now()
        stale = (
            self._session.query(ScrapeRun)
            .filter(
                ScrapeRun.status == ScrapeRunStatus.RUNNING,
                ScrapeRun.started_at < now - older_than,
            )
            .all()
        )
        for run in stale:
            run.status = ScrapeRunStatus.FAILED
            run.finished_at = now
            run.error = "Abandoned: run did not finish"
        self._session.commit()
        return len(stale)


class AlertRepository:
    """Repository for Alert operations."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    @with_db_retry
    def bulk_create_alerts(self, alerts_data: list[dict[str, Any]]) -> list[Alert]:
        """Create several alerts in one transaction.

        Args:
            alerts_data: Keyword arguments for each Alert (user_id, listing_id,
                alert_type, old_price, new_price, saved_search_id).

        Returns:
            List of created Alert ORM objects.
        """
        alerts = [Alert(**data) for data in alerts_data]
        self._session.add_all(alerts)
        self._session.commit()

        for alert in alerts:
            self._session.refresh(alert)

        return alerts

    def get_alert(self, alert_id: int) -> Alert | None:
        """Get an alert by ID."""
        return self._session.query(Alert).filter(Alert.id == alert_id).first()

    def get_alerts(self, user_id: int, unread_only: bool = False, limit: int = 50) -> list[Alert]:
        """Get a user's alerts, newest first.

        Args:
            user_id: Alert owner.
            unread_only: Only alerts without read_at.
            limit: Maximum number of alerts.

        Returns:
            List of Alert objects with their listing loaded.
        """
        query = (
            self._session.query(Alert)
            .options(joinedload(Alert.listing))
            .filter(Alert.user_id == user_id)
        )
        if unread_only:
            query = query.filter(Alert.read_at.is_(None))
        return query.order_by(desc(Alert.created_at), desc(Alert.id)).limit(limit).all()

    def count_unread(self, user_id: int) -> int:
        """Count a user's unread alerts."""
        return (
            self._session.query(Alert)
            .filter(Alert.user_id == user_id, Alert.read_at.is_(None))
            .count()
        )

    @with_db_retry
    def mark_read(self, alert_id: int, user_id: int, now: datetime | None = None) -> Alert | None:
        """Mark one of the user's alerts as read.

        Args:
            alert_id: Alert ID.
            user_id: Requesting user; must own the alert.
            now: Read time. Defaults to the current UTC time.

        Returns:
            The alert if found and owned by the user, None otherwise.
        """
        alert = self.get_alert(alert_id)
        if alert is None or alert.user_id != user_id:
            return None

        if alert.read_at is None:
            alert.read_at = now or utc_now()
            self._session.commit()
            self._session.refresh(alert)

        return alert


class UserRepository:
    """Repository for users and their swipes and favorites."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    # ========== USERS ==========

    def get_user_by_id(self, user_id: int) -> User | None:
        return self._session.query(User).filter(User.id == user_id).first()

    def get_user_by_external_id(self, external_id: str) -> User | None:
        return self._session.query(User).filter(User.external_id == external_id).first()

    @with_db_retry
    def get_or_create_user(
        self,
        external_id: str,
        email: str | None = None,
        name: str | None = None,
        avatar_url: str | None = None,
    ) -> tuple[User, bool]:
        """Get a user by external ID or create it if it doesn't exist.

        Args:
            external_id: Identity provider user ID.
            email: Email for a new user.
            name: Display name for a new user.
            avatar_url: Avatar for a new user.

        Returns:
            Tuple of (User, created) where created is True if new.
        """
        user = self.get_user_by_external_id(external_id)
        if user is not None:
            return user, False

        user = User(external_id=external_id, email=email, name=name, avatar_url=avatar_url)
        self._session.add(user)
        self._session.commit()
        self._session.refresh(user)
        return user, True

    # ========== SWIPES ==========

    @with_db_retry
    def record_swipe(self, user_id: int, listing_id: int, direction: SwipeDirection) -> Swipe:
        """Record (or replace) a user's swipe on a listing.

        Right and super swipes also favorite the listing.

        Args:
            user_id: Swiping user.
            listing_id: Listing swiped on.
            direction: Swipe direction.

        Returns:
            The stored Swipe.
        """
        swipe = (
            self._session.query(Swipe)
            .filter(Swipe.user_id == user_id, Swipe.listing_id == listing_id)
            .first()
        )
        if swipe is None:
            swipe = Swipe(user_id=user_id, listing_id=listing_id, direction=direction)
            self._session.add(swipe)
        else:
            swipe.direction = direction
            swipe.created_at = utc_now()

        if direction in (SwipeDirection.RIGHT, SwipeDirection.SUPER):
            if self.get_favorite(user_id, listing_id) is None:
                self._session.add(Favorite(user_id=user_id, listing_id=listing_id))

        self._session.commit()
        self._session.refresh(swipe)
        return swipe

    def get_swipe_counts(self, user_id: int) -> dict[str, int]:
        """Count a user's swipes per direction (all directions present)."""
        rows = self._session.execute(
            sa_select(Swipe.direction, func.count(Swipe.id))
            .where(Swipe.user_id == user_id)
            .group_by(Swipe.direction)
        ).all()
        counts = {direction.value: 0 for direction in SwipeDirection}
        for direction, count in rows:
            counts[SwipeDirection(direction).value] = count
        return counts

    # ========== FAVORITES ==========

    def get_favorite(self, user_id: int, listing_id: int) -> Favorite | None:
        return (
            self._session.query(Favorite)
            .filter(Favorite.user_id == user_id, Favorite.listing_id == listing_id)
            .first()
        )

    def get_favorites(self, user_id: int, limit: int = 50, offset: int = 0) -> list[Favorite]:
        """Get a user's favorites with their listings, newest first."""
        return (
            self._session.query(Favorite)
            .options(joinedload(Favorite.listing))
            .filter(Favorite.user_id == user_id)
            .order_by(desc(Favorite.created_at), desc(Favorite.id))
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_favorites(self, user_id: int) -> int:
        return self._session.query(Favorite).filter(Favorite.user_id == user_id).count()

    def get_favorited_user_ids(self, listing_id: int) -> list[int]:
        """Get IDs of users who favorited a listing and want its alerts."""
        rows = self._session.execute(
            sa_select(Favorite.user_id)
            .where(Favorite.listing_id == listing_id, Favorite.alerts_enabled.is_(True))
            .order_by(Favorite.user_id)
        ).all()
        return [row.user_id for row in rows]

    @with_db_retry
    def update_favorite(
        self,
        user_id: int,
        listing_id: int,
        notes: str | None = None,
        rating: int | None = None,
        alerts_enabled: bool | None = None,
    ) -> Favorite | None:
        """Update notes, rating and alert opt-in; fields left as None are kept.

        Returns:
            Updated Favorite if found, None otherwise.
        """
        favorite = self.get_favorite(user_id, listing_id)
        if favorite is None:
            return None

        if notes is not None:
            favorite.notes = notes
        if rating is not None:
            favorite.rating = rating
        if alerts_enabled is not None:
            favorite.alerts_enabled = alerts_enabled

        self._session.commit()
        self._session.refresh(favorite)
        return favorite

    @with_db_retry
    def delete_favorite(self, user_id: int, listing_id: int) -> bool:
        """Remove a listing from a user's favorites.

        Returns:
            True if deleted, False if not found.
        """
        favorite = self.get_favorite(user_id, listing_id)
        if favorite is None:
            return False

        self._session.delete(favorite)
        self._session.commit()
        return True


class SavedSearchRepository:
    """Repository for SavedSearch CRUD operations."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    @with_db_retry
    def create_saved_search(self, user_id: int, data: SavedSearchCreate) -> SavedSearch:
        """Create a saved search for a user."""
        search = SavedSearch(user_id=user_id, **data.model_dump())
        self._session.add(search)
        self._session.commit()
        self._session.refresh(search)
        return search

    def get_saved_search(self, search_id: int) -> SavedSearch | None:
        return self._session.query(SavedSearch).filter(SavedSearch.id == search_id).first()

    def get_saved_searches(self, user_id: int) -> list[SavedSearch]:
        """Get a user's saved searches, newest first."""
        return (
            self._session.query(SavedSearch)
            .filter(SavedSearch.user_id == user_id)
            .order_by(desc(SavedSearch.created_at), desc(SavedSearch.id))
            .all()
        )

    def get_alerting_saved_searches(self) -> list[SavedSearch]:
        """Get every saved search with alerts enabled, oldest first."""
        return (
            self._session.query(SavedSearch)
            .filter(SavedSearch.alerts_enabled.is_(True))
            .order_by(SavedSearch.id)
            .all()
        )

    @with_db_retry
    def delete_saved_search(self, search_id: int, user_id: int) -> bool:
        """Delete one of the user's saved searches.

        Returns:
            True if deleted, False if not found or not owned by the user.
        """
        search = self.get_saved_search(search_id)
        if search is None or search.user_id != user_id:
            return False

        self._session.delete(search)
        self._session.commit()
        return True
