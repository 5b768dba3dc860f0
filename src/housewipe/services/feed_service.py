"""Service layer for the swipe feed and per-user data."""

from sqlalchemy.orm import Session

from housewipe.database.repository import (
    AlertRepository,
    ListingRepository,
    SavedSearchRepository,
    UserRepository,
)
from housewipe.models.db_models import Favorite, Listing
from housewipe.models.pydantic_models import (
    AlertRead,
    FavoriteRead,
    FeedFilters,
    ListingDetail,
    ListingRead,
    PricePointRead,
    SavedSearchCreate,
    SavedSearchRead,
    SwipeDirection,
    UserRead,
    UserStats,
)
from housewipe.services.alert_service import alert_to_read


class FeedService:
    """Service for feed, swipe, favorite, alert and saved search operations.

    Returns Pydantic models instead of ORM objects.
    """

    def __init__(self, session: Session) -> None:
        """Initialize with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session
        self._listings = ListingRepository(session)
        self._users = UserRepository(session)
        self._alerts = AlertRepository(session)
        self._searches = SavedSearchRepository(session)

    # ========== USERS ==========

    def get_or_create_user(
        self,
        external_id: str,
        email: str | None = None,
        name: str | None = None,
        avatar_url: str | None = None,
    ) -> UserRead:
        user, _ = self._users.get_or_create_user(external_id, email, name, avatar_url)
        return UserRead.model_validate(user)

    def get_user_stats(self, user_id: int) -> UserStats:
        """Get swipe, favorite and unread alert counts for a user."""
        swipes = self._users.get_swipe_counts(user_id)
        return UserStats(
            swipes=swipes,
            total_swipes=sum(swipes.values()),
            favorites=self._users.count_favorites(user_id),
            unread_alerts=self._alerts.count_unread(user_id),
        )

    # ========== FEED ==========

    def get_feed(
        self,
        user_id: int,
        filters: FeedFilters | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ListingRead]:
        """Get the next active listings the user has not swiped on.

        Args:
            user_id: Viewing user.
            filters: Optional price, beds, baths and province filters.
            limit: Maximum results to return.
            offset: Number of results to skip.

        Returns:
            List of ListingRead, newest listing first.
        """
        listings = self._listings.get_feed(user_id, filters=filters, limit=limit, offset=offset)
        return [ListingRead.model_validate(listing) for listing in listings]

    def get_listing_detail(self, listing_id: int, user_id: int | None = None) -> ListingDetail | None:
        """Get a listing with its price history and the user's favorite notes.

        Args:
            listing_id: Listing ID.
            user_id: Viewing user, if any.

        Returns:
            ListingDetail if found, None otherwise.
        """
        listing = self._listings.get_listing_by_id(listing_id)
        if listing is None:
            return None

        favorite = self._users.get_favorite(user_id, listing_id) if user_id is not None else None
        return ListingDetail(
            **ListingRead.model_validate(listing).model_dump(),
            price_history=self._price_history(listing),
            is_favorite=favorite is not None,
            notes=favorite.notes if favorite else None,
            rating=favorite.rating if favorite else None,
        )

    def _price_history(self, listing: Listing) -> list[PricePointRead]:
        return [PricePointRead.model_validate(p) for p in self._listings.get_price_history(listing.id)]

    # ========== SWIPES ==========

    def record_swipe(self, user_id: int, listing_id: int, direction: SwipeDirection) -> bool:
        """Record a swipe; right and super swipes also favorite the listing.

        Returns:
            True if recorded, False if the listing doesn't exist.
        """
        if self._listings.get_listing_by_id(listing_id) is None:
            return False
        self._users.record_swipe(user_id, listing_id, direction)
        return True

    # ========== FAVORITES ==========

    def _favorite_to_read(self, favorite: Favorite) -> FavoriteRead:
        return FavoriteRead(
            **ListingRead.model_validate(favorite.listing).model_dump(),
            notes=favorite.notes,
            rating=favorite.rating,
            alerts_enabled=favorite.alerts_enabled,
            favorited_at=favorite.created_at,
            price_history=self._price_history(favorite.listing),
        )

    def get_favorites(self, user_id: int, limit: int = 50, offset: int = 0) -> list[FavoriteRead]:
        favorites = self._users.get_favorites(user_id, limit=limit, offset=offset)
        return [self._favorite_to_read(favorite) for favorite in favorites]

    def update_favorite(
        self,
        user_id: int,
        listing_id: int,
        notes: str | None = None,
        rating: int | None = None,
        alerts_enabled: bool | None = None,
    ) -> FavoriteRead | None:
        """Update notes, rating and alert opt-in on a favorite; unset fields are kept.

        Returns:
            Updated FavoriteRead if the favorite exists, None otherwise.
        """
        favorite = self._users.update_favorite(
            user_id, listing_id, notes=notes, rating=rating, alerts_enabled=alerts_enabled
        )
        if favorite is None:
            return None
        return self._favorite_to_read(favorite)

    def remove_favorite(self, user_id: int, listing_id: int) -> bool:
        return self._users.delete_favorite(user_id, listing_id)

    # ========== ALERTS ==========

    def get_alerts(self, user_id: int, unread_only: bool = False, limit: int = 50) -> list[AlertRead]:
        alerts = self._alerts.get_alerts(user_id, unread_only=unread_only, limit=limit)
        return [alert_to_read(alert) for alert in alerts]

    def mark_alert_read(self, alert_id: int, user_id: int) -> AlertRead | None:
        """Mark the user's alert read.

        Returns:
            AlertRead if found and owned by the user, None otherwise.
        """
        alert = self._alerts.mark_read(alert_id, user_id)
        if alert is None:
            return None
        return alert_to_read(alert)

    # ========== SAVED SEARCHES ==========

    def get_saved_searches(self, user_id: int) -> list[SavedSearchRead]:
        return [SavedSearchRead.model_validate(s) for s in self._searches.get_saved_searches(user_id)]

    def create_saved_search(self, user_id: int, data: SavedSearchCreate) -> SavedSearchRead:
        search = self._searches.create_saved_search(user_id, data)
        return SavedSearchRead.model_validate(search)

    def delete_saved_search(self, search_id: int, user_id: int) -> bool:
        return self._searches.delete_saved_search(search_id, user_id)
