"""Derivation of user alerts from reconciliation events."""

import logging
import math
from typing import Any

from housewipe.database.engine import Database
from housewipe.database.repository import (
    AlertRepository,
    ListingRepository,
    SavedSearchRepository,
    UserRepository,
)
from housewipe.models.db_models import Alert, Listing
from housewipe.models.pydantic_models import AlertPolicy, AlertRead, AlertType, ReconcileResult

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def classify_event(result: ReconcileResult) -> AlertType | None:
    """Map a reconcile outcome to the alert it warrants, if any.

    Args:
        result: Outcome of one upsert.

    Returns:
        NEW_LISTING for first sightings, PRICE_DROP / PRICE_INCREASE for
        price changes with both prices known, otherwise None.
    """
    if result.is_new:
        return AlertType.NEW_LISTING

    if result.price_changed and result.old_price is not None and result.new_price is not None:
        if result.new_price < result.old_price:
            return AlertType.PRICE_DROP
        if result.new_price > result.old_price:
            return AlertType.PRICE_INCREASE

    return None


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def _in_list(value: str | None, allowed: list[str] | None) -> bool:
    if not allowed:
        return True
    if value is None:
        return False
    return value.casefold() in {item.casefold() for item in allowed}


def saved_search_matches(search: Any, listing: Any) -> bool:
    """Check whether a listing satisfies a saved search's criteria.

    Unset criteria match everything. A bound on price, beds or baths never
    matches a listing whose value is unknown. The radius only applies when
    both the search and the listing have coordinates.

    Args:
        search: SavedSearch (or any object with the same attributes).
        listing: Listing (or any object with the same attributes).

    Returns:
        True if every set criterion matches.
    """
    price = listing.price
    if search.min_price is not None and (price is None or price < search.min_price):
        return False
    if search.max_price is not None and (price is None or price > search.max_price):
        return False
    if search.min_beds is not None and (listing.beds or 0) < search.min_beds:
        return False
    if search.min_baths is not None and (listing.baths or 0) < search.min_baths:
        return False
    if not _in_list(listing.town, search.towns):
        return False
    if not _in_list(listing.province, search.provinces):
        return False

    if (
        search.radius_km is not None
        and search.lat is not None
        and search.lng is not None
        and listing.lat is not None
        and listing.lng is not None
    ):
        distance = haversine_km(search.lat, search.lng, listing.lat, listing.lng)
        if distance > search.radius_km:
            return False

    return True


def alert_to_read(alert: Alert, listing: Listing | None = None) -> AlertRead:
    """Convert an Alert ORM object, joined with its listing, to AlertRead."""
    listing = listing if listing is not None else alert.listing
    return AlertRead(
        id=alert.id,
        user_id=alert.user_id,
        listing_id=alert.listing_id,
        saved_search_id=alert.saved_search_id,
        alert_type=alert.alert_type,
        old_price=alert.old_price,
        new_price=alert.new_price,
        read_at=alert.read_at,
        created_at=alert.created_at,
        street=listing.street if listing else None,
        town=listing.town if listing else None,
        price=listing.price if listing else None,
        image_url=listing.first_image_url if listing else None,
    )


class AlertDeriver:
    """Creates one alert per interested user for each listing event."""

    def __init__(self, database: Database, policy: AlertPolicy = AlertPolicy.SAVED_SEARCH) -> None:
        """Initialize with the store handle and interest policy.

        Args:
            database: Store handle.
            policy: Which users are interested in a listing.
        """
        self._database = database
        self._policy = policy

    def derive(self, result: ReconcileResult) -> list[AlertRead]:
        """Create alerts for a reconcile outcome.

        Args:
            result: Outcome of one upsert.

        Returns:
            The created alerts (empty when the event warrants none or nobody
            is interested).
        """
        alert_type = classify_event(result)
        if alert_type is None:
            return []

        with self._database.session() as session:
            listing = ListingRepository(session).get_listing_by_id(result.listing_id)
            if listing is None:
                return []

            recipients = self._recipients(session, listing)
            if not recipients:
                return []

            old_price = None if alert_type == AlertType.NEW_LISTING else result.old_price
            alerts = AlertRepository(session).bulk_create_alerts(
                [
                    {
                        "user_id": user_id,
                        "listing_id": listing.id,
                        "saved_search_id": saved_search_id,
                        "alert_type": alert_type,
                        "old_price": old_price,
                        "new_price": result.new_price,
                    }
                    for user_id, saved_search_id in recipients.items()
                ]
            )
            logger.debug(
                "Created %d %s alert(s) for listing %d",
                len(alerts),
                alert_type.value,
                listing.id,
            )
            return [alert_to_read(alert, listing) for alert in alerts]

    def _recipients(self, session: Any, listing: Listing) -> dict[int, int | None]:
        """Map interested user id to the saved search credited for the alert."""
        recipients: dict[int, int | None] = {}

        if self._policy in (AlertPolicy.SAVED_SEARCH, AlertPolicy.BOTH):
            for search in SavedSearchRepository(session).get_alerting_saved_searches():
                if search.user_id in recipients:
                    continue
                if saved_search_matches(search, listing):
                    recipients[search.user_id] = search.id

        if self._policy in (AlertPolicy.FAVORITES, AlertPolicy.BOTH):
            for user_id in UserRepository(session).get_favorited_user_ids(listing.id):
                recipients.setdefault(user_id, None)

        return recipients
