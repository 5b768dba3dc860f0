"""End-to-end reconciliation across several passes."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from housewipe.config import ReconcileSettings, Settings
from housewipe.database.engine import Database
from housewipe.database.repository import (
    ListingRepository,
    SavedSearchRepository,
    UserRepository,
)
from housewipe.models.pydantic_models import (
    AlertPolicy,
    AlertType,
    FeedFilters,
    SavedSearchCreate,
    ScrapeRunStatus,
    SwipeDirection,
)
from housewipe.scrapers.payload import PayloadExtractor
from housewipe.services.feed_service import FeedService
from housewipe.services.scrape_service import ScrapeCoordinator

T0 = datetime(2024, 5, 1, 12, 0)

URL_A = "https://www.realtor.ca/real-estate/a"
URL_B = "https://www.realtor.ca/real-estate/b"
URL_C = "https://www.realtor.ca/real-estate/c"


def record(url: str, price: int, street: str) -> dict:
    return {"detailUrl": url, "price": price, "street": street, "town": "Moncton", "province": "NB"}


@pytest.fixture
def database(tmp_path: Path):
    database = Database.from_path(tmp_path / "test.db")
    yield database
    database.dispose()


@pytest.fixture
def coordinator(database: Database) -> ScrapeCoordinator:
    settings = Settings(
        reconcile=ReconcileSettings(retirement_grace_hours=24, alert_policy=AlertPolicy.BOTH)
    )
    return ScrapeCoordinator(database, settings)


@pytest.fixture
def users(database: Database) -> dict[str, int]:
    """Alice watches Moncton through a saved search; Bob only uses favorites."""
    with database.session() as session:
        repo = UserRepository(session)
        alice, _ = repo.get_or_create_user("alice")
        bob, _ = repo.get_or_create_user("bob")
        SavedSearchRepository(session).create_saved_search(
            alice.id, SavedSearchCreate(name="Moncton", towns=["Moncton"])
        )
        return {"alice": alice.id, "bob": bob.id}


@pytest.mark.asyncio
async def test_listing_lifecycle_across_passes(
    database: Database, coordinator: ScrapeCoordinator, users: dict[str, int]
) -> None:
    # Pass 1: three new listings
    run = await coordinator.run_pass(
        PayloadExtractor(
            [record(URL_A, 500000, "1 A St"), record(URL_B, 300000, "2 B St"), record(URL_C, 400000, "3 C St")]
        ),
        now=T0,
    )
    assert (run.listings_found, run.listings_new) == (3, 3)

    with database.session() as session:
        listing_b = ListingRepository(session).get_listing_by_url(URL_B)
        assert listing_b is not None
        FeedService(session).record_swipe(users["bob"], listing_b.id, SwipeDirection.RIGHT)

    # Pass 2: A drops, B rises, C is missing but inside the grace window
    run = await coordinator.run_pass(
        PayloadExtractor([record(URL_A, 480000, "1 A St"), record(URL_B, 320000, "2 B St")]),
        now=T0 + timedelta(hours=2),
    )
    assert run.price_changes == 2
    assert run.listings_retired == 0

    # Pass 3: C has been gone longer than the grace window
    run = await coordinator.run_pass(
        PayloadExtractor([record(URL_A, 480000, "1 A St"), record(URL_B, 320000, "2 B St")]),
        now=T0 + timedelta(hours=30),
    )
    assert run.status == ScrapeRunStatus.COMPLETED
    assert run.listings_updated == 2
    assert run.listings_retired == 1

    with database.session() as session:
        service = FeedService(session)
        listing_a = ListingRepository(session).get_listing_by_url(URL_A)
        listing_c = ListingRepository(session).get_listing_by_url(URL_C)
        assert listing_c is not None and listing_c.is_active is False

        bob_feed = service.get_feed(users["bob"], FeedFilters())
        assert [listing.source_url for listing in bob_feed] == [URL_A]

        detail = service.get_listing_detail(listing_a.id)
        assert [point.price for point in detail.price_history] == [500000, 480000]

        alice_alerts = service.get_alerts(users["alice"])
        assert sorted(alert.alert_type for alert in alice_alerts) == sorted(
            [AlertType.NEW_LISTING] * 3 + [AlertType.PRICE_DROP, AlertType.PRICE_INCREASE]
        )
        assert all(alert.saved_search_id is not None for alert in alice_alerts)

        bob_alerts = service.get_alerts(users["bob"])
        assert len(bob_alerts) == 1
        assert bob_alerts[0].alert_type == AlertType.PRICE_INCREASE
        assert (bob_alerts[0].old_price, bob_alerts[0].new_price) == (300000, 320000)
        assert bob_alerts[0].saved_search_id is None

    # Pass 4: C comes back and is reactivated without a new-listing alert
    run = await coordinator.run_pass(
        PayloadExtractor([record(URL_C, 400000, "3 C St")]),
        now=T0 + timedelta(hours=31),
    )
    assert (run.listings_new, run.listings_updated, run.listings_retired) == (0, 1, 0)

    with database.session() as session:
        listing_c = ListingRepository(session).get_listing_by_url(URL_C)
        assert listing_c.is_active is True
        assert listing_c.last_seen_at == T0 + timedelta(hours=31)
        assert len(FeedService(session).get_alerts(users["alice"])) == 5
