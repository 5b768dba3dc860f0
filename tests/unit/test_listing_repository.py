"""Tests for ListingRepository upsert, price history and retirement."""

from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from housewipe.database.engine import Database
from housewipe.database.repository import ListingRepository, UserRepository
from housewipe.models.db_models import Listing, PriceHistory
from housewipe.models.pydantic_models import FeedFilters, ListingSnapshot, SwipeDirection

T0 = datetime(2024, 5, 1, 12, 0, 0)


def make_snapshot(url: str = "https://example.com/listing/1", **kwargs) -> ListingSnapshot:
    data = {"source_url": url, "street": "12 Main St", "town": "Moncton", "province": "NB"}
    data.update(kwargs)
    return ListingSnapshot(**data)


@pytest.fixture
def database(tmp_path: Path):
    """Create a file-backed test database."""
    database = Database.from_path(tmp_path / "test.db")
    yield database
    database.dispose()


@pytest.fixture
def db_session(database: Database):
    with database.session() as session:
        yield session


@pytest.fixture
def repository(db_session: Session) -> ListingRepository:
    """Create a repository instance with test session."""
    return ListingRepository(db_session)


class TestUpsertListing:
    """Tests for upsert_listing()."""

    def test_new_listing_records_initial_price(self, repository: ListingRepository) -> None:
        result = repository.upsert_listing(make_snapshot(price=500000), now=T0)

        assert result.is_new is True
        assert result.price_changed is False
        assert result.new_price == 500000

        history = repository.get_price_history(result.listing_id)
        assert [p.price for p in history] == [500000]

        listing = repository.get_listing_by_id(result.listing_id)
        assert listing is not None
        assert listing.is_active is True
        assert listing.first_seen_at == T0
        assert listing.last_seen_at == T0

    def test_new_listing_without_price_has_no_history(self, repository: ListingRepository) -> None:
        result = repository.upsert_listing(make_snapshot(price=None), now=T0)

        assert result.is_new is True
        assert repository.get_price_history(result.listing_id) == []

    def test_same_price_is_idempotent(self, repository: ListingRepository) -> None:
        first = repository.upsert_listing(make_snapshot(price=500000), now=T0)
        second = repository.upsert_listing(make_snapshot(price=500000), now=T0 + timedelta(hours=1))

        assert second.listing_id == first.listing_id
        assert second.is_new is False
        assert second.price_changed is False
        assert len(repository.get_price_history(first.listing_id)) == 1
        assert repository.count_listings() == 1

    def test_price_drop_appends_point(self, repository: ListingRepository) -> None:
        first = repository.upsert_listing(make_snapshot(price=500000), now=T0)
        second = repository.upsert_listing(make_snapshot(price=480000), now=T0 + timedelta(hours=1))

        assert second.price_changed is True
        assert second.old_price == 500000
        assert second.new_price == 480000
        history = repository.get_price_history(first.listing_id)
        assert [p.price for p in history] == [500000, 480000]
        assert repository.get_listing_by_id(first.listing_id).price == 480000

    def test_null_price_keeps_last_known(self, repository: ListingRepository) -> None:
        first = repository.upsert_listing(make_snapshot(price=500000), now=T0)
        second = repository.upsert_listing(make_snapshot(price=None), now=T0 + timedelta(hours=1))
        third = repository.upsert_listing(make_snapshot(price=510000), now=T0 + timedelta(hours=2))

        assert second.price_changed is False
        assert third.price_changed is True
        assert third.old_price == 500000
        assert [p.price for p in repository.get_price_history(first.listing_id)] == [500000, 510000]
        assert repository.get_listing_by_id(first.listing_id).price == 510000

    def test_first_known_price_is_recorded_without_change(self, repository: ListingRepository) -> None:
        first = repository.upsert_listing(make_snapshot(price=None), now=T0)
        second = repository.upsert_listing(make_snapshot(price=450000), now=T0 + timedelta(hours=1))

        assert second.price_changed is False
        assert [p.price for p in repository.get_price_history(first.listing_id)] == [450000]

    def test_existing_listing_refreshes_fields(self, repository: ListingRepository) -> None:
        first = repository.upsert_listing(
            make_snapshot(price=1, beds=3, image_urls=["https://img/a.jpg"]), now=T0
        )
        later = T0 + timedelta(days=1)
        repository.upsert_listing(
            make_snapshot(price=1, street="12 Main Street", beds=None, image_urls=[]), now=later
        )

        listing = repository.get_listing_by_id(first.listing_id)
        assert listing.street == "12 Main Street"
        assert listing.beds == 3
        assert listing.image_urls == ["https://img/a.jpg"]
        assert listing.first_seen_at == T0
        assert listing.last_seen_at == later

    def test_reappearance_reactivates(self, repository: ListingRepository, db_session: Session) -> None:
        result = repository.upsert_listing(make_snapshot(price=1), now=T0)
        listing = repository.get_listing_by_id(result.listing_id)
        listing.is_active = False
        db_session.commit()

        repository.upsert_listing(make_snapshot(price=1), now=T0 + timedelta(days=3))

        assert repository.get_listing_by_id(result.listing_id).is_active is True

    def test_late_snapshot_does_not_move_timestamps_back(self, repository: ListingRepository) -> None:
        first = repository.upsert_listing(make_snapshot(price=500000), now=T0)

        late = repository.upsert_listing(make_snapshot(price=490000), now=T0 - timedelta(hours=1))

        listing = repository.get_listing_by_id(first.listing_id)
        assert listing.first_seen_at == T0
        assert listing.last_seen_at == T0
        assert late.price_changed is True

        latest = repository.get_latest_price_point(first.listing_id)
        assert latest.price == 490000
        assert latest.recorded_at == T0
        history = repository.get_price_history(first.listing_id)
        assert [p.price for p in history] == [500000, 490000]

    def test_later_snapshot_advances_last_seen(self, repository: ListingRepository) -> None:
        result = repository.upsert_listing(make_snapshot(price=500000), now=T0)

        repository.upsert_listing(make_snapshot(price=500000), now=T0 + timedelta(hours=3))

        listing = repository.get_listing_by_id(result.listing_id)
        assert listing.last_seen_at == T0 + timedelta(hours=3)

    def test_failure_leaves_no_partial_listing(self, repository: ListingRepository) -> None:
        with patch.object(
            ListingRepository, "_add_price_point", side_effect=RuntimeError("disk full")
        ):
            with pytest.raises(RuntimeError):
                repository.upsert_listing(make_snapshot(price=1), now=T0)

        assert repository.count_listings() == 0

    def test_insert_race_is_retried_as_update(
        self, repository: ListingRepository, database: Database
    ) -> None:
        original_apply = ListingRepository._apply_snapshot
        calls = {"n": 0}

        def racing_apply(self, snapshot, now):
            calls["n"] += 1
            if calls["n"] == 1:
                # Another writer commits the same URL first
                with database.session() as other:
                    ListingRepository(other).upsert_listing(snapshot, now=now)
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
            return original_apply(self, snapshot, now)

        with patch.object(ListingRepository, "_apply_snapshot", racing_apply):
            result = repository.upsert_listing(make_snapshot(price=1), now=T0)

        assert result.is_new is False
        assert repository.count_listings() == 1


class TestRetireMissingListings:
    """Tests for retire_missing_listings()."""

    def test_retires_absent_listings_past_grace(self, repository: ListingRepository) -> None:
        stale = repository.upsert_listing(make_snapshot("https://x/stale"), now=T0)
        seen = repository.upsert_listing(make_snapshot("https://x/seen"), now=T0)

        now = T0 + timedelta(hours=30)
        retired = repository.retire_missing_listings({"https://x/seen"}, timedelta(hours=24), now=now)

        assert retired == 1
        assert repository.get_listing_by_id(stale.listing_id).is_active is False
        assert repository.get_listing_by_id(seen.listing_id).is_active is True

    def test_grace_window_protects_recent_listings(self, repository: ListingRepository) -> None:
        recent = repository.upsert_listing(make_snapshot("https://x/recent"), now=T0)

        now = T0 + timedelta(hours=2)
        retired = repository.retire_missing_listings({"https://x/other"}, timedelta(hours=24), now=now)

        assert retired == 0
        assert repository.get_listing_by_id(recent.listing_id).is_active is True

    def test_already_retired_not_counted_again(self, repository: ListingRepository) -> None:
        repository.upsert_listing(make_snapshot("https://x/stale"), now=T0)
        now = T0 + timedelta(days=2)

        assert repository.retire_missing_listings(set(), timedelta(hours=24), now=now) == 1
        assert repository.retire_missing_listings(set(), timedelta(hours=24), now=now) == 0

    def test_retirement_keeps_history(self, repository: ListingRepository) -> None:
        result = repository.upsert_listing(make_snapshot("https://x/stale", price=1), now=T0)

        repository.retire_missing_listings(set(), timedelta(hours=1), now=T0 + timedelta(days=1))

        assert len(repository.get_price_history(result.listing_id)) == 1


class TestFeed:
    """Tests for get_feed()."""

    def test_orders_by_listed_at_then_first_seen(self, repository: ListingRepository) -> None:
        a = repository.upsert_listing(
            make_snapshot("https://x/a", listed_at=datetime(2024, 4, 1)), now=T0
        )
        b = repository.upsert_listing(
            make_snapshot("https://x/b", listed_at=datetime(2024, 4, 20)), now=T0
        )
        c = repository.upsert_listing(make_snapshot("https://x/c"), now=T0 + timedelta(hours=1))
        d = repository.upsert_listing(make_snapshot("https://x/d"), now=T0 + timedelta(hours=2))

        feed = repository.get_feed(user_id=1)

        assert [listing.id for listing in feed] == [b.listing_id, a.listing_id, d.listing_id, c.listing_id]

    def test_excludes_swiped_and_inactive(
        self, repository: ListingRepository, db_session: Session
    ) -> None:
        user, _ = UserRepository(db_session).get_or_create_user("user-1")
        swiped = repository.upsert_listing(make_snapshot("https://x/swiped"), now=T0)
        retired = repository.upsert_listing(make_snapshot("https://x/retired"), now=T0)
        fresh = repository.upsert_listing(make_snapshot("https://x/fresh"), now=T0)

        UserRepository(db_session).record_swipe(user.id, swiped.listing_id, SwipeDirection.LEFT)
        repository.get_listing_by_id(retired.listing_id).is_active = False
        db_session.commit()

        feed = repository.get_feed(user.id)

        assert [listing.id for listing in feed] == [fresh.listing_id]

    def test_filters(self, repository: ListingRepository) -> None:
        repository.upsert_listing(make_snapshot("https://x/cheap", price=200000, beds=2), now=T0)
        match = repository.upsert_listing(
            make_snapshot("https://x/match", price=400000, beds=3, baths=2), now=T0
        )
        repository.upsert_listing(
            make_snapshot("https://x/other-prov", price=400000, beds=3, baths=2, province="NS"),
            now=T0,
        )

        filters = FeedFilters(min_price=300000, max_price=500000, min_beds=3, min_baths=1.5, province="NB")
        feed = repository.get_feed(user_id=1, filters=filters)

        assert [listing.id for listing in feed] == [match.listing_id]

    def test_pagination(self, repository: ListingRepository) -> None:
        for i in range(5):
            repository.upsert_listing(make_snapshot(f"https://x/{i}"), now=T0 + timedelta(minutes=i))

        page = repository.get_feed(user_id=1, limit=2, offset=2)

        assert [listing.source_url for listing in page] == ["https://x/2", "https://x/1"]


class TestDeleteListing:
    def test_delete_cascades_history(self, repository: ListingRepository, db_session: Session) -> None:
        result = repository.upsert_listing(make_snapshot(price=1), now=T0)

        assert repository.delete_listing(result.listing_id) is True
        assert db_session.query(PriceHistory).count() == 0
        assert db_session.query(Listing).count() == 0

    def test_delete_missing_returns_false(self, repository: ListingRepository) -> None:
        assert repository.delete_listing(999) is False
