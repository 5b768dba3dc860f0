"""Unit tests for Pydantic models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from housewipe.models.pydantic_models import (
    AlertType,
    ListingSnapshot,
    PassStats,
    SavedSearchCreate,
    ScrapeRunStatus,
    SwipeDirection,
)


class TestEnums:
    def test_wire_values(self):
        assert ScrapeRunStatus.RUNNING.value == "running"
        assert AlertType.PRICE_DROP.value == "price_drop"
        assert SwipeDirection.SUPER.value == "super"


class TestListingSnapshot:
    """Tests for ListingSnapshot validation."""

    def test_accepts_userscript_payload(self):
        snapshot = ListingSnapshot.model_validate(
            {
                "detailUrl": "https://www.realtor.ca/real-estate/1/12-main-st",
                "price": "$649,900",
                "street": "12 Main St",
                "town": "Moncton",
                "province": "New Brunswick",
                "beds": 3,
                "baths": 2,
                "imageUrls": ["https://img/1.jpg", "", "https://img/2.jpg"],
                "scrapedAt": "2024-05-01T12:00:00Z",
            }
        )

        assert snapshot.source_url == "https://www.realtor.ca/real-estate/1/12-main-st"
        assert snapshot.price == 649900
        assert snapshot.image_urls == ["https://img/1.jpg", "https://img/2.jpg"]
        assert snapshot.observed_at == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)

    def test_accepts_snake_case_names(self):
        snapshot = ListingSnapshot(source_url="https://x/1", street="1 A St", price=100)

        assert snapshot.source_url == "https://x/1"
        assert snapshot.price == 100

    def test_single_image_url_fallback(self):
        snapshot = ListingSnapshot.model_validate(
            {"url": "https://x/1", "street": "1 A St", "imageUrl": "https://img/only.jpg"}
        )

        assert snapshot.image_urls == ["https://img/only.jpg"]

    def test_price_text_without_digits_is_unknown(self):
        snapshot = ListingSnapshot.model_validate(
            {"url": "https://x/1", "street": "1 A St", "price": "Contact agent"}
        )

        assert snapshot.price is None

    def test_price_text_with_cents_drops_fraction(self):
        snapshot = ListingSnapshot.model_validate(
            {"url": "https://x/1", "street": "1 A St", "price": "$649,900.00"}
        )

        assert snapshot.price == 649900

    def test_blank_street_rejected(self):
        with pytest.raises(ValidationError):
            ListingSnapshot.model_validate({"url": "https://x/1", "street": "   "})

    def test_missing_url_rejected(self):
        with pytest.raises(ValidationError):
            ListingSnapshot.model_validate({"street": "1 A St"})

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            ListingSnapshot(source_url="https://x/1", street="1 A St", price=-5)

    def test_out_of_range_latitude_rejected(self):
        with pytest.raises(ValidationError):
            ListingSnapshot(source_url="https://x/1", street="1 A St", lat=95, lng=10)

    def test_blank_town_becomes_none(self):
        snapshot = ListingSnapshot(source_url="https://x/1", street="1 A St", town="  ")

        assert snapshot.town is None

    def test_full_address(self):
        snapshot = ListingSnapshot(
            source_url="https://x/1", street="1 A St", town="Dieppe", province="NB"
        )

        assert snapshot.full_address == "1 A St, Dieppe, NB, Canada"

    def test_has_coordinates(self):
        assert ListingSnapshot(source_url="u", street="s", lat=46.1, lng=-64.8).has_coordinates
        assert not ListingSnapshot(source_url="u", street="s", lat=46.1).has_coordinates

    def test_observed_at_defaults_to_now(self):
        before = datetime.now(timezone.utc)
        snapshot = ListingSnapshot(source_url="u", street="s")

        assert snapshot.observed_at >= before

    def test_is_frozen(self):
        snapshot = ListingSnapshot(source_url="u", street="s")

        with pytest.raises(ValidationError):
            snapshot.price = 1  # type: ignore[misc]


class TestOtherModels:
    def test_pass_stats_defaults(self):
        assert PassStats().model_dump() == {
            "found": 0,
            "new": 0,
            "updated": 0,
            "price_changes": 0,
            "failed": 0,
            "retired": 0,
        }

    def test_saved_search_radius_must_be_positive(self):
        with pytest.raises(ValidationError):
            SavedSearchCreate(name="Near work", radius_km=0)
