"""Integration tests for feed, swipe, favorite, alert and search endpoints."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from housewipe.api.main import create_app
from housewipe.config import ReconcileSettings, Settings
from housewipe.database.engine import Database
from housewipe.models.pydantic_models import AlertPolicy

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


def raw(n: int, price: int, town: str = "Moncton", beds: int = 3) -> dict:
    return {
        "detailUrl": f"https://www.realtor.ca/real-estate/{n}",
        "price": price,
        "street": f"{n} Main St",
        "town": town,
        "province": "New Brunswick",
        "beds": beds,
        "baths": 2,
    }


@pytest.fixture
def database(tmp_path: Path):
    database = Database.from_path(tmp_path / "test.db")
    yield database
    database.dispose()


@pytest.fixture
def client(database: Database) -> TestClient:
    return TestClient(create_app(database=database, settings=Settings()))


@pytest.fixture
def listing_ids(client: TestClient) -> list[int]:
    """Ingest three listings and return their IDs in feed order."""
    client.post(
        "/api/scraper/listings",
        json={"listings": [raw(1, 300000), raw(2, 450000, beds=4), raw(3, 600000, town="Dieppe")]},
    )
    feed = client.get("/api/listings", headers=ALICE).json()["listings"]
    return [listing["id"] for listing in feed]


class TestFeed:
    def test_requires_user_header(self, client: TestClient) -> None:
        assert client.get("/api/listings").status_code == 422

    def test_feed_and_filters(self, client: TestClient, listing_ids: list[int]) -> None:
        assert len(listing_ids) == 3

        response = client.get("/api/listings", headers=ALICE, params={"min_beds": 4})

        assert [listing["street"] for listing in response.json()["listings"]] == ["2 Main St"]

    def test_swiped_listings_leave_feed(self, client: TestClient, listing_ids: list[int]) -> None:
        response = client.post(
            "/api/swipes", headers=ALICE, json={"listing_id": listing_ids[0], "direction": "left"}
        )
        assert response.status_code == 200

        alice_feed = client.get("/api/listings", headers=ALICE).json()["listings"]
        bob_feed = client.get("/api/listings", headers=BOB).json()["listings"]

        assert listing_ids[0] not in [listing["id"] for listing in alice_feed]
        assert len(bob_feed) == 3

    def test_invalid_swipe_direction(self, client: TestClient, listing_ids: list[int]) -> None:
        response = client.post(
            "/api/swipes", headers=ALICE, json={"listing_id": listing_ids[0], "direction": "up"}
        )
        assert response.status_code == 422

    def test_swipe_unknown_listing(self, client: TestClient) -> None:
        response = client.post("/api/swipes", headers=ALICE, json={"listing_id": 999, "direction": "right"})
        assert response.status_code == 404

    def test_listing_detail(self, client: TestClient, listing_ids: list[int]) -> None:
        response = client.get(f"/api/listings/{listing_ids[0]}", headers=ALICE)

        assert response.status_code == 200
        data = response.json()
        assert data["is_favorite"] is False
        assert len(data["price_history"]) == 1

    def test_listing_not_found(self, client: TestClient) -> None:
        assert client.get("/api/listings/999", headers=ALICE).status_code == 404


class TestFavorites:
    def test_favorite_lifecycle(self, client: TestClient, listing_ids: list[int]) -> None:
        listing_id = listing_ids[1]
        client.post("/api/swipes", headers=ALICE, json={"listing_id": listing_id, "direction": "right"})

        favorites = client.get("/api/favorites", headers=ALICE).json()
        assert favorites["count"] == 1

        response = client.put(
            f"/api/favorites/{listing_id}", headers=ALICE, json={"notes": "Corner lot", "rating": 4}
        )
        assert response.status_code == 200
        assert response.json()["notes"] == "Corner lot"

        detail = client.get(f"/api/listings/{listing_id}", headers=ALICE).json()
        assert detail["is_favorite"] is True
        assert detail["rating"] == 4

        assert client.delete(f"/api/favorites/{listing_id}", headers=ALICE).status_code == 200
        assert client.delete(f"/api/favorites/{listing_id}", headers=ALICE).status_code == 404

    def test_muted_favorite_gets_no_price_alert(self, database: Database) -> None:
        settings = Settings(reconcile=ReconcileSettings(alert_policy=AlertPolicy.FAVORITES))
        client = TestClient(create_app(database=database, settings=settings))
        client.post("/api/scraper/listings", json={"listings": [raw(1, 300000)]})
        listing_id = client.get("/api/listings", headers=ALICE).json()["listings"][0]["id"]
        client.post("/api/swipes", headers=ALICE, json={"listing_id": listing_id, "direction": "right"})

        response = client.put(f"/api/favorites/{listing_id}", headers=ALICE, json={"alerts_enabled": False})
        assert response.json()["alerts_enabled"] is False

        client.post("/api/scraper/listings", json={"listings": [raw(1, 280000)]})

        assert client.get("/api/alerts", headers=ALICE).json()["count"] == 0

    def test_rating_out_of_range(self, client: TestClient, listing_ids: list[int]) -> None:
        response = client.put(f"/api/favorites/{listing_ids[0]}", headers=ALICE, json={"rating": 6})
        assert response.status_code == 422

    def test_update_missing_favorite(self, client: TestClient, listing_ids: list[int]) -> None:
        response = client.put(f"/api/favorites/{listing_ids[0]}", headers=BOB, json={"notes": "x"})
        assert response.status_code == 404


class TestAlertsFlow:
    def test_saved_search_receives_price_drop(self, client: TestClient) -> None:
        response = client.post(
            "/api/searches",
            headers=ALICE,
            json={"name": "Moncton under 500k", "towns": ["moncton"], "max_price": 500000},
        )
        assert response.status_code == 201
        search_id = response.json()["id"]

        client.post("/api/scraper/listings", json={"listings": [raw(1, 480000)]})
        client.post("/api/scraper/listings", json={"listings": [raw(1, 460000)]})

        alerts = client.get("/api/alerts", headers=ALICE).json()["alerts"]
        assert [a["alert_type"] for a in alerts] == ["price_drop", "new_listing"]
        drop = alerts[0]
        assert (drop["old_price"], drop["new_price"]) == (480000, 460000)
        assert drop["saved_search_id"] == search_id

        assert client.get("/api/alerts", headers=BOB).json()["count"] == 0
        assert client.post(f"/api/alerts/{drop['id']}/read", headers=BOB).status_code == 404
        assert client.post(f"/api/alerts/{drop['id']}/read", headers=ALICE).status_code == 200

        unread = client.get("/api/alerts", headers=ALICE, params={"unread_only": True}).json()
        assert unread["count"] == 1

    def test_searches_crud(self, client: TestClient) -> None:
        created = client.post("/api/searches", headers=ALICE, json={"name": "Anything"}).json()

        assert client.get("/api/searches", headers=ALICE).json()["count"] == 1
        assert client.delete(f"/api/searches/{created['id']}", headers=BOB).status_code == 404
        assert client.delete(f"/api/searches/{created['id']}", headers=ALICE).status_code == 200
        assert client.get("/api/searches", headers=ALICE).json()["count"] == 0


class TestUser:
    def test_me_creates_user_once(self, client: TestClient) -> None:
        first = client.get("/api/me", headers={**ALICE, "X-User-Email": "alice@example.com"}).json()
        second = client.get("/api/me", headers=ALICE).json()

        assert first["id"] == second["id"]
        assert second["email"] == "alice@example.com"

    def test_stats(self, client: TestClient, listing_ids: list[int]) -> None:
        client.post("/api/swipes", headers=ALICE, json={"listing_id": listing_ids[0], "direction": "super"})
        client.post("/api/swipes", headers=ALICE, json={"listing_id": listing_ids[1], "direction": "left"})

        stats = client.get("/api/stats", headers=ALICE).json()

        assert stats["swipes"] == {"left": 1, "right": 0, "super": 1}
        assert stats["total_swipes"] == 2
        assert stats["favorites"] == 1
