"""Tests for inventory and party-storage endpoints."""

import pytest

from pipboy_server.db.schema import MAX_LINE_QUANTITY
from tests.helpers import bearer, login


@pytest.fixture
def catalog(test_client, stimpak, radaway):
    """Stimpak and RadAway in the catalog for API tests."""
    return [stimpak, radaway]


@pytest.mark.api
class TestInventoryEndpoints:
    def test_add_and_list(self, test_client, catalog, player_headers):
        response = test_client.post(
            "/api/inventory", json={"itemKey": "stimpak", "quantity": 2}, headers=player_headers
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Item added to inventory",
            "itemKey": "stimpak",
            "quantity": 2,
        }

        (line,) = test_client.get("/api/inventory", headers=player_headers).json()
        assert line["item_key"] == "stimpak"
        assert line["quantity"] == 2
        assert line["name"] == "Stimpak"

    def test_quantity_defaults_to_one(self, test_client, catalog, player_headers):
        response = test_client.post(
            "/api/inventory", json={"itemKey": "radaway"}, headers=player_headers
        )

        assert response.json()["quantity"] == 1

    def test_remove_with_quantity_query(self, test_client, catalog, player_headers):
        test_client.post(
            "/api/inventory", json={"itemKey": "stimpak", "quantity": 5}, headers=player_headers
        )

        partial = test_client.delete("/api/inventory/stimpak?quantity=2", headers=player_headers)
        assert partial.json()["quantity"] == 3

        exact = test_client.delete("/api/inventory/stimpak?quantity=3", headers=player_headers)
        assert exact.json() == {
            "message": "Item removed from inventory",
            "itemKey": "stimpak",
            "quantity": 0,
        }
        assert test_client.get("/api/inventory", headers=player_headers).json() == []

    def test_over_remove_is_conflict(self, test_client, catalog, player_headers):
        test_client.post(
            "/api/inventory", json={"itemKey": "stimpak", "quantity": 1}, headers=player_headers
        )

        response = test_client.delete("/api/inventory/stimpak?quantity=2", headers=player_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "INSUFFICIENT_QUANTITY"
        (line,) = test_client.get("/api/inventory", headers=player_headers).json()
        assert line["quantity"] == 1

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity(self, test_client, catalog, player_headers, quantity):
        response = test_client.post(
            "/api/inventory",
            json={"itemKey": "stimpak", "quantity": quantity},
            headers=player_headers,
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("quantity", [MAX_LINE_QUANTITY + 1, 2**63])
    def test_oversized_quantity_is_bad_request(
        self, test_client, catalog, player_headers, quantity
    ):
        response = test_client.post(
            "/api/inventory",
            json={"itemKey": "stimpak", "quantity": quantity},
            headers=player_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"
        assert test_client.get("/api/inventory", headers=player_headers).json() == []

    def test_add_past_limit_is_bad_request(self, test_client, catalog, player_headers):
        test_client.post(
            "/api/inventory",
            json={"itemKey": "stimpak", "quantity": MAX_LINE_QUANTITY},
            headers=player_headers,
        )

        response = test_client.post(
            "/api/inventory", json={"itemKey": "stimpak"}, headers=player_headers
        )

        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"
        (line,) = test_client.get("/api/inventory", headers=player_headers).json()
        assert line["quantity"] == MAX_LINE_QUANTITY

    def test_missing_item_key(self, test_client, catalog, player_headers):
        response = test_client.post("/api/inventory", json={}, headers=player_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Item key required"

    def test_unknown_item(self, test_client, catalog, player_headers):
        response = test_client.post(
            "/api/inventory", json={"itemKey": "plasma-rifle"}, headers=player_headers
        )

        assert response.status_code == 404

    def test_inventories_are_private(self, test_client, catalog, player_headers):
        test_client.post(
            "/api/inventory", json={"itemKey": "stimpak", "quantity": 3}, headers=player_headers
        )
        piper_headers = bearer(login(test_client, "piper")["token"])

        assert test_client.get("/api/inventory", headers=piper_headers).json() == []


@pytest.mark.api
class TestPartyStorageEndpoints:
    def test_storage_is_shared(self, test_client, catalog, player_headers):
        piper_headers = bearer(login(test_client, "piper")["token"])

        added = test_client.post(
            "/api/party-storage",
            json={"itemKey": "radaway", "quantity": 3},
            headers=player_headers,
        )
        assert added.json() == {
            "message": "Item added to party storage",
            "itemKey": "radaway",
            "quantity": 3,
        }

        removed = test_client.delete(
            "/api/party-storage/radaway?quantity=1", headers=piper_headers
        )
        assert removed.json()["message"] == "Item removed from party storage"
        assert removed.json()["quantity"] == 2

        (line,) = test_client.get("/api/party-storage", headers=player_headers).json()
        assert (line["item_key"], line["quantity"]) == ("radaway", 2)

    def test_remove_defaults_to_one(self, test_client, catalog, player_headers):
        test_client.post(
            "/api/party-storage", json={"itemKey": "stimpak"}, headers=player_headers
        )

        response = test_client.delete("/api/party-storage/stimpak", headers=player_headers)

        assert response.json()["quantity"] == 0
        assert test_client.get("/api/party-storage", headers=player_headers).json() == []

    def test_remove_from_empty_storage(self, test_client, catalog, player_headers):
        response = test_client.delete("/api/party-storage/stimpak", headers=player_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "INSUFFICIENT_QUANTITY"

    def test_oversized_remove_is_bad_request(self, test_client, catalog, player_headers):
        response = test_client.delete(
            f"/api/party-storage/stimpak?quantity={2**63}", headers=player_headers
        )

        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"
