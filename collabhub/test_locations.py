"""
collabhub/test_locations.py

Location reference data and startup wiring.

Run:
    pytest collabhub/test_locations.py -v
"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from collabhub.db import PERMISSIONS, seed_permissions
from collabhub.main import app
from collabhub.permissions import catalog


def test_create_and_list_locations(client, owner):
    created = client.post("/locations", json={"name": "Chiang Mai", "th_name": "เชียงใหม่"}, headers=owner.headers)
    assert created.status_code == 201
    location_id = created.json()["data"]["id"]

    client.post("/locations", json={"name": "Ayutthaya", "th_name": "อยุธยา"}, headers=owner.headers)

    response = client.get("/locations", headers=owner.headers)
    assert response.status_code == 200
    rows = response.json()["data"]
    assert [r["name"] for r in rows] == ["Ayutthaya", "Chiang Mai"]
    assert {"id": location_id, "name": "Chiang Mai", "th_name": "เชียงใหม่"} in rows


def test_location_requires_names(client, owner):
    response = client.post("/locations", json={"name": "  "}, headers=owner.headers)
    assert response.status_code == 400


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_seed_permissions_is_idempotent(mongo_db):
    assert seed_permissions(mongo_db) == 0
    assert mongo_db[PERMISSIONS].count_documents({}) == 3


def test_startup_seeds_and_loads_catalog(mongo_db):
    catalog.clear()
    mongo_db[PERMISSIONS].delete_many({})
    with patch("collabhub.main.get_database", return_value=mongo_db):
        with TestClient(app):
            assert catalog.loaded
            assert catalog.names() == {"owner", "can_edited", "read_only"}
