"""
backend/test_routes_assets.py

End-to-end tests for the asset REST endpoints: HTTP -> gateway -> contract
-> sqlite ledger, using a fresh ledger file per test.

Tests cover:
- Seeding, listing, searching
- Create / transfer / price update and their error mapping
- History after a sequence of submitted transactions
- Request validation

Run: pytest backend/test_routes_assets.py -v
"""

from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from backend.dependencies import build_gateway, get_gateway
from backend.main import app
from chaincode.errors import ReadConflictError


# ========================================================================
# FIXTURES
# ========================================================================

@pytest.fixture
def gateway(tmp_path):
    """Gateway over a temp ledger, wired into the app for the test."""
    gw = build_gateway(str(tmp_path / "ledger.db"))
    app.dependency_overrides[get_gateway] = lambda: gw
    yield gw
    app.dependency_overrides.clear()


@pytest.fixture
def client(gateway):
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def seeded_client(client):
    resp = client.post("/api/ledger/init")
    assert resp.status_code == 200, resp.text
    return client


def create(client, asset_id="car-1", asset_type="Car", price=100, owner="Ann"):
    return client.post(
        "/api/assets",
        json={"id": asset_id, "type": asset_type, "price": price, "owner": owner},
    )


# ========================================================================
# READS
# ========================================================================

class TestReadEndpoints:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_list_empty_ledger(self, client):
        resp = client.get("/api/assets")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_list_after_init(self, seeded_client):
        resp = seeded_client.get("/api/assets")
        assert resp.status_code == 200
        assets = {a["ID"]: a for a in resp.json()}
        assert assets == {
            "asset1": {"ID": "asset1", "Type": "Car", "Price": 10000, "Owner": "Tomoko"},
            "asset2": {"ID": "asset2", "Type": "House", "Price": 250000, "Owner": "Brad"},
            "asset3": {"ID": "asset3", "Type": "Boat", "Price": 50000, "Owner": "Jin Soo"},
        }

    def test_get_asset(self, seeded_client):
        resp = seeded_client.get("/api/assets/asset2")
        assert resp.status_code == 200
        assert resp.json() == {"ID": "asset2", "Type": "House", "Price": 250000, "Owner": "Brad"}

    def test_get_missing_asset_is_404(self, client):
        resp = client.get("/api/assets/ghost")
        assert resp.status_code == 404
        assert "the asset ghost does not exist" in resp.json()["detail"]

    def test_exists(self, seeded_client):
        assert seeded_client.get("/api/assets/asset1/exists").json() == {"id": "asset1", "exists": True}
        assert seeded_client.get("/api/assets/ghost/exists").json() == {"id": "ghost", "exists": False}

    def test_reads_do_not_write_history(self, seeded_client):
        seeded_client.get("/api/assets/asset1")
        seeded_client.get("/api/assets")
        assert len(seeded_client.get("/api/assets/asset1/history").json()) == 1


# ========================================================================
# WRITES
# ========================================================================

class TestCreateAsset:
    def test_create_returns_201_and_persists(self, client):
        resp = create(client)
        assert resp.status_code == 201
        assert resp.json() == {"message": "Asset car-1 created successfully"}

        assert client.get("/api/assets/car-1").json() == {
            "ID": "car-1", "Type": "Car", "Price": 100, "Owner": "Ann",
        }

    def test_duplicate_is_409(self, client):
        create(client)
        resp = create(client, owner="Someone else")
        assert resp.status_code == 409
        assert "already exists" in resp.json()["detail"]
        assert client.get("/api/assets/car-1").json()["Owner"] == "Ann"

    def test_id_is_trimmed(self, client):
        assert create(client, asset_id="  boat-7 ").status_code == 201
        assert client.get("/api/assets/boat-7/exists").json()["exists"] is True

    @pytest.mark.parametrize(
        "body",
        [
            {"id": "   ", "type": "Car", "price": 1, "owner": "Ann"},
            {"id": "x", "type": "Car", "price": "12", "owner": "Ann"},
            {"id": "x", "type": "Car", "price": 1.5, "owner": "Ann"},
            {"id": "x", "type": "Car", "owner": "Ann"},
        ],
    )
    def test_invalid_body_is_422(self, client, body):
        assert client.post("/api/assets", json=body).status_code == 422
        assert client.get("/api/assets").json() == []


class TestTransferAndPrice:
    def test_transfer(self, seeded_client):
        resp = seeded_client.put("/api/assets/asset1/transfer", json={"newOwner": "Max"})
        assert resp.status_code == 200
        assert resp.json() == {"message": "Asset asset1 transferred to Max"}
        assert seeded_client.get("/api/assets/asset1").json() == {
            "ID": "asset1", "Type": "Car", "Price": 10000, "Owner": "Max",
        }

    def test_transfer_to_current_owner_is_409(self, seeded_client):
        resp = seeded_client.put("/api/assets/asset1/transfer", json={"newOwner": "Tomoko"})
        assert resp.status_code == 409
        assert "no transfer performed" in resp.json()["detail"]

    def test_transfer_missing_asset_is_404(self, client):
        resp = client.put("/api/assets/ghost/transfer", json={"newOwner": "Max"})
        assert resp.status_code == 404

    def test_price_update(self, seeded_client):
        resp = seeded_client.put("/api/assets/asset3/price", json={"newPrice": 45000})
        assert resp.status_code == 200
        assert resp.json() == {"message": "Price of asset asset3 updated to 45000"}
        assert seeded_client.get("/api/assets/asset3").json()["Price"] == 45000

    def test_same_price_is_409(self, seeded_client):
        resp = seeded_client.put("/api/assets/asset3/price", json={"newPrice": 50000})
        assert resp.status_code == 409
        assert "no update performed" in resp.json()["detail"]

    def test_init_overwrites_changes(self, seeded_client):
        seeded_client.put("/api/assets/asset1/transfer", json={"newOwner": "Max"})
        seeded_client.post("/api/ledger/init")
        assert seeded_client.get("/api/assets/asset1").json()["Owner"] == "Tomoko"


# ========================================================================
# HISTORY
# ========================================================================

class TestHistory:
    def test_create_update_transfer(self, client):
        create(client, price=100, owner="Ann")
        client.put("/api/assets/car-1/price", json={"newPrice": 150})
        client.put("/api/assets/car-1/transfer", json={"newOwner": "Ben"})

        resp = client.get("/api/assets/car-1/history")
        assert resp.status_code == 200
        history = resp.json()

        assert [h["record"] for h in history] == [
            {"Price": 150, "Owner": "Ben"},
            {"Price": 150, "Owner": "Ann"},
            {"Price": 100, "Owner": "Ann"},
        ]
        assert [h["isDelete"] for h in history] == [False, False, False]
        assert len({h["txId"] for h in history}) == 3
        timestamps = [datetime.fromisoformat(h["timestamp"].replace("Z", "+00:00")) for h in history]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_rejected_update_leaves_no_history(self, client):
        create(client)
        client.put("/api/assets/car-1/transfer", json={"newOwner": "Ann"})
        assert len(client.get("/api/assets/car-1/history").json()) == 1

    def test_tombstone_in_history(self, client, gateway):
        create(client)
        with gateway.ledger.transaction() as ctx:
            ctx.get_stub().del_state("car-1")

        history = client.get("/api/assets/car-1/history").json()
        assert history[0]["record"] is None
        assert history[0]["isDelete"] is True
        assert client.get("/api/assets/car-1").status_code == 404

    def test_unknown_asset_has_empty_history(self, client):
        assert client.get("/api/assets/ghost/history").json() == []


class TestErrorMapping:
    def test_corrupt_record_is_500(self, client, gateway):
        with gateway.ledger.transaction() as ctx:
            ctx.get_stub().put_state("bad", b"{not json")

        resp = client.get("/api/assets")
        assert resp.status_code == 500
        assert resp.json()["detail"].startswith("Failed to get assets: failed to decode asset")

    def test_read_conflict_is_409(self, client, gateway, monkeypatch):
        def conflicting_submit(name, *args):
            raise ReadConflictError("tx-1", "key car-1")

        monkeypatch.setattr(gateway, "submit_transaction", conflicting_submit)
        resp = create(client)
        assert resp.status_code == 409
        assert "MVCC_READ_CONFLICT" in resp.json()["detail"]
