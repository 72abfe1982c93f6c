"""
Integration Tests — Stock Movement Endpoints

Tests:
- POST/GET/PUT/DELETE /api/v1/stock-in
- POST/GET/PUT/DELETE /api/v1/stock-out
- Lookups by collaborator code
- Ledger effects visible through /api/v1/inventory
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from stockledger.config import settings


def _inventory(client: TestClient, code: str) -> dict:
    resp = client.get(f"/api/v1/inventory/{code}")
    assert resp.status_code == 200
    return resp.json()["data"]


@pytest.fixture()
def stock_in_payload(product, warehouse, supplier):
    return {
        "code": "SI-001",
        "product_code": "P001",
        "received_date": "2024-03-15",
        "quantity": 40,
        "warehouse_code": "WH1",
        "supplier_code": "SUP1",
    }


class TestStockInEndpoints:

    def test_create_stock_in_posts_to_inventory(self, client: TestClient, stock_in_payload):
        resp = client.post("/api/v1/stock-in", json=stock_in_payload)
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["inventory_code"] == "INV-P001-WH1-2024"
        assert body["data"]["seq"] == 1

        record = _inventory(client, "INV-P001-WH1-2024")
        assert record["total_in"] == 40
        assert record["current_balance"] == 40

    def test_duplicate_code_returns_conflict_envelope(self, client: TestClient, stock_in_payload):
        client.post("/api/v1/stock-in", json=stock_in_payload)
        resp = client.post("/api/v1/stock-in", json=stock_in_payload)
        assert resp.status_code == settings.CONFLICT_HTTP_STATUS
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "CONFLICT"
        assert _inventory(client, "INV-P001-WH1-2024")["current_balance"] == 40

    def test_unknown_supplier_is_rejected(self, client: TestClient, stock_in_payload):
        stock_in_payload["supplier_code"] = "SUP-404"
        resp = client.post("/api/v1/stock-in", json=stock_in_payload)
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"
        assert "SUP-404" in resp.json()["message"]

    def test_zero_quantity_fails_validation(self, client: TestClient, stock_in_payload):
        stock_in_payload["quantity"] = 0
        resp = client.post("/api/v1/stock-in", json=stock_in_payload)
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_list_and_lookup_stock_ins(self, client: TestClient, stock_in_payload):
        client.post("/api/v1/stock-in", json=stock_in_payload)
        client.post("/api/v1/stock-in", json={**stock_in_payload, "code": "SI-002", "quantity": 5})

        resp = client.get("/api/v1/stock-in", params={"sort_by": "seq", "sort_dir": "asc"})
        assert resp.status_code == 200
        page = resp.json()["data"]
        assert page["total"] == 2
        assert [row["code"] for row in page["items"]] == ["SI-001", "SI-002"]

        resp = client.get("/api/v1/stock-in/by-supplier/SUP1")
        assert len(resp.json()["data"]) == 2

    def test_unknown_lookup_returns_400(self, client: TestClient):
        resp = client.get("/api/v1/stock-in/by-colour/red")
        assert resp.status_code == 400

    def test_update_and_delete_stock_in(self, client: TestClient, stock_in_payload):
        client.post("/api/v1/stock-in", json=stock_in_payload)

        resp = client.put("/api/v1/stock-in/SI-001", json={"quantity": 25})
        assert resp.status_code == 200
        assert _inventory(client, "INV-P001-WH1-2024")["current_balance"] == 25

        resp = client.delete("/api/v1/stock-in/SI-001")
        assert resp.status_code == 200
        assert _inventory(client, "INV-P001-WH1-2024")["current_balance"] == 0
        assert client.get("/api/v1/stock-in/SI-001").status_code == 404


class TestStockOutEndpoints:

    def test_stock_out_allocates_and_reports_allocations(self, client: TestClient, make_record):
        make_record("INV-2023", 2023, 5)
        make_record("INV-2024", 2024, 20)

        resp = client.post("/api/v1/stock-out", json={
            "code": "SO-001",
            "product_code": "P001",
            "issued_date": "2024-06-01",
            "quantity": 23,
            "warehouse_code": "WH1",
        })
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["allocated_quantity"] == 23
        assert data["unallocated_quantity"] == 0
        assert [(a["inventory_code"], a["quantity"]) for a in data["allocations"]] == [
            ("INV-2024", 20),
            ("INV-2023", 3),
        ]
        assert _inventory(client, "INV-2023")["current_balance"] == 2

    def test_shortfall_is_accepted_with_a_warning_message(self, client: TestClient, make_record):
        make_record("INV-2024", 2024, 4)
        resp = client.post("/api/v1/stock-out", json={
            "code": "SO-001",
            "product_code": "P001",
            "issued_date": "2024-06-01",
            "quantity": 10,
            "warehouse_code": "WH1",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["data"]["unallocated_quantity"] == 6
        assert "6 of 10" in body["message"]

    def test_shortfall_rejected_under_reject_policy(self, client: TestClient, make_record, monkeypatch):
        monkeypatch.setattr(settings, "STOCK_OUT_INSUFFICIENT_POLICY", "reject")
        make_record("INV-2024", 2024, 4)
        resp = client.post("/api/v1/stock-out", json={
            "code": "SO-001",
            "product_code": "P001",
            "issued_date": "2024-06-01",
            "quantity": 10,
            "warehouse_code": "WH1",
        })
        assert resp.status_code == 400
        assert client.get("/api/v1/stock-out/SO-001").status_code == 404
        assert _inventory(client, "INV-2024")["current_balance"] == 4

    def test_delete_stock_out_restores_balances(self, client: TestClient, make_record):
        make_record("INV-2023", 2023, 5)
        make_record("INV-2024", 2024, 20)
        client.post("/api/v1/stock-out", json={
            "code": "SO-001",
            "product_code": "P001",
            "issued_date": "2024-06-01",
            "quantity": 23,
            "warehouse_code": "WH1",
        })

        resp = client.delete("/api/v1/stock-out/SO-001")
        assert resp.status_code == 200
        assert _inventory(client, "INV-2023")["current_balance"] == 5
        assert _inventory(client, "INV-2024")["current_balance"] == 20

    def test_warehouse_rollups_after_round_trip(self, client: TestClient, product, warehouse):
        client.post("/api/v1/stock-in", json={
            "code": "SI-001", "product_code": "P001", "received_date": "2024-03-15",
            "quantity": 10, "warehouse_code": "WH1",
        })
        client.post("/api/v1/stock-out", json={
            "code": "SO-001", "product_code": "P001", "issued_date": "2024-04-01",
            "quantity": 3, "warehouse_code": "WH1",
        })

        data = client.get("/api/v1/warehouses/WH1").json()["data"]
        assert Decimal(str(data["total_value_in"])) == Decimal("100")
        assert Decimal(str(data["total_value_out"])) == Decimal("30")
        assert Decimal(str(data["total_stock_value"])) == Decimal("70")
