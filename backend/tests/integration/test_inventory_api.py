"""
Integration Tests — Inventory, Inventory Check and Warehouse Endpoints

Tests:
- GET/POST/PUT/DELETE /api/v1/inventory
- Lookups by product and warehouse, low-stock view, reconciliation
- POST/PUT/DELETE /api/v1/inventory-checks
- GET /api/v1/warehouses, revaluation
- Error envelope, request id header, health endpoints
"""
from decimal import Decimal

from fastapi.testclient import TestClient


def _record_payload(**overrides) -> dict:
    payload = {
        "code": "INV-P001-WH1-2024",
        "year": 2024,
        "product_code": "P001",
        "warehouse_code": "WH1",
        "balance_before": 20,
        "current_balance": 20,
        "min_threshold": 5,
    }
    payload.update(overrides)
    return payload


class TestInventoryCRUD:

    def test_create_and_get_inventory(self, client: TestClient, product, warehouse):
        resp = client.post("/api/v1/inventory", json=_record_payload())
        assert resp.status_code == 201
        assert resp.json()["data"]["code"] == "INV-P001-WH1-2024"

        resp = client.get("/api/v1/inventory/INV-P001-WH1-2024")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["current_balance"] == 20
        assert data["is_low_stock"] is False

    def test_taken_code_is_suffixed_and_reported(self, client: TestClient, product, warehouse):
        client.post("/api/v1/inventory", json=_record_payload())
        resp = client.post("/api/v1/inventory", json=_record_payload())
        assert resp.status_code == 201
        body = resp.json()
        assert body["data"]["code"] == "INV-P001-WH1-2024_1"
        assert "INV-P001-WH1-2024_1" in body["message"]

    def test_get_nonexistent_inventory_returns_404_envelope(self, client: TestClient):
        resp = client.get("/api/v1/inventory/INV-404")
        assert resp.status_code == 404
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "NOT_FOUND"
        assert "INV-404" in body["message"]

    def test_missing_required_field_returns_400(self, client: TestClient, product, warehouse):
        payload = _record_payload()
        del payload["year"]
        resp = client.post("/api/v1/inventory", json=payload)
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert "year" in body["message"]

    def test_list_filters_by_year(self, client: TestClient, make_record):
        make_record("INV-2023", 2023, 1)
        make_record("INV-2024", 2024, 1)
        resp = client.get("/api/v1/inventory", params={"year": 2024})
        assert resp.status_code == 200
        page = resp.json()["data"]
        assert page["total"] == 1
        assert page["items"][0]["code"] == "INV-2024"

    def test_by_product_and_by_warehouse(self, client: TestClient, make_record):
        make_record("INV-2024", 2024, 1)
        resp = client.get("/api/v1/inventory/by-product/P001", params={"year": 2024})
        assert [r["code"] for r in resp.json()["data"]] == ["INV-2024"]
        resp = client.get("/api/v1/inventory/by-warehouse/WH1", params={"year": 2024})
        assert [r["code"] for r in resp.json()["data"]] == ["INV-2024"]
        resp = client.get("/api/v1/inventory/by-warehouse/WH1", params={"year": 2001})
        assert resp.status_code == 404

    def test_low_stock_view(self, client: TestClient, product, warehouse, this_year):
        client.post("/api/v1/inventory", json=_record_payload(code="INV-LOW", year=this_year, current_balance=3))
        client.post("/api/v1/inventory", json=_record_payload(code="INV-OK", year=this_year))
        resp = client.get("/api/v1/inventory/low-stock")
        assert [r["code"] for r in resp.json()["data"]] == ["INV-LOW"]

    def test_reconciliation_endpoint(self, client: TestClient, make_record):
        make_record("INV-2024", 2024, 20)
        resp = client.get("/api/v1/inventory/INV-2024/reconciliation")
        assert resp.status_code == 200
        report = resp.json()["data"]
        assert report["balanced"] is True
        assert report["expected_balance"] == 20

    def test_update_and_delete_inventory(self, client: TestClient, product, warehouse):
        client.post("/api/v1/inventory", json=_record_payload())
        resp = client.put("/api/v1/inventory/INV-P001-WH1-2024", json={"min_threshold": 30})
        assert resp.status_code == 200
        assert resp.json()["data"]["is_low_stock"] is True

        assert client.delete("/api/v1/inventory/INV-P001-WH1-2024").status_code == 200
        assert client.get("/api/v1/inventory/INV-P001-WH1-2024").status_code == 404


class TestInventoryCheckEndpoints:

    def test_check_lifecycle(self, client: TestClient, make_record):
        make_record("INV-2024", 2024, 20)
        resp = client.post("/api/v1/inventory-checks", json={
            "code": "IC-001",
            "year": 2024,
            "actual_quantity": 15,
            "check_date": "2024-09-30",
            "product_code": "P001",
            "warehouse_code": "WH1",
            "inventory_code": "INV-2024",
        })
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert (data["system_quantity"], data["variance"]) == (20, -5)

        warehouse = client.get("/api/v1/warehouses/WH1").json()["data"]
        assert warehouse["last_checked_date"] == "2024-09-30"

        resp = client.delete("/api/v1/inventory/INV-2024")
        assert resp.status_code == 400
        assert resp.json()["error"] == "CONFLICT"

        resp = client.put("/api/v1/inventory-checks/IC-001", json={"actual_quantity": 20})
        assert resp.json()["data"]["variance"] == 0

        assert client.delete("/api/v1/inventory-checks/IC-001").status_code == 200
        assert client.delete("/api/v1/inventory/INV-2024").status_code == 200

    def test_checks_by_warehouse(self, client: TestClient, product, warehouse):
        client.post("/api/v1/inventory-checks", json={
            "code": "IC-001", "year": 2024, "actual_quantity": 1,
            "check_date": "2024-01-02", "warehouse_code": "WH1",
        })
        resp = client.get("/api/v1/inventory-checks/by-warehouse/WH1")
        assert [c["code"] for c in resp.json()["data"]] == ["IC-001"]


class TestWarehouseEndpoints:

    def test_list_and_revalue(self, client: TestClient, make_record):
        make_record("INV-2024", 2024, 7)

        resp = client.get("/api/v1/warehouses")
        assert [w["code"] for w in resp.json()["data"]] == ["WH1"]

        resp = client.post("/api/v1/warehouses/WH1/revalue")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert Decimal(str(data["recomputed_stock_value"])) == Decimal("70")
        assert Decimal(str(data["difference"])) == Decimal("70")

    def test_unknown_warehouse_returns_404(self, client: TestClient):
        assert client.get("/api/v1/warehouses/WH404").status_code == 404


class TestApplicationSurface:

    def test_health_endpoints(self, client: TestClient):
        assert client.get("/health").json()["status"] == "healthy"
        assert client.get("/").json()["status"] == "running"

    def test_request_id_is_echoed(self, client: TestClient):
        resp = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    def test_unknown_route_uses_envelope(self, client: TestClient):
        resp = client.get("/api/v1/nowhere")
        assert resp.status_code == 404
        assert resp.json()["success"] is False
