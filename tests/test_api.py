"""Tests for the HTTP API."""

import json
import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes import get_catalog_store
from ndis_invoice.catalog import JsonFileCatalogStore


def _make_body(**overrides):
    body = {
        "invoice_number": "INV-2025-0212-0001",
        "invoice_date": "2025-02-12",
        "start_date": "2025-02-05",
        "end_date": "2025-02-11",
        "client": {"name": "Jane Citizen", "ndis_number": "430000001"},
        "default_schedule": {"daytime_hours": 8},
        "travel_km_per_day": 27.5,
    }
    body.update(overrides)
    return body


@pytest.fixture
def client():
    app.dependency_overrides[get_catalog_store] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestMeta:
    def test_root(self, client):
        data = client.get("/").json()
        assert data["name"] == "NDIS Invoice API"
        assert data["health"] == "/api/v1/health"

    def test_health(self, client):
        assert client.get("/api/v1/health").json() == {"status": "ok"}


class TestCatalogEndpoints:
    def test_default_catalog(self, client):
        response = client.get("/api/v1/catalog")
        assert response.status_code == 200
        categories = {e["category"] for e in response.json()}
        assert "weekday" in categories
        assert "travel" in categories

    def test_corrupt_catalog_is_503(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("not json")
        app.dependency_overrides[get_catalog_store] = lambda: JsonFileCatalogStore(path)
        try:
            response = TestClient(app).get("/api/v1/catalog")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 503

    def test_validate_ok(self, client):
        body = [{"id": "a", "category": "weekday", "code": "C1", "description": "Weekday", "rate": 60}]
        assert client.post("/api/v1/catalog/validate", json=body).json() == {"valid": True, "errors": []}

    def test_validate_duplicates(self, client):
        body = [
            {"id": "a", "category": "weekday", "code": "C1", "description": "A", "rate": 60},
            {"id": "b", "category": "weekday", "code": "C1", "description": "B", "rate": 60},
        ]
        data = client.post("/api/v1/catalog/validate", json=body).json()
        assert data["valid"] is False
        assert data["errors"][0]["entry_id"] == "b"
        assert "Duplicate code" in data["errors"][0]["message"]


class TestInvoiceEndpoint:
    def test_standard_week(self, client):
        data = client.post("/api/v1/invoice", json=_make_body()).json()
        assert data["success"] is True
        assert data["summary"]["subtotal"] == 4636.18
        assert data["summary"]["total_km"] == 192.5
        assert [li["category"] for li in data["line_items"]] == ["weekday", "saturday", "sunday", "travel"]
        assert data["validation"]["is_valid"] is True
        assert data["audit"]["invoice_number"] == "INV-2025-0212-0001"

    def test_randomized_travel_still_valid(self, client):
        data = client.post("/api/v1/invoice", json=_make_body(randomize_travel=True)).json()
        assert data["success"] is True
        travel = next(li for li in data["audit"]["line_items"] if li["category"] == "travel")
        assert round(sum(d["km"] for d in travel["daily_breakdown"]), 6) == 192.5
        assert data["validation"]["is_valid"] is True

    def test_incomplete_client(self, client):
        data = client.post("/api/v1/invoice", json=_make_body(client={"name": "Jane"})).json()
        assert data["success"] is False
        assert data["error_type"] == "client_error"
        assert "ndis_number" in data["errors"][0]

    def test_invalid_range(self, client):
        data = client.post("/api/v1/invoice", json=_make_body(start_date="2025-02-11", end_date="2025-02-05")).json()
        assert data["success"] is False
        assert data["error_type"] == "range_error"

    def test_negative_hours_rejected(self, client):
        body = _make_body(default_schedule={"daytime_hours": -1})
        assert client.post("/api/v1/invoice", json=body).status_code == 422

    def test_catalog_error(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"not": "a list"}))
        app.dependency_overrides[get_catalog_store] = lambda: JsonFileCatalogStore(path)
        try:
            data = TestClient(app).post("/api/v1/invoice", json=_make_body()).json()
        finally:
            app.dependency_overrides.clear()
        assert data["success"] is False
        assert data["error_type"] == "catalog_error"
