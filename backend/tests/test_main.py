"""
HTTP surface tests: status mapping and the catalogue endpoints.
"""

import json

import pytest
from fastapi.testclient import TestClient

import main


@pytest.fixture
def client(service, monkeypatch):
    monkeypatch.setattr(main, "validation_service", service)
    return TestClient(main.app)


class TestValidationEndpoints:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_valid_order_returns_200(self, client, order_payload):
        response = client.post("/api/validation/order", content=json.dumps(order_payload))

        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is True
        assert body["finalOutput"]["orderId"] == "ORD-123456"

    def test_invalid_order_returns_400_with_body(self, client):
        response = client.post("/api/validation/order", content="not an order")

        assert response.status_code == 400
        body = response.json()
        assert body["valid"] is False
        assert body["errors"][0]["field"] == "parsing"
        assert body["finalOutput"] is None

    def test_repaired_json(self, client):
        response = client.post("/api/validation/json", content="{'a': 1, 'b': 2,}")

        assert response.status_code == 200
        body = response.json()
        assert body["finalOutput"] == {"a": 1, "b": 2}
        assert body["recoveryAttempts"][0]["strategy"] == "fix_json_syntax"

    def test_structural_error_returns_400(self, client):
        response = client.post("/api/validation/json", content='{"field name": 1}')

        assert response.status_code == 400
        assert response.json()["errors"][0]["constraint"] == "no_spaces_in_field_names"


class TestCatalogueEndpoints:
    def test_strategies(self, client):
        body = client.get("/api/validation/strategies").json()
        assert "fix_json_syntax" in body["recovery_strategies"]["parsing_recovery"]
        assert "fix_future_date" in body["recovery_strategies"]["validation_recovery"]

    def test_examples_use_live_repairs(self, client):
        body = client.get("/api/validation/examples").json()

        assert body["format_errors"]["invalid_order_id"]["fixed"] == "ORD-000123"
        assert body["format_errors"]["invalid_email"]["fixed"] == "john.doe@example.com"
        assert json.loads(body["json_errors"]["trailing_comma"]["fixed"]) == {"a": 1, "b": 2}
        assert json.loads(body["json_errors"]["unquoted_keys"]["fixed"]) == {"name": "value"}
        assert body["recovery_examples"]["extracted_json"]["extracted"] == '{"id": "ORD-123456", "total": 100}'
