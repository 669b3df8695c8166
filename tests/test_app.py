"""
Tests for application wiring: health, metrics, request ids and error mapping.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from order_service.app import app, classify_exception
from order_service.database import get_db
from order_service.domain.exceptions import (ConflictException,
                                             InsufficientStockException,
                                             OrderServiceException,
                                             ProductNotFoundException,
                                             ReferenceNotFoundException,
                                             StorageException,
                                             ValidationException)


class TestHealthEndpoints:
    """Test liveness and readiness"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "order-service"

    def test_ready(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["ready"] is True
        assert data["checks"]["database"] == "healthy"

    def test_not_ready_when_database_down(self, client):
        broken = MagicMock()
        broken.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
        app.dependency_overrides[get_db] = lambda: broken

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["database"] == "unavailable"

    def test_root(self, client):
        data = client.get("/").json()

        assert data["status"] == "operational"
        assert data["health"] == "/health"


class TestMiddleware:
    """Test request id propagation and metrics"""

    def test_request_id_generated(self, client):
        response = client.get("/health")
        assert response.headers["X-Request-ID"].startswith("req-")

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_metrics_exposed(self, client):
        client.get("/health")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "order_http_requests_total" in response.text
        assert "orders_placed_total" in response.text


class TestErrorMapping:
    """Test domain exception to HTTP status mapping"""

    @pytest.mark.parametrize(
        "exc,expected",
        [
            (ValidationException("quantity", 0, "too small"), (400, "validation_error")),
            (InsufficientStockException.for_product("p1", 3, 2), (400, "insufficient_stock")),
            (ConflictException("user"), (400, "conflict")),
            (ProductNotFoundException("p1"), (404, "not_found")),
            (ReferenceNotFoundException(), (404, "not_found")),
            (StorageException("transaction"), (500, "storage_error")),
            (OrderServiceException("unexpected"), (500, "internal_server_error")),
        ],
    )
    def test_classify_exception(self, exc, expected):
        assert classify_exception(exc) == expected

    def test_malformed_json_is_client_error(self, client):
        response = client.post(
            "/orders", content="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestPrometheusMiddleware:
    """Requests are tracked even when the route raises."""

    def build_app(self, track):
        from fastapi import FastAPI
        from order_service.metrics_middleware import PrometheusMiddleware

        failing_app = FastAPI()
        failing_app.add_middleware(PrometheusMiddleware, track_func=track)

        @failing_app.get("/items/{item_id}")
        async def broken(item_id: str):
            raise RuntimeError("boom")

        return failing_app

    def test_unhandled_exception_tracked_as_server_error(self):
        from fastapi.testclient import TestClient

        track = MagicMock()
        with TestClient(self.build_app(track), raise_server_exceptions=False) as test_client:
            response = test_client.get("/items/42")

        assert response.status_code == 500
        track.assert_called_once()
        kwargs = track.call_args.kwargs
        assert kwargs["status_code"] == 500
        assert kwargs["endpoint"] == "/items/{item_id}"
        assert kwargs["method"] == "GET"
