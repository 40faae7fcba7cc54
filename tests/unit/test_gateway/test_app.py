"""Tests for the gateway application: wiring, exception handlers and health."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from core.exceptions import InternalError
from core.security.jwt import TokenService
from services.gateway import prometheus


class TestCreateApp:
    """Test cases for create_app."""

    def test_token_service_on_state(self, app):
        """Test that the token service is built once and kept on app state."""
        assert isinstance(app.state.token_service, TokenService)

    def test_routes_registered(self, app):
        """Test that every gateway route is mounted."""
        paths = {getattr(route, "path", None) for route in app.routes}
        paths |= set(app.openapi()["paths"])

        assert {
            "/api/register",
            "/api/login",
            "/api/refresh",
            "/api/user",
            "/api/api-keys",
            "/api/api-keys/self",
            "/api/api-keys/{key_id}",
            "/api/admin/users",
            "/api/admin/users/{user_id}",
            "/api/services",
            "/api/services/{service_id}",
            "/api/logs",
            "/api/dashboard/stats",
            "/health",
        } <= paths

    def test_health(self, client):
        """Test the health check endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "gateway-service"}

    def test_prometheus_endpoint(self, client):
        """Test that Prometheus metrics are exposed."""
        response = client.get("/metrics/prometheus/")

        assert response.status_code == 200
        assert "gateway_auth_failures_total" in response.text


class TestExceptionHandlers:
    """Test cases for the JSON error rendering."""

    def test_authentication_error_headers(self, client):
        """Test that 401 responses challenge for a bearer token."""
        response = client.get("/api/user")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_authentication_failure_counted(self, client):
        """Test that 401s increment the auth failure counter by reason."""
        counter = prometheus.auth_failures.labels(reason="missing_token")
        before = counter._value.get()

        client.get("/api/user")

        assert counter._value.get() == before + 1

    def test_validation_error_is_400(self, client):
        """Test that request validation errors use the 400 error body."""
        response = client.post("/api/login", json={"username": "x"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert "password" in body["message"]

    def test_unhandled_error_is_500(self, app, account_directory):
        """Test that unexpected errors become a generic 500."""

        async def broken(*args, **kwargs):
            raise RuntimeError("boom")

        account_directory.get_user_by_username = broken
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post("/api/login", json={"username": "x", "password": "y"})

        assert response.status_code == 500
        assert response.json()["error"] == "internal_server_error"

    def test_unhandled_error_is_recorded(self, app, account_directory, test_settings):
        """Test that a request ending in a 500 still gets a request log row."""

        async def broken(*args, **kwargs):
            raise RuntimeError("boom")

        account_directory.get_user_by_username = broken
        test_settings.request_log_enabled = True
        client = TestClient(app, raise_server_exceptions=False)

        with patch(
            "services.gateway.middleware.logging.get_settings", return_value=test_settings
        ), patch(
            "services.gateway.middleware.logging.request_log_store.record",
            new_callable=AsyncMock,
        ) as record:
            response = client.post("/api/login", json={"username": "x", "password": "y"})

        assert response.status_code == 500
        record.assert_awaited_once()
        entry = record.await_args.args[0]
        assert entry.path == "/api/login"
        assert entry.status_code == 500
        assert entry.error == "boom"
        assert entry.request_body is None

    def test_gateway_error_status(self, app, account_directory):
        """Test that gateway errors render with their own status and code."""

        async def failing(*args, **kwargs):
            raise InternalError("Storage unavailable")

        account_directory.get_user_by_username = failing
        client = TestClient(app)

        response = client.post("/api/login", json={"username": "x", "password": "y"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "internal_server_error",
            "message": "Storage unavailable",
        }
