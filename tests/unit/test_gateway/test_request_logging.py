"""Tests for the request logging middleware."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from core.config.settings import Settings
from core.security.jwt import TokenService
from fixtures import TEST_SECRET_KEY, TEST_USER_ID, make_user
from services.gateway import prometheus
from services.gateway.middleware.logging import REDACTED, log_requests, redact_headers


@pytest.fixture
def logging_settings() -> Settings:
    return Settings(jwt_secret_key=TEST_SECRET_KEY, request_log_enabled=True)


@pytest.fixture
def mock_record(logging_settings):
    with patch(
        "services.gateway.middleware.logging.get_settings", return_value=logging_settings
    ), patch(
        "services.gateway.middleware.logging.request_log_store.record",
        new_callable=AsyncMock,
    ) as mock:
        yield mock


@pytest.fixture
def logged_client() -> TestClient:
    app = FastAPI()
    app.state.token_service = TokenService(secret_key=TEST_SECRET_KEY)

    @app.middleware("http")
    async def log_requests_middleware(request: Request, call_next):
        return await log_requests(request, call_next)

    @app.post("/api/echo")
    async def echo(payload: dict):
        return {"echo": payload}

    @app.post("/api/login")
    async def login(payload: dict):
        return {"accessToken": "secret-token"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/api/broken")
    async def broken():
        raise RuntimeError("database exploded")

    return TestClient(app)


class TestLogRequests:
    """Test cases for log_requests."""

    def test_records_api_request(self, logged_client, mock_record):
        """Test that an API request is persisted with bodies and timing."""
        response = logged_client.post(
            "/api/echo", json={"a": 1}, headers={"User-Agent": "pytest"}
        )

        assert response.status_code == 200
        assert response.json() == {"echo": {"a": 1}}
        entry = mock_record.await_args.args[0]
        assert entry.method == "POST"
        assert entry.path == "/api/echo"
        assert entry.status_code == 200
        assert entry.response_time >= 0
        assert json.loads(entry.request_body) == {"a": 1}
        assert json.loads(entry.response_body) == {"echo": {"a": 1}}
        assert entry.user_agent == "pytest"
        assert entry.user_id is None

    def test_sensitive_bodies_not_stored(self, logged_client, mock_record):
        """Test that credential-carrying bodies are never persisted."""
        response = logged_client.post(
            "/api/login", json={"username": "u", "password": "hunter2"}
        )

        assert response.json() == {"accessToken": "secret-token"}
        entry = mock_record.await_args.args[0]
        assert entry.request_body is None
        assert entry.response_body is None

    def test_credentials_redacted(self, logged_client, mock_record):
        """Test that credential headers are masked and the user is attributed."""
        token = TokenService(secret_key=TEST_SECRET_KEY).issue_access_token(make_user())

        logged_client.post(
            "/api/echo",
            json={},
            headers={"Authorization": f"Bearer {token}", "X-API-Key": "sk_live_secret"},
        )

        entry = mock_record.await_args.args[0]
        assert entry.request_headers["authorization"] == REDACTED
        assert entry.request_headers["x-api-key"] == REDACTED
        assert token not in str(entry.request_headers)
        assert entry.user_id == TEST_USER_ID

    def test_non_api_paths_not_recorded(self, logged_client, mock_record):
        """Test that only /api/ requests are persisted."""
        assert logged_client.get("/health").status_code == 200

        mock_record.assert_not_awaited()

    def test_store_failure_does_not_fail_request(self, logged_client, mock_record):
        """Test that a persistence error leaves the response intact."""
        mock_record.side_effect = RuntimeError("database down")

        response = logged_client.post("/api/echo", json={"a": 1})

        assert response.status_code == 200

    def test_unhandled_error_recorded(self, logged_client, mock_record):
        """Test that a request failing with an unhandled error still gets a log row."""
        client = TestClient(logged_client.app, raise_server_exceptions=False)
        counter = prometheus.total_requests.labels(method="GET", status="500")
        before = counter._value.get()

        response = client.get("/api/broken")

        assert response.status_code == 500
        mock_record.assert_awaited_once()
        entry = mock_record.await_args.args[0]
        assert entry.path == "/api/broken"
        assert entry.status_code == 500
        assert entry.error == "database exploded"
        assert entry.response_body is None
        assert counter._value.get() == before + 1

    def test_disabled(self, logged_client, logging_settings, mock_record):
        """Test that persistence can be switched off."""
        logging_settings.request_log_enabled = False

        logged_client.post("/api/echo", json={"a": 1})

        mock_record.assert_not_awaited()


def test_redact_headers():
    """Test that only credential headers are masked."""
    headers = {"Authorization": "Bearer x", "Cookie": "s=1", "Accept": "application/json"}

    assert redact_headers(headers) == {
        "Authorization": REDACTED,
        "Cookie": REDACTED,
        "Accept": "application/json",
    }
