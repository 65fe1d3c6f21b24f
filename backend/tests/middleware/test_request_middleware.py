"""
Request Middleware Unit Tests
=============================

Tests for middleware components including:
- RequestContextMiddleware
- SecurityHeadersMiddleware
- LoginRateLimitMiddleware
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import settings
from app.middleware.request_middleware import (
    LoginRateLimitMiddleware,
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)


pytestmark = pytest.mark.unit


def _app(max_requests: int = 2) -> FastAPI:
    app = FastAPI()

    @app.post("/auth/login")
    def login():
        return {"ok": True}

    @app.get("/ping")
    def ping():
        return {"ok": True}

    app.add_middleware(LoginRateLimitMiddleware, max_requests=max_requests)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)
    return app


class TestRequestContext:

    def test_request_id_generated(self):
        response = TestClient(_app()).get("/ping")

        assert response.headers["X-Request-ID"]
        assert float(response.headers["X-Process-Time"]) >= 0

    def test_incoming_request_id_echoed(self):
        response = TestClient(_app()).get("/ping", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"


class TestSecurityHeaders:

    def test_headers_present(self):
        response = TestClient(_app()).get("/ping")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Content-Security-Policy"] == "default-src 'self'; frame-ancestors 'none';"
        assert "Strict-Transport-Security" not in response.headers


class TestLoginRateLimit:

    def test_limit_exceeded(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        client = TestClient(_app(max_requests=2))

        statuses = [client.post("/auth/login").status_code for _ in range(3)]

        assert statuses == [200, 200, 429]

    def test_retry_after_header(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        client = TestClient(_app(max_requests=1))
        client.post("/auth/login")

        response = client.post("/auth/login")

        assert response.headers["Retry-After"] == "60"
        assert response.json()["details"]["retry_after_seconds"] == 60

    def test_other_paths_not_limited(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        client = TestClient(_app(max_requests=1))

        statuses = [client.get("/ping").status_code for _ in range(3)]

        assert statuses == [200, 200, 200]

    def test_disabled(self):
        client = TestClient(_app(max_requests=1))

        statuses = [client.post("/auth/login").status_code for _ in range(3)]

        assert statuses == [200, 200, 200]
