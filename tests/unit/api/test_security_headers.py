"""
Name: Security Headers Tests

Responsibilities:
  - Validate OWASP headers on every response
  - Validate CSP is relaxed outside production and strict in production
  - Validate no-store caching on API paths and HSTS only over HTTPS in production
"""

import pytest
from app.api.main import app as main_app
from app.crosscutting.security import SecurityHeadersMiddleware
from fastapi import FastAPI
from fastapi.testclient import TestClient

pytestmark = pytest.mark.unit


def _build_app(*, is_production: bool) -> FastAPI:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, is_production=is_production)

    @app.get("/healthz")
    def _healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/v1/documents")
    def _documents() -> dict[str, list]:
        return {"documents": []}

    return app


def test_csp_header_present_in_test_env() -> None:
    res = TestClient(main_app).get("/healthz")

    csp = res.headers.get("Content-Security-Policy")
    assert csp is not None
    assert "unsafe-inline" in csp
    assert res.headers["X-Frame-Options"] == "DENY"
    assert res.headers["X-Content-Type-Options"] == "nosniff"


def test_csp_header_strict_in_production() -> None:
    res = TestClient(_build_app(is_production=True)).get("/healthz")

    assert "unsafe-inline" not in res.headers["Content-Security-Policy"]


def test_api_paths_are_not_cached() -> None:
    client = TestClient(_build_app(is_production=False))

    assert client.get("/v1/documents").headers["Cache-Control"] == "no-store"
    assert "Cache-Control" not in client.get("/healthz").headers


def test_hsts_only_behind_https_in_production() -> None:
    client = TestClient(_build_app(is_production=True))

    plain = client.get("/healthz")
    forwarded = client.get("/healthz", headers={"X-Forwarded-Proto": "https"})

    assert "Strict-Transport-Security" not in plain.headers
    assert forwarded.headers["Strict-Transport-Security"].startswith("max-age=")
