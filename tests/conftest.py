"""Shared test fixtures for the aitest_devops test suite.

Provides a mock backend that speaks the same wire contract as the real
API server, helpers for scripted httpx transports, and default settings
isolated from the developer's environment.
"""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Any, Callable

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from aitest_devops.config.settings import Settings
from aitest_devops.report.printer import Reporter


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Strip variables that would leak into Settings."""
    monkeypatch.delenv("PORT", raising=False)
    for key in list(os.environ):
        if key.startswith("AITEST_DEVOPS_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings() -> Settings:
    """Default settings."""
    return Settings()


@pytest.fixture
def reporter() -> Reporter:
    """A reporter writing to the (captured) stdout."""
    return Reporter()


# ---------------------------------------------------------------------------
# Mock Backend
# ---------------------------------------------------------------------------


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def create_mock_backend() -> FastAPI:
    """A FastAPI app implementing the backend's health and addition routes."""
    app = FastAPI()

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/add")
    async def add(request: Request) -> Any:
        body = await request.json()
        num1, num2 = body.get("num1"), body.get("num2")
        if not _is_number(num1) or not _is_number(num2):
            return JSONResponse(
                status_code=400,
                content={"error": "Both num1 and num2 must be numbers"},
            )
        # Decimal keeps 15.5 + 24.3 at exactly 39.8
        total = float(Decimal(str(num1)) + Decimal(str(num2)))
        return {"num1": num1, "num2": num2, "sum": total}

    return app


@pytest.fixture
def mock_backend() -> FastAPI:
    return create_mock_backend()


@pytest.fixture
def backend_transport(mock_backend: FastAPI) -> httpx.ASGITransport:
    """Transport routing requests into the mock backend in-process."""
    return httpx.ASGITransport(app=mock_backend)


def scripted_transport(
    routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]],
) -> httpx.MockTransport:
    """Build a transport answering ``(method, path)`` from ``routes``."""

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        return route(request)

    return httpx.MockTransport(handler)


@pytest.fixture
def unreachable_transport() -> httpx.MockTransport:
    """Transport that refuses every connection."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def make_transport() -> Callable[..., httpx.MockTransport]:
    """Factory for scripted transports, see ``scripted_transport``."""
    return scripted_transport


@pytest.fixture
def route_probes(monkeypatch: pytest.MonkeyPatch) -> Callable[[httpx.AsyncBaseTransport], None]:
    """Make every ProbeClient built by the handlers use a given transport."""
    from aitest_devops.commands import handlers
    from aitest_devops.probe.client import ProbeClient

    def install(transport: httpx.AsyncBaseTransport) -> None:
        def factory(*args: Any, **kwargs: Any) -> ProbeClient:
            return ProbeClient(*args, transport=transport, **kwargs)

        monkeypatch.setattr(handlers, "ProbeClient", factory)

    return install
