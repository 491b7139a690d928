"""Tests for the ProbeClient."""

from __future__ import annotations

import logging

import httpx
import pytest

from aitest_devops.domain.models import ProbeOutcome
from aitest_devops.probe.client import ProbeClient, ProbeError


def _json(payload, status: int = 200):
    return lambda request: httpx.Response(status, json=payload)


def _text(body: str, status: int = 200):
    return lambda request: httpx.Response(status, text=body)


class TestProbeClientInit:
    def test_init_defaults(self) -> None:
        client = ProbeClient()
        assert client.base_url == "http://localhost:3001"
        assert client._timeout is None
        assert client.port == 3001

    def test_init_strips_trailing_slash(self) -> None:
        client = ProbeClient(base_url="http://10.0.0.5:8080/")
        assert client.base_url == "http://10.0.0.5:8080"
        assert client.port == 8080

    def test_port_falls_back_to_scheme_default(self) -> None:
        assert ProbeClient(base_url="https://api.example.com").port == 443

    @pytest.mark.asyncio
    async def test_probe_without_connect_raises(self) -> None:
        with pytest.raises(ProbeError, match="not connected"):
            await ProbeClient().probe_health()


class TestProbeHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, backend_transport: httpx.ASGITransport) -> None:
        async with ProbeClient(transport=backend_transport) as client:
            result = await client.probe_health()
        assert result.passed
        assert result.status_code == 200
        assert result.payload == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_bad_status_skips_json_parsing(self, make_transport) -> None:
        # A body that would fail to parse must not turn into INVALID_JSON
        transport = make_transport({("GET", "/api/health"): _text("<html>oops</html>", 503)})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_health()
        assert result.outcome is ProbeOutcome.BAD_STATUS
        assert result.status_code == 503
        assert result.status_text == "503 Service Unavailable"
        assert result.payload is None

    @pytest.mark.asyncio
    async def test_invalid_json(self, make_transport) -> None:
        transport = make_transport({("GET", "/api/health"): _text("OK")})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_health()
        assert result.outcome is ProbeOutcome.INVALID_JSON
        assert result.status_ok

    @pytest.mark.asyncio
    async def test_unreachable(self, unreachable_transport: httpx.MockTransport) -> None:
        async with ProbeClient(transport=unreachable_transport) as client:
            result = await client.probe_health()
        assert result.outcome is ProbeOutcome.CONNECTION_ERROR
        assert result.status_code is None
        assert "Connection refused" in result.error
        assert result.status_text == "no response"


class TestProbeAdd:
    @pytest.mark.asyncio
    async def test_sum_matches(self, make_transport) -> None:
        transport = make_transport({("POST", "/api/add"): _json({"sum": 39.8})})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_add(15.5, 24.3, expected_sum=39.8)
        assert result.passed
        assert result.value == 39.8
        assert result.request.payload == {"num1": 15.5, "num2": 24.3}

    @pytest.mark.asyncio
    async def test_sum_compared_exactly(self, make_transport) -> None:
        transport = make_transport({("POST", "/api/add"): _json({"sum": 39.79999})})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_add(15.5, 24.3, expected_sum=39.8)
        assert result.outcome is ProbeOutcome.MISMATCH
        assert result.value == 39.79999

    @pytest.mark.asyncio
    async def test_tolerance_accepts_close_sum(self, make_transport) -> None:
        transport = make_transport({("POST", "/api/add"): _json({"sum": 39.79999})})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_add(15.5, 24.3, expected_sum=39.8, tolerance=1e-4)
        assert result.passed

    @pytest.mark.asyncio
    async def test_integer_sum(self, make_transport) -> None:
        transport = make_transport({("POST", "/api/add"): _json({"sum": 5})})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_add(2, 3, expected_sum=5.0)
        assert result.passed

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["39.8", True, None])
    async def test_non_numeric_sum_mismatches(self, make_transport, value) -> None:
        transport = make_transport({("POST", "/api/add"): _json({"sum": value})})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_add(15.5, 24.3, expected_sum=39.8)
        assert result.outcome is ProbeOutcome.MISMATCH

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tolerance", [0.0, 1e-4])
    async def test_huge_integer_sum_mismatches(self, make_transport, tolerance) -> None:
        huge = 10**400
        transport = make_transport({("POST", "/api/add"): _json({"sum": huge})})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_add(15.5, 24.3, expected_sum=39.8, tolerance=tolerance)
        assert result.outcome is ProbeOutcome.MISMATCH
        assert result.value == huge
        assert result.expected == 39.8

    @pytest.mark.asyncio
    async def test_expectation_logged(self, make_transport, caplog) -> None:
        transport = make_transport({("POST", "/api/add"): _json({"sum": 39.8})})
        with caplog.at_level(logging.DEBUG, logger="aitest_devops.probe.client"):
            async with ProbeClient(transport=transport) as client:
                await client.probe_add(15.5, 24.3, expected_sum=39.8)
        assert "expecting 2xx with numeric field 'sum' equal to 39.8" in caplog.text

    @pytest.mark.asyncio
    async def test_missing_sum(self, make_transport) -> None:
        transport = make_transport({("POST", "/api/add"): _json({"total": 39.8})})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_add(15.5, 24.3, expected_sum=39.8)
        assert result.outcome is ProbeOutcome.MISSING_FIELD

    @pytest.mark.asyncio
    async def test_bad_status(self, make_transport) -> None:
        transport = make_transport({("POST", "/api/add"): _json({"error": "boom"}, 500)})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_add(15.5, 24.3, expected_sum=39.8)
        assert result.outcome is ProbeOutcome.BAD_STATUS
        assert result.status_text == "500 Internal Server Error"

    @pytest.mark.asyncio
    async def test_against_backend(self, backend_transport: httpx.ASGITransport) -> None:
        async with ProbeClient(transport=backend_transport) as client:
            result = await client.probe_add(15.5, 24.3, expected_sum=39.8)
        assert result.passed
        assert result.payload["num1"] == 15.5


class TestProbeErrorHandling:
    @pytest.mark.asyncio
    async def test_backend_rejects_invalid_operand(
        self, backend_transport: httpx.ASGITransport
    ) -> None:
        async with ProbeClient(transport=backend_transport) as client:
            result = await client.probe_error_handling({"num1": "invalid", "num2": 5})
        assert result.passed
        assert result.status_code == 400

    @pytest.mark.asyncio
    async def test_accepting_server_fails(self, make_transport) -> None:
        transport = make_transport({("POST", "/api/add"): _json({"sum": 5})})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_error_handling({"num1": "invalid", "num2": 5})
        assert result.outcome is ProbeOutcome.BAD_STATUS
        assert result.status_code == 200

    @pytest.mark.asyncio
    async def test_other_client_error_fails(self, make_transport) -> None:
        transport = make_transport({("POST", "/api/add"): _json({}, 422)})
        async with ProbeClient(transport=transport) as client:
            result = await client.probe_error_handling({"num1": "invalid", "num2": 5})
        assert not result.passed

    @pytest.mark.asyncio
    async def test_unreachable(self, unreachable_transport: httpx.MockTransport) -> None:
        async with ProbeClient(transport=unreachable_transport) as client:
            result = await client.probe_error_handling({"num1": "invalid", "num2": 5})
        assert result.outcome is ProbeOutcome.CONNECTION_ERROR
