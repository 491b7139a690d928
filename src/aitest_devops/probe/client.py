"""HTTP probe client for the backend API.

Issues single GET/POST requests against the backend and judges the
responses. Transport failures, unexpected status codes and malformed
bodies are returned as ProbeResult values, never raised.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from aitest_devops.domain.models import ProbeOutcome, ProbeRequest, ProbeResult

logger = logging.getLogger(__name__)

HEALTH_PATH = "/api/health"
ADD_PATH = "/api/add"


class ProbeError(Exception):
    """Raised when the probe client is used incorrectly."""


class ProbeClient:
    """Probes the backend API with one blocking round trip per call.

    Example usage::

        async with ProbeClient(base_url="http://localhost:3001") as client:
            result = await client.probe_health()
            if result.passed:
                print(result.payload)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def port(self) -> int | None:
        """Port the backend is expected on, derived from the base URL."""
        try:
            url = httpx.URL(self._base_url)
        except httpx.InvalidURL:
            return None
        if url.port is not None:
            return url.port
        return {"http": 80, "https": 443}.get(url.scheme)

    async def connect(self) -> None:
        """Create the HTTP client. No request is made."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.debug("Probe client ready for %s", self._base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ProbeClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()

    async def probe_health(self) -> ProbeResult:
        """GET the health endpoint and parse its JSON body."""
        request = ProbeRequest(
            method="GET",
            path=HEALTH_PATH,
            expectation="2xx with a JSON body",
        )
        response, result = await self._send(request)
        if result is not None:
            return result

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.info("Health endpoint answered %s with a non-JSON body", response.status_code)
            return self._result(request, response, ProbeOutcome.INVALID_JSON)
        return self._result(request, response, ProbeOutcome.OK, payload=payload)

    async def probe_add(
        self,
        num1: float,
        num2: float,
        expected_sum: float,
        tolerance: float = 0.0,
    ) -> ProbeResult:
        """POST two operands and compare the returned ``sum``.

        With the default tolerance of 0.0 the comparison is exact float
        equality.
        """
        request = ProbeRequest(
            method="POST",
            path=ADD_PATH,
            payload={"num1": num1, "num2": num2},
            expectation=f"2xx with numeric field 'sum' equal to {expected_sum}",
        )
        response, result = await self._send(request)
        if result is not None:
            return result

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return self._result(request, response, ProbeOutcome.INVALID_JSON, expected=expected_sum)

        if not isinstance(payload, dict) or "sum" not in payload:
            return self._result(
                request, response, ProbeOutcome.MISSING_FIELD, payload=payload, expected=expected_sum
            )

        value = payload["sum"]
        outcome = (
            ProbeOutcome.OK
            if _matches(value, expected_sum, tolerance)
            else ProbeOutcome.MISMATCH
        )
        logger.debug("Sum %r vs expected %r: %s", value, expected_sum, outcome.value)
        return self._result(
            request, response, outcome, payload=payload, value=value, expected=expected_sum
        )

    async def probe_error_handling(self, payload: dict[str, Any]) -> ProbeResult:
        """POST a malformed payload; the backend must reject it with 400."""
        request = ProbeRequest(
            method="POST",
            path=ADD_PATH,
            payload=payload,
            expectation="status exactly 400",
        )
        response, result = await self._send(request, require_success=False)
        if result is not None:
            return result

        outcome = ProbeOutcome.OK if response.status_code == 400 else ProbeOutcome.BAD_STATUS
        return self._result(request, response, outcome)

    async def _send(
        self, request: ProbeRequest, require_success: bool = True
    ) -> tuple[httpx.Response | None, ProbeResult | None]:
        """Perform the round trip.

        Returns the response, or a finished ProbeResult when the probe
        already failed on transport or status.
        """
        if self._client is None:
            raise ProbeError("Probe client is not connected")

        logger.debug(
            "%s %s%s (expecting %s)",
            request.method, self._base_url, request.path, request.expectation,
        )
        try:
            if request.method == "GET":
                response = await self._client.get(request.path)
            else:
                response = await self._client.post(request.path, json=request.payload)
        except httpx.HTTPError as e:
            logger.info("%s %s failed: %s", request.method, request.path, e)
            return None, ProbeResult(
                request=request,
                outcome=ProbeOutcome.CONNECTION_ERROR,
                error=str(e) or type(e).__name__,
            )

        logger.debug("%s %s -> %s", request.method, request.path, response.status_code)
        if require_success and not response.is_success:
            return response, self._result(request, response, ProbeOutcome.BAD_STATUS)
        return response, None

    @staticmethod
    def _result(
        request: ProbeRequest,
        response: httpx.Response,
        outcome: ProbeOutcome,
        **fields: Any,
    ) -> ProbeResult:
        return ProbeResult(
            request=request,
            outcome=outcome,
            status_code=response.status_code,
            reason=response.reason_phrase,
            **fields,
        )


def _matches(value: Any, expected: float, tolerance: float) -> bool:
    """Compare a JSON value against the expected number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if tolerance == 0.0:
        # int and float compare exactly, without converting huge ints
        return value == expected
    try:
        return abs(value - expected) <= tolerance
    except OverflowError:
        return False
