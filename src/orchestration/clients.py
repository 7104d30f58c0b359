"""HTTP clients for the two saga hops.

Each call returns a tagged HopResult instead of raising, so the saga can
decide in one place how every failure is reported. A hop fails on:

- timeout: the per-hop budget elapsed
- transport: connection refused, reset, DNS failure, ...
- status: any non-2xx response
- payload: a 2xx response whose body is not the expected JSON object
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from src.core.constants import DEFAULT_HOP_TIMEOUT_SECONDS
from src.core.logging import get_logger
from src.observability.tracing import hop_span, inject_trace_context


logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

HOP_ACQUIRE = "acquire"
HOP_PREDICT = "predict"

REASON_TIMEOUT = "timeout"
REASON_TRANSPORT = "transport"
REASON_STATUS = "status"
REASON_PAYLOAD = "payload"

# Upstream bodies are logged, never returned; keep log lines bounded
MAX_DETAIL_CHARS = 500


# =============================================================================
# Hop Results
# =============================================================================


@dataclass(frozen=True)
class HopSuccess:
    """A hop that returned a 2xx JSON object.

    Attributes:
        hop: Hop name.
        payload: Decoded response body.
        status_code: HTTP status of the response.
    """

    hop: str
    payload: dict[str, Any]
    status_code: int


@dataclass(frozen=True)
class HopFailure:
    """A hop that failed.

    Attributes:
        hop: Hop name.
        reason: One of timeout, transport, status, payload.
        detail: Diagnostic text for logs only.
        status_code: HTTP status, when a response was received.
    """

    hop: str
    reason: str
    detail: str
    status_code: int | None = None


HopResult = HopSuccess | HopFailure


# =============================================================================
# Clients
# =============================================================================


class HopClient:
    """POSTs JSON to one upstream service with a bounded timeout.

    Args:
        base_url: Upstream base URL, e.g. http://predict:3002.
        client: Shared httpx.AsyncClient owned by the app lifespan.
        timeout: Seconds allowed for the whole hop.
    """

    hop = "hop"

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient,
        timeout: float = DEFAULT_HOP_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _post(
        self,
        path: str,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> HopResult:
        url = f"{self.base_url}{path}"

        with hop_span(self.hop, url) as span:
            request_headers = inject_trace_context(dict(headers or {}))
            try:
                # httpx timeouts are per phase; the outer budget covers a slow body
                async with asyncio.timeout(self.timeout):
                    response = await self._client.post(
                        url,
                        json=body,
                        headers=request_headers,
                        timeout=self.timeout,
                    )
            except (httpx.TimeoutException, TimeoutError) as e:
                return HopFailure(self.hop, REASON_TIMEOUT, repr(e))
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                return HopFailure(self.hop, REASON_TRANSPORT, repr(e))

            span.set_attribute("http.status_code", response.status_code)

            if not response.is_success:
                return HopFailure(
                    self.hop,
                    REASON_STATUS,
                    response.text[:MAX_DETAIL_CHARS],
                    status_code=response.status_code,
                )

            try:
                payload = response.json()
            except ValueError as e:
                return HopFailure(
                    self.hop, REASON_PAYLOAD, repr(e), status_code=response.status_code
                )
            if not isinstance(payload, dict):
                return HopFailure(
                    self.hop,
                    REASON_PAYLOAD,
                    f"Expected a JSON object, got {type(payload).__name__}",
                    status_code=response.status_code,
                )

        logger.debug("Hop succeeded", hop=self.hop, status_code=response.status_code)
        return HopSuccess(self.hop, payload, response.status_code)


class AcquireClient(HopClient):
    """Client for the acquisition service's data-production operation."""

    hop = HOP_ACQUIRE

    async def fetch_record(self, headers: dict[str, str] | None = None) -> HopResult:
        """POST /data with no parameters."""
        return await self._post("/data", headers=headers)


class PredictClient(HopClient):
    """Client for the predict service's /predict operation."""

    hop = HOP_PREDICT

    async def predict(
        self,
        features: Sequence[Any],
        meta: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> HopResult:
        """POST /predict with {features, meta}."""
        return await self._post(
            "/predict",
            body={"features": list(features), "meta": meta},
            headers=headers,
        )
