"""Model artifact retrieval.

The artifact is resolved once at load time. HTTP(S) locations are fetched
with httpx (by default the predict service's own /model mount); anything
else is read as a filesystem path.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from urllib.parse import urlparse

import httpx

from src.core.constants import (
    DEFAULT_ARTIFACT_CONNECT_RETRIES,
    DEFAULT_ARTIFACT_TIMEOUT_SECONDS,
)
from src.core.exceptions import FatalLoadError


HTTP_SCHEMES = frozenset({"http", "https"})


def is_remote(location: str) -> bool:
    """Whether a location must be fetched over HTTP."""
    return urlparse(location).scheme in HTTP_SCHEMES


async def fetch_artifact(
    location: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_ARTIFACT_TIMEOUT_SECONDS,
    connect_retries: int = DEFAULT_ARTIFACT_CONNECT_RETRIES,
) -> bytes:
    """Read artifact bytes from a URL or a local path.

    Args:
        location: http(s) URL, file:// URL or filesystem path.
        client: Client to use for remote locations; a short-lived one is
            created otherwise.
        timeout: Request timeout in seconds.
        connect_retries: Connection attempts made by the transport. Only
            connection establishment is retried, never a served response.

    Returns:
        Raw artifact bytes.

    Raises:
        FatalLoadError: If the artifact is missing or cannot be fetched.
    """
    if not is_remote(location):
        parsed = urlparse(location)
        path = Path(parsed.path if parsed.scheme == "file" else location)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise FatalLoadError(
                f"Model artifact not readable: {path} ({e})",
                artifact_location=location,
            ) from e

    try:
        if client is not None:
            response = await client.get(location, timeout=timeout)
        else:
            transport = httpx.AsyncHTTPTransport(retries=connect_retries)
            async with httpx.AsyncClient(transport=transport, timeout=timeout) as owned:
                response = await owned.get(location)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FatalLoadError(
            f"Model artifact request returned {e.response.status_code}",
            artifact_location=location,
        ) from e
    except httpx.HTTPError as e:
        raise FatalLoadError(
            f"Model artifact fetch failed: {e!r}",
            artifact_location=location,
        ) from e

    return response.content
