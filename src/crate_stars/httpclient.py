"""Factory for the per-batch ``httpx.AsyncClient``."""

from __future__ import annotations

from collections.abc import Mapping

import httpx


def build_http_client(
    *,
    timeout: float,
    headers: Mapping[str, str],
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build a client for exactly one batch of requests.

    Every request shares the same fixed ``timeout`` (seconds). No retries
    are configured: each item gets a single attempt.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers=dict(headers),
        follow_redirects=True,
        transport=transport,
    )
