"""HTTP client for the crates.io registry API.

API docs: https://crates.io/data-access
Base URL: https://crates.io/api/v1

crates.io rejects requests without a descriptive ``User-Agent``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import quote as urlquote

import httpx

from crate_stars.config import Settings
from crate_stars.errors import CrateStarsError, RegistryError
from crate_stars.httpclient import build_http_client
from crate_stars.models import BatchResult, CrateMetadata
from crate_stars.registry.base import RegistryClientPort

logger = logging.getLogger(__name__)

_BASE_URL = "https://crates.io/api/v1"


@dataclass
class CratesIoClient:
    """Async client for the crates.io API."""

    http: httpx.AsyncClient
    base_url: str = _BASE_URL

    async def get_crate(self, name: str) -> CrateMetadata:
        """Fetch metadata for one crate.

        Raises:
            RegistryError: On network errors, unknown crates, or a response
                that does not look like a crate record.
        """
        url = f"{self.base_url.rstrip('/')}/crates/{urlquote(name, safe='')}"
        try:
            response = await self.http.get(url)
            if response.status_code == 404:
                raise RegistryError(name, "crate not found")
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RegistryError(name, exc) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise RegistryError(name, f"malformed response: {exc}") from exc

        return self._parse_crate(name, data)

    async def fetch_each(self, names: Iterable[str]) -> BatchResult[CrateMetadata]:
        """Look up every crate concurrently and report per-name status.

        Names are deduplicated and sorted so the order of ``failed`` does
        not depend on set iteration order.
        """
        ordered = sorted(set(names))
        if not ordered:
            return BatchResult()

        logger.debug("Fetching %d crates from %s", len(ordered), self.base_url)
        results = await asyncio.gather(
            *(self.get_crate(name) for name in ordered),
            return_exceptions=True,
        )

        succeeded: list[CrateMetadata] = []
        failed: list[CrateStarsError] = []
        for name, result in zip(ordered, results, strict=True):
            if isinstance(result, RegistryError):
                failed.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                logger.debug("Fetched crate %s (repository=%s)", name, result.repository_url)
                succeeded.append(result)

        return BatchResult(succeeded=succeeded, failed=failed)

    async def fetch_all(self, names: Iterable[str]) -> list[CrateMetadata]:
        """Look up every crate concurrently; any failed lookup fails the batch.

        All requests run to completion before the first failure is raised.
        """
        batch = await self.fetch_each(names)
        if batch.first_error is not None:
            raise batch.first_error
        return batch.succeeded

    # ── Parsing helpers ──────────────────────────────────────────

    @staticmethod
    def _parse_crate(name: str, data: object) -> CrateMetadata:
        """Parse a ``{"crate": {...}}`` response body."""
        crate = data.get("crate") if isinstance(data, dict) else None
        if not isinstance(crate, dict):
            raise RegistryError(name, "malformed response: missing 'crate' object")

        repository = crate.get("repository") or None
        downloads = crate.get("downloads")
        return CrateMetadata(
            name=crate.get("name") or name,
            repository_url=repository.strip() if isinstance(repository, str) else None,
            description=(crate.get("description") or "").strip(),
            homepage=crate.get("homepage") or None,
            max_version=crate.get("max_stable_version") or crate.get("max_version") or "",
            downloads=downloads if isinstance(downloads, int) else 0,
        )


def _registry_headers(settings: Settings) -> dict[str, str]:
    return {"User-Agent": settings.user_agent, "Accept": "application/json"}


async def fetch_each(
    names: Iterable[str],
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BatchResult[CrateMetadata]:
    """Fetch crates with a fresh client that lives for this batch only."""
    settings = settings or Settings()
    names = set(names)
    if not names:
        return BatchResult()

    async with build_http_client(
        timeout=settings.registry_timeout,
        headers=_registry_headers(settings),
        transport=transport,
    ) as http:
        client: RegistryClientPort = CratesIoClient(http, base_url=settings.registry_url)
        return await client.fetch_each(names)


async def fetch_all(
    names: Iterable[str],
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[CrateMetadata]:
    """All-or-nothing variant of :func:`fetch_each`.

    Raises:
        RegistryError: The first failed lookup, after every request finished.
    """
    batch = await fetch_each(names, settings, transport=transport)
    if batch.first_error is not None:
        raise batch.first_error
    return batch.succeeded
