"""Star repositories through the GitHub REST API.

Endpoint: ``PUT /user/starred/{owner}/{repo}`` (204 on success).
The token needs the ``public_repo`` scope.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from urllib.parse import quote as urlquote

import httpx

from crate_stars.config import Settings
from crate_stars.errors import AuthError, RepoUrlError, StarError
from crate_stars.forge.base import StarClientPort
from crate_stars.forge.locator import locate_all
from crate_stars.httpclient import build_http_client
from crate_stars.models import RepoRef, StarOutcome, StarReport

logger = logging.getLogger(__name__)

_API_URL = "https://api.github.com"

LocatedCallback = Callable[[list[RepoRef], list[RepoUrlError]], None]


@dataclass
class GitHubStarClient:
    """Async client for the GitHub starring endpoints."""

    http: httpx.AsyncClient
    api_url: str = _API_URL

    async def star(self, repo: RepoRef) -> None:
        """Star *repo* for the authenticated user.

        Raises:
            StarError: On network errors or any non-2xx response.
        """
        url = (
            f"{self.api_url.rstrip('/')}/user/starred/"
            f"{urlquote(repo.owner, safe='')}/{urlquote(repo.name, safe='')}"
        )
        logger.info("Async stargazing of %s", repo)
        try:
            response = await self.http.put(url, headers={"Content-Length": "0"})
        except httpx.HTTPError as exc:
            raise StarError(repo, exc) from exc

        if not response.is_success:
            raise StarError(repo, f"HTTP {response.status_code}: {_error_message(response)}")

    async def star_many(self, repos: Iterable[RepoRef]) -> list[StarOutcome]:
        """Star every repository concurrently.

        Returns one outcome per input repository, in input order. Every
        request completes before this returns.
        """
        repos = list(repos)
        results = await asyncio.gather(
            *(self.star(repo) for repo in repos),
            return_exceptions=True,
        )

        outcomes: list[StarOutcome] = []
        for repo, result in zip(repos, results, strict=True):
            if isinstance(result, StarError):
                logger.error("%s", result)
                outcomes.append(StarOutcome(repo=repo, error=result))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(StarOutcome(repo=repo))
        return outcomes


def _error_message(response: httpx.Response) -> str:
    """Best-effort ``message`` field from a GitHub error body."""
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase or "unexpected response"
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase or "unexpected response"


def github_headers(token: str) -> dict[str, str]:
    """Build authenticated request headers from a personal access token.

    Raises:
        AuthError: If the token is empty or cannot be sent as a header value.
    """
    token = token.strip()
    if not token:
        raise AuthError("GitHub API token is empty.")
    if not token.isascii() or not token.isprintable() or any(c.isspace() for c in token):
        raise AuthError(
            "GitHub API token is malformed: it must be printable ASCII without spaces."
        )
    return {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": "2022-11-28",
    }


async def star_each(
    credential: str,
    urls: Iterable[str],
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    on_located: LocatedCallback | None = None,
) -> StarReport:
    """Locate every URL and star each located repository.

    URLs that cannot be located are logged and skipped. Duplicate
    repositories are starred once per occurrence. *on_located* is called
    with the located repositories and location errors before any star
    request is sent.

    Raises:
        AuthError: If no API client can be built from *credential*.
    """
    settings = settings or Settings()
    located, location_errors = locate_all(urls)
    for err in location_errors:
        logger.error("%s", err)
    if on_located is not None:
        on_located(located, location_errors)

    headers = github_headers(credential)
    headers["User-Agent"] = settings.user_agent

    if not located:
        return StarReport(location_errors=location_errors)

    async with build_http_client(
        timeout=settings.forge_timeout,
        headers=headers,
        transport=transport,
    ) as http:
        client: StarClientPort = GitHubStarClient(http, api_url=settings.forge_api_url)
        outcomes = await client.star_many(located)

    return StarReport(located=located, location_errors=location_errors, outcomes=outcomes)


async def star_all(
    credential: str,
    urls: Iterable[str],
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    on_located: LocatedCallback | None = None,
) -> StarReport:
    """Star every repository; a single failed star fails the batch.

    Returns the full report when every located repository was starred.

    Raises:
        AuthError: If no API client can be built from *credential*.
        StarError: The first failure in input order, after all requests
            have completed.
    """
    report = await star_each(
        credential, urls, settings, transport=transport, on_located=on_located
    )
    failures = report.failures
    if failures:
        raise failures[0]
    return report
