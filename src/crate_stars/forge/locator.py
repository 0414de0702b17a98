"""Turn repository URLs into forge repository references."""

from __future__ import annotations

from collections.abc import Iterable

from crate_stars.errors import RepoUrlError
from crate_stars.models import RepoRef


def parse_repo_url(url: str) -> RepoRef:
    """Extract ``owner/name`` from a ``scheme://host/owner/name[/...]`` URL.

    Only the first two path segments after the host count; anything after
    them (``/tree/main``, a trailing slash) is ignored, as is any query
    string or fragment. A ``.git`` suffix on the name is dropped.

    Raises:
        RepoUrlError: If fewer than two non-empty segments follow the host.
    """
    # "https://github.com/owner/name" -> ["https:", "", "github.com", "owner", "name"]
    base = url.strip().split("#", 1)[0].split("?", 1)[0]
    parts = base.split("/")[3:]
    if len(parts) < 2:
        raise RepoUrlError(url)
    owner, name = parts[0], parts[1].removesuffix(".git")
    if not owner or not name:
        raise RepoUrlError(url)
    return RepoRef(owner=owner, name=name)


def locate_all(urls: Iterable[str]) -> tuple[list[RepoRef], list[RepoUrlError]]:
    """Split URLs into located repositories and per-URL errors, keeping input order."""
    located: list[RepoRef] = []
    errors: list[RepoUrlError] = []
    for url in urls:
        try:
            located.append(parse_repo_url(url))
        except RepoUrlError as exc:
            errors.append(exc)
    return located, errors
