"""Port: forge star client."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from crate_stars.models import RepoRef, StarOutcome


class StarClientPort(Protocol):
    """Port for starring repositories on a code forge."""

    async def star(self, repo: RepoRef) -> None:
        """Star one repository for the authenticated user."""
        ...

    async def star_many(self, repos: Iterable[RepoRef]) -> list[StarOutcome]:
        """Star every repository concurrently, one outcome per input."""
        ...
