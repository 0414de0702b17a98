"""Port: crate registry client."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from crate_stars.models import BatchResult, CrateMetadata


class RegistryClientPort(Protocol):
    """Port for looking up crate metadata on a registry."""

    async def get_crate(self, name: str) -> CrateMetadata:
        """Fetch metadata for a single crate."""
        ...

    async def fetch_each(self, names: Iterable[str]) -> BatchResult[CrateMetadata]:
        """Fetch every crate concurrently, keeping per-name status."""
        ...

    async def fetch_all(self, names: Iterable[str]) -> list[CrateMetadata]:
        """Fetch every crate concurrently, failing if any lookup fails."""
        ...
