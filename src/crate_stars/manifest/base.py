"""Port: Cargo manifest reader."""

from __future__ import annotations

from typing import Protocol

from crate_stars.models import Dependency


class ManifestReaderPort(Protocol):
    """Port for turning a manifest file into registry dependencies."""

    def read(self, path: str) -> list[Dependency]:
        """Return the registry dependencies declared in the manifest at *path*."""
        ...
