"""Domain models for crate-stars. All frozen dataclasses -- no mutation after creation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

from crate_stars.errors import CrateStarsError, RepoUrlError, StarError

T = TypeVar("T")

# ─── Enumerations ─────────────────────────────────────────────


class DependencyKind(StrEnum):
    NORMAL = "normal"
    DEV = "dev"
    BUILD = "build"


class PipelineStage(StrEnum):
    MANIFEST_READ = "manifest_read"
    NAMES_EXTRACTED = "names_extracted"
    METADATA_FETCHED = "metadata_fetched"
    URLS_FILTERED = "urls_filtered"
    REPOS_LOCATED = "repos_located"
    STARRED = "starred"
    DONE = "done"


# ─── Manifest Models ──────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Dependency:
    """A dependency declared in a Cargo manifest.

    ``name`` is the crate name on the registry, which differs from the
    manifest key when the dependency is renamed with ``package = "..."``.
    """

    name: str
    requirement: str = "*"
    kind: DependencyKind = DependencyKind.NORMAL


# ─── Registry Models ──────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CrateMetadata:
    """A crate as returned by the registry API."""

    name: str
    repository_url: str | None = None
    description: str = ""
    homepage: str | None = None
    max_version: str = ""
    downloads: int = 0


# ─── Forge Models ─────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RepoRef:
    """A repository on the forge, identified by owner and name."""

    owner: str
    name: str

    def __post_init__(self) -> None:
        for part in (self.owner, self.name):
            if not part or "/" in part:
                raise ValueError(f"Invalid repository segment: {part!r}")

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, slots=True)
class StarOutcome:
    """Result of one star request."""

    repo: RepoRef
    error: StarError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ─── Batch Models ─────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class BatchResult(Generic[T]):
    """Per-item status of one concurrent batch.

    ``failed`` keeps input order, so ``first_error`` is stable for a
    deterministic set of failures.
    """

    succeeded: list[T] = field(default_factory=list)
    failed: list[CrateStarsError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def first_error(self) -> CrateStarsError | None:
        return self.failed[0] if self.failed else None


@dataclass(frozen=True, slots=True)
class StarReport:
    """Everything that happened during one star batch."""

    located: list[RepoRef] = field(default_factory=list)
    location_errors: list[RepoUrlError] = field(default_factory=list)
    outcomes: list[StarOutcome] = field(default_factory=list)

    @property
    def starred(self) -> list[RepoRef]:
        return [o.repo for o in self.outcomes if o.ok]

    @property
    def failures(self) -> list[StarError]:
        return [o.error for o in self.outcomes if o.error is not None]


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Summary of one completed pipeline run."""

    dependencies: list[Dependency] = field(default_factory=list)
    metadata: list[CrateMetadata] = field(default_factory=list)
    registry_failures: list[CrateStarsError] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)
    stars: StarReport = field(default_factory=StarReport)
