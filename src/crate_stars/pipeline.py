"""Pipeline: manifest -> crate metadata -> GitHub URLs -> stars."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import httpx

from crate_stars.config import Settings
from crate_stars.errors import ConfigError, CrateStarsError, RepoUrlError
from crate_stars.forge.github import star_all
from crate_stars.manifest.base import ManifestReaderPort
from crate_stars.manifest.reader import CargoManifestReader
from crate_stars.models import CrateMetadata, PipelineResult, PipelineStage, RepoRef
from crate_stars.registry.client import fetch_all, fetch_each

logger = logging.getLogger(__name__)

_DEFAULT_FORGE_HOST = "https://github.com"


def filter_repository_urls(
    metadata: Iterable[CrateMetadata],
    host: str = _DEFAULT_FORGE_HOST,
) -> list[str]:
    """Keep the repository URLs that point at *host*.

    Crates without a repository, or hosted elsewhere, are dropped silently.
    Applying the filter to its own output returns the same list.
    """
    urls: list[str] = []
    for crate in metadata:
        url = crate.repository_url
        if url and host in url:
            urls.append(url)
        else:
            logger.debug("Skipping crate %s (repository=%s)", crate.name, url)
    return urls


def _enter(stage: PipelineStage) -> None:
    logger.info("Pipeline reached stage %s", stage)


def _log_located(located: list[RepoRef], errors: list[RepoUrlError]) -> None:
    _enter(PipelineStage.REPOS_LOCATED)
    logger.info("Located %d repositories, skipped %d URLs", len(located), len(errors))


async def run_pipeline(
    settings: Settings,
    *,
    manifest_reader: ManifestReaderPort | None = None,
    registry_transport: httpx.AsyncBaseTransport | None = None,
    forge_transport: httpx.AsyncBaseTransport | None = None,
) -> PipelineResult:
    """Star the GitHub repository of every registry dependency in the manifest.

    Reading the manifest and fetching metadata are fatal on error. With
    ``settings.strict`` disabled, failed lookups are logged and the run
    continues with the crates that were found. Unlocatable URLs are logged
    and skipped; a failed star is raised once every star request is done.

    Raises:
        ConfigError: If no API token is configured.
        ManifestError: If the manifest cannot be read.
        RegistryError: If a lookup fails in strict mode.
        AuthError: If the token cannot be used to build the API client.
        StarError: If at least one star request failed.
    """
    if not settings.token.strip():
        raise ConfigError(
            "A GitHub API token is required (use --token, CRATE_STARS_TOKEN or GITHUB_TOKEN)."
        )

    reader = manifest_reader or CargoManifestReader()

    _enter(PipelineStage.MANIFEST_READ)
    dependencies = reader.read(settings.manifest)
    logger.debug("Manifest dependencies: %s", dependencies)

    _enter(PipelineStage.NAMES_EXTRACTED)
    names = {dep.name for dep in dependencies}
    logger.info("Found %d registry dependencies in %s", len(names), settings.manifest)

    registry_failures: list[CrateStarsError] = []
    if settings.strict:
        metadata = await fetch_all(names, settings, transport=registry_transport)
    else:
        batch = await fetch_each(names, settings, transport=registry_transport)
        for err in batch.failed:
            logger.error("%s", err)
        metadata = batch.succeeded
        registry_failures = batch.failed
    _enter(PipelineStage.METADATA_FETCHED)

    urls = filter_repository_urls(metadata, settings.forge_host)
    _enter(PipelineStage.URLS_FILTERED)
    logger.info("%d of %d crates link to %s", len(urls), len(metadata), settings.forge_host)

    report = await star_all(
        settings.token,
        urls,
        settings,
        transport=forge_transport,
        on_located=_log_located,
    )
    _enter(PipelineStage.STARRED)
    logger.info("All dependencies starred (%d repositories)", len(report.starred))

    _enter(PipelineStage.DONE)
    return PipelineResult(
        dependencies=dependencies,
        metadata=metadata,
        registry_failures=registry_failures,
        urls=urls,
        stars=report,
    )
