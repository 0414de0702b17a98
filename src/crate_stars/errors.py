"""Exception hierarchy for crate-stars.

All exceptions inherit from CrateStarsError (single catch point).
Messages are one line, meant to be printed as-is by the CLI.
"""

from __future__ import annotations


class CrateStarsError(Exception):
    """Base exception for all crate-stars errors."""


class ConfigError(CrateStarsError):
    """Invalid or missing configuration value."""


class ManifestError(CrateStarsError):
    """Error reading or parsing a Cargo manifest."""

    def __init__(self, path: str, cause: object) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Error with Manifest file {path} : {cause}")


class RegistryError(CrateStarsError):
    """Error fetching crate metadata from the registry."""

    def __init__(self, name: str, cause: object) -> None:
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to fetch crate '{name}' from registry: {cause}")


class RepoUrlError(CrateStarsError):
    """URL cannot be parsed as a forge repository."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Can't get user and name from repository URL {url}")


class AuthError(CrateStarsError):
    """The forge API client could not be built from the given credential."""


class StarError(CrateStarsError):
    """A request to star a repository failed."""

    def __init__(self, repo: object, cause: object) -> None:
        self.repo = repo
        self.cause = cause
        super().__init__(f"Error stargazing repository : {repo}, {cause}")
