"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest

from crate_stars.config import Settings


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell configuration out of the tests."""
    for key in list(os.environ):
        if key.startswith("CRATE_STARS_") or key == "GITHUB_TOKEN":
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        token="ghp_testtoken",
        registry_url="https://registry.test/api/v1",
        forge_api_url="https://api.forge.test",
    )
