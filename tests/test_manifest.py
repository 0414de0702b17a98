"""Tests for manifest/reader.py -- Cargo.toml parsing."""

from __future__ import annotations

import textwrap

import pytest

from crate_stars.errors import ManifestError
from crate_stars.manifest.reader import CargoManifestReader, parse_manifest, read_manifest
from crate_stars.models import Dependency, DependencyKind

DUMB_MANIFEST = textwrap.dedent("""\
    [package]
    name = "dumb"
    version = "0.1.0"
    authors = ["Dumbo Dumb"]
    edition = "2018"

    [dependencies]
    log = "0.4"
    futures = "0.3"
""")

FULL_MANIFEST = textwrap.dedent("""\
    [package]
    name = "full"
    version = "0.1.0"

    [dependencies]
    serde = { version = "1.0", features = ["derive"] }
    json = { version = "1", package = "serde_json" }
    local = { path = "../local" }
    published-local = { path = "../pl", version = "0.2" }
    from-git = { git = "https://github.com/a/b" }
    shared = { workspace = true }

    [dependencies.tokio]
    version = "1"
    features = ["full"]

    [dev-dependencies]
    serde = "1.0"
    pretty_assertions = "1"

    [build-dependencies]
    cc = "1.0"

    [target.'cfg(windows)'.dependencies]
    winapi = "0.3"

    [target.'cfg(unix)'.dev-dependencies]
    nix = "0.27"
""")


def _names(deps: list[Dependency]) -> list[str]:
    return [d.name for d in deps]


class TestParseManifest:
    def test_simple_dependencies(self):
        deps = parse_manifest(DUMB_MANIFEST)
        assert deps == [
            Dependency(name="log", requirement="0.4"),
            Dependency(name="futures", requirement="0.3"),
        ]

    def test_all_sections_collected(self):
        names = set(_names(parse_manifest(FULL_MANIFEST)))
        assert names == {
            "serde",
            "serde_json",
            "published-local",
            "shared",
            "tokio",
            "pretty_assertions",
            "cc",
            "winapi",
            "nix",
        }

    def test_renamed_dependency_uses_package(self):
        deps = {d.name: d for d in parse_manifest(FULL_MANIFEST)}
        assert "json" not in deps
        assert deps["serde_json"].requirement == "1"

    def test_path_and_git_only_skipped(self):
        names = _names(parse_manifest(FULL_MANIFEST))
        assert "local" not in names
        assert "from-git" not in names

    def test_workspace_dependency_has_wildcard_requirement(self):
        deps = {d.name: d for d in parse_manifest(FULL_MANIFEST)}
        assert deps["shared"].requirement == "*"

    def test_duplicate_keeps_first_kind(self):
        deps = {d.name: d for d in parse_manifest(FULL_MANIFEST)}
        assert deps["serde"].kind == DependencyKind.NORMAL
        assert deps["pretty_assertions"].kind == DependencyKind.DEV
        assert deps["cc"].kind == DependencyKind.BUILD
        assert deps["nix"].kind == DependencyKind.DEV

    def test_names_are_unique(self):
        names = _names(parse_manifest(FULL_MANIFEST))
        assert len(names) == len(set(names))

    def test_workspace_dependencies(self):
        text = textwrap.dedent("""\
            [workspace]
            members = ["a", "b"]

            [workspace.dependencies]
            anyhow = "1"
            clap = { version = "4", features = ["derive"] }
        """)
        assert set(_names(parse_manifest(text))) == {"anyhow", "clap"}

    def test_legacy_underscore_sections(self):
        text = textwrap.dedent("""\
            [dev_dependencies]
            quickcheck = "1"
        """)
        deps = parse_manifest(text)
        assert deps == [Dependency("quickcheck", "1", DependencyKind.DEV)]

    def test_no_dependencies(self):
        assert parse_manifest('[package]\nname = "x"\n') == []

    def test_invalid_toml_raises(self):
        with pytest.raises(ManifestError, match="Error with Manifest file Cargo.toml"):
            parse_manifest("[dependencies\nlog = ")

    def test_non_table_section_raises(self):
        with pytest.raises(ManifestError, match="must be a table"):
            parse_manifest('dependencies = "log"\n')

    def test_unsupported_value_ignored(self):
        assert parse_manifest("[dependencies]\nweird = 3\n") == []


class TestReadManifest:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "Cargo.toml"
        path.write_text(DUMB_MANIFEST, encoding="utf-8")
        assert _names(read_manifest(path)) == ["log", "futures"]

    def test_missing_file_raises_with_path(self, tmp_path):
        path = tmp_path / "missing" / "Cargo.toml"
        with pytest.raises(ManifestError) as exc_info:
            read_manifest(str(path))
        assert exc_info.value.path == str(path)
        assert str(path) in str(exc_info.value)

    def test_non_utf8_file_raises(self, tmp_path):
        path = tmp_path / "Cargo.toml"
        path.write_bytes(b"[dependencies]\nlog = \"\xff\xfe\"\n")
        with pytest.raises(ManifestError, match="not valid UTF-8") as exc_info:
            read_manifest(path)
        assert exc_info.value.path == str(path)

    def test_adapter_delegates(self, tmp_path):
        path = tmp_path / "Cargo.toml"
        path.write_text(DUMB_MANIFEST, encoding="utf-8")
        assert _names(CargoManifestReader().read(str(path))) == ["log", "futures"]
