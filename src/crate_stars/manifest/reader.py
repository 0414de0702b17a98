"""Read dependency declarations from a Cargo.toml manifest."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from crate_stars.errors import ManifestError
from crate_stars.models import Dependency, DependencyKind

logger = logging.getLogger(__name__)

_SECTIONS: dict[str, DependencyKind] = {
    "dependencies": DependencyKind.NORMAL,
    "dev-dependencies": DependencyKind.DEV,
    "build-dependencies": DependencyKind.BUILD,
}

# Legacy underscore spellings still accepted by cargo.
_LEGACY_SECTIONS: dict[str, str] = {
    "dev_dependencies": "dev-dependencies",
    "build_dependencies": "build-dependencies",
}


class CargoManifestReader:
    """Adapter for ManifestReaderPort backed by ``tomllib``."""

    def read(self, path: str) -> list[Dependency]:
        return read_manifest(path)


def read_manifest(path: str | Path) -> list[Dependency]:
    """Read a Cargo manifest from disk.

    Raises:
        ManifestError: If the file cannot be read or is not valid TOML.
    """
    filepath = Path(path)
    try:
        text = filepath.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(str(path), exc.strerror or exc) from exc
    except UnicodeDecodeError as exc:
        raise ManifestError(str(path), f"not valid UTF-8: {exc}") from exc
    return parse_manifest(text, source=str(path))


def parse_manifest(text: str, source: str = "Cargo.toml") -> list[Dependency]:
    """Parse manifest text into registry dependencies.

    Collects ``[dependencies]``, ``[dev-dependencies]``,
    ``[build-dependencies]``, their ``[target.<cfg>.*]`` variants and
    ``[workspace.dependencies]``. A crate declared in several sections is
    returned once, with the kind of its first declaration.

    Dependencies that only point at a local ``path`` or a ``git`` repository
    are not published on the registry and are skipped.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestError(source, exc) from exc

    tables: list[tuple[DependencyKind, object]] = []
    tables.extend(_sections_of(data))

    targets = data.get("target", {})
    if isinstance(targets, dict):
        for cfg, target_data in targets.items():
            if isinstance(target_data, dict):
                logger.debug("Reading target-specific dependencies for %s", cfg)
                tables.extend(_sections_of(target_data))

    workspace = data.get("workspace", {})
    if isinstance(workspace, dict):
        tables.append((DependencyKind.NORMAL, workspace.get("dependencies", {})))

    deps: dict[str, Dependency] = {}
    for kind, table in tables:
        if not isinstance(table, dict):
            raise ManifestError(source, f"dependency section must be a table, got {table!r}")
        for key, spec in table.items():
            dep = _parse_dependency(key, spec, kind)
            if dep is None:
                continue
            deps.setdefault(dep.name, dep)

    return list(deps.values())


def _sections_of(data: dict) -> list[tuple[DependencyKind, object]]:
    found: list[tuple[DependencyKind, object]] = []
    for section, kind in _SECTIONS.items():
        if section in data:
            found.append((kind, data[section]))
    for legacy, section in _LEGACY_SECTIONS.items():
        if legacy in data and section not in data:
            found.append((_SECTIONS[section], data[legacy]))
    return found


def _parse_dependency(key: str, spec: object, kind: DependencyKind) -> Dependency | None:
    """Parse one dependency entry, or return None if it is not on the registry."""
    if isinstance(spec, str):
        return Dependency(name=key, requirement=spec, kind=kind)

    if not isinstance(spec, dict):
        logger.warning("Ignoring dependency '%s' with unsupported value %r", key, spec)
        return None

    version = spec.get("version")
    if version is None and ("path" in spec or "git" in spec):
        logger.debug("Skipping non-registry dependency '%s'", key)
        return None

    return Dependency(
        name=str(spec.get("package", key)),
        requirement=str(version) if version is not None else "*",
        kind=kind,
    )
