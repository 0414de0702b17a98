"""Layered settings: defaults < YAML config file < environment < CLI flags."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from crate_stars import __version__
from crate_stars.errors import ConfigError

logger = logging.getLogger(__name__)

_ENV_PREFIX = "CRATE_STARS_"
_CONFIG_ENV = f"{_ENV_PREFIX}CONFIG"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime configuration for one pipeline run."""

    manifest: str = "Cargo.toml"
    token: str = ""
    log_level: str = "ERROR"
    registry_url: str = "https://crates.io/api/v1"
    registry_timeout: float = 0.1
    user_agent: str = f"crate-stars/{__version__}"
    forge_host: str = "https://github.com"
    forge_api_url: str = "https://api.github.com"
    forge_timeout: float = 10.0
    strict: bool = True


def _to_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _to_timeout(value: object) -> float:
    seconds = float(value)  # type: ignore[arg-type]
    if seconds <= 0:
        raise ValueError(f"timeout must be positive, got {value!r}")
    return seconds


def _to_log_level(value: object) -> str:
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"expected one of {', '.join(LOG_LEVELS)}, got {value!r}")
    return level


def _to_header_value(value: object) -> str:
    text = str(value).strip()
    if not text or not text.isascii() or not text.isprintable():
        raise ValueError(f"expected non-empty printable ASCII, got {value!r}")
    return text


_COERCERS: dict[str, Callable[[object], object]] = {
    "registry_timeout": _to_timeout,
    "forge_timeout": _to_timeout,
    "strict": _to_bool,
    "log_level": _to_log_level,
    "user_agent": _to_header_value,
}

_KEYS = frozenset(f.name for f in fields(Settings))


def _coerce(key: str, value: object, source: str) -> object:
    coercer = _COERCERS.get(key, lambda v: str(v).strip())
    try:
        return coercer(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for '{key}' in {source}: {exc}") from exc


def _apply(settings: Settings, values: Mapping[str, object], source: str) -> Settings:
    changes = {key: _coerce(key, value, source) for key, value in values.items()}
    return replace(settings, **changes) if changes else settings


def read_config_file(path: Path) -> dict[str, object]:
    """Read a YAML config file into a mapping of known setting keys.

    Raises:
        ConfigError: If the file is missing, not valid YAML, not a mapping,
            or contains unknown keys.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file '{path}': {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Config file '{path}' is not valid UTF-8: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file '{path}': {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config format in {path}: expected a YAML mapping.")

    unknown = sorted(str(k) for k in data if k not in _KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    return {str(k): v for k, v in data.items() if v is not None}


def _from_environ(environ: Mapping[str, str]) -> dict[str, object]:
    values: dict[str, object] = {}
    for key in _KEYS:
        raw = environ.get(f"{_ENV_PREFIX}{key.upper()}", "").strip()
        if raw:
            values[key] = raw
    # Unprefixed GITHUB_TOKEN only when no CRATE_STARS_TOKEN is set.
    if "token" not in values:
        gh_token = environ.get("GITHUB_TOKEN", "").strip()
        if gh_token:
            values["token"] = gh_token
    return values


def load_settings(
    config_path: str | Path | None = None,
    *,
    overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Resolve settings from every layer.

    Args:
        config_path: Optional YAML file. Falls back to ``CRATE_STARS_CONFIG``.
        overrides: Highest-priority values, typically CLI flags. ``None``
            values are ignored so unset flags do not mask lower layers.
        environ: Environment mapping, defaults to ``os.environ``.

    Raises:
        ConfigError: On unreadable files or invalid values.
    """
    env = os.environ if environ is None else environ
    settings = Settings()

    path = config_path or env.get(_CONFIG_ENV, "").strip() or None
    if path is not None:
        logger.debug("Loading config file %s", path)
        settings = _apply(settings, read_config_file(Path(path)), str(path))

    settings = _apply(settings, _from_environ(env), "environment")

    if overrides:
        cli_values = {k: v for k, v in overrides.items() if v is not None}
        unknown = sorted(k for k in cli_values if k not in _KEYS)
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(unknown)}")
        settings = _apply(settings, cli_values, "command line")

    return settings
