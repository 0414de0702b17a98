"""Command-line entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from crate_stars import __version__
from crate_stars.config import LOG_LEVELS, Settings, load_settings
from crate_stars.errors import CrateStarsError
from crate_stars.pipeline import run_pipeline

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="crate-stars",
        description=(
            "Star the GitHub repositories of the dependencies listed in a Cargo.toml file."
        ),
    )
    parser.add_argument(
        "-m",
        "--manifest",
        default=None,
        help="Path to manifest (Cargo.toml) file. Defaults to CRATE_STARS_MANIFEST or Cargo.toml.",
    )
    parser.add_argument(
        "-t",
        "--token",
        default=None,
        help="GitHub API token (needs public_repo scope). Defaults to CRATE_STARS_TOKEN "
        "or GITHUB_TOKEN.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to a YAML config file. Defaults to CRATE_STARS_CONFIG.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log verbosity. Defaults to CRATE_STARS_LOG_LEVEL or ERROR.",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Log failed registry lookups and star the crates that were found.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    """Send log records to stderr at *level*."""
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr, force=True)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(max(logging.getLevelName(level), logging.WARNING))


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {
        "manifest": args.manifest,
        "token": args.token,
        "log_level": args.log_level,
    }
    if args.keep_going:
        overrides["strict"] = False
    return load_settings(args.config, overrides=overrides)


def run_cli(argv: list[str] | None = None) -> int:
    """Run one pipeline and return the process exit code."""
    args = _parse_args(argv)
    try:
        settings = _settings_from_args(args)
        configure_logging(settings.log_level)
        logger.info("Starting main routine")
        asyncio.run(run_pipeline(settings))
    except CrateStarsError as exc:
        print(f"Application error : {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(run_cli())
