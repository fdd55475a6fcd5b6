"""Command-line entrypoint: ``teamwatch [options] ORGANIZATION [...]``."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from teamwatch import __version__
from teamwatch.config import (
    DEFAULT_DELAY_SECONDS,
    DEFAULT_PORT,
    TeamwatchConfig,
    TeamwatchConfigError,
    parse_delay,
    parse_port,
)
from teamwatch.logging import configure_logging, get_logger, log_warning
from teamwatch.runtime import serve

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``teamwatch`` command."""
    parser = argparse.ArgumentParser(
        prog="teamwatch",
        description=(
            "Receive GitHub repository webhooks and open an issue on new "
            "private repositories that are not associated with any team."
        ),
        epilog=(
            "The GitHub token is read from the GITHUB_TOKEN environment variable. "
            "Example: teamwatch --port 8080 your_organization"
        ),
    )
    parser.add_argument(
        "organizations",
        metavar="ORGANIZATION",
        nargs="*",
        help="Allowed organizations",
    )
    parser.add_argument(
        "-p",
        "--port",
        default=os.environ.get("TEAMWATCH_PORT", str(DEFAULT_PORT)),
        help=f"Port number (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "-d",
        "--delay",
        default=os.environ.get("TEAMWATCH_DELAY_SECONDS", str(DEFAULT_DELAY_SECONDS)),
        help="Seconds to wait before checking team association "
        f"(default: {DEFAULT_DELAY_SECONDS:g})",
    )
    parser.add_argument(
        "-m",
        "--markdown-file",
        type=Path,
        default=None,
        help="Path to the markdown file for the issue body",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> TeamwatchConfig:
    """Combine parsed arguments with environment settings.

    Raises
    ------
    TeamwatchConfigError
        If an argument is invalid or a required setting is missing.

    """
    port = parse_port(args.port, source="port")
    if not args.organizations:
        msg = "At least one organization must be specified"
        raise TeamwatchConfigError(msg)
    overrides: dict[str, object] = {
        "allowed_organizations": frozenset(args.organizations),
        "delay_seconds": parse_delay(args.delay, source="delay"),
        "port": port,
    }
    if args.markdown_file is not None:
        overrides["markdown_file"] = args.markdown_file

    config = TeamwatchConfig.from_env(**overrides)
    config.issue_template()
    return config


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, validate configuration and start the server.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 1 when the configuration is invalid. On success the
        server runs until interrupted and 0 is returned.

    """
    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args)
    except TeamwatchConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    normalized_level, invalid_level = configure_logging(config.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid TEAMWATCH_LOG_LEVEL %r, falling back to %s",
            config.log_level,
            normalized_level,
        )
    os.environ.update(config.to_env())
    serve(config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
