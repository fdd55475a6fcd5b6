"""teamwatch runtime entrypoint.

This module provides the ASGI application factory used by Granian
(``teamwatch.runtime:create_app``) and the ``serve`` helper shared by
:mod:`teamwatch.cli` and ``python -m teamwatch.runtime``.

Configuration is driven by the environment variables documented on
:meth:`teamwatch.config.TeamwatchConfig.from_env`. Granian imports the
factory in its worker process, so the CLI exports its resolved settings
to the environment before serving.
"""

from __future__ import annotations

import os
import typing as typ

from teamwatch.config import TeamwatchConfig, TeamwatchConfigError
from teamwatch.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "load_config", "main", "serve"]

logger = get_logger(__name__)


def load_config() -> TeamwatchConfig:
    """Load configuration from the environment or exit with status 1.

    Raises
    ------
    SystemExit
        If the configuration is missing or invalid.

    """
    try:
        config = TeamwatchConfig.from_env()
        # Fail at startup rather than at the first issue filed.
        config.issue_template()
    except TeamwatchConfigError as exc:
        # Validation failures need no traceback.
        log_error(logger, "Invalid configuration: %s", exc)
        raise SystemExit(1) from exc
    return config


def create_app() -> falcon.asgi.App:
    """Create the webhook receiver from environment configuration.

    Returns
    -------
    falcon.asgi.App
        Falcon ASGI application with the webhook, health and readiness
        endpoints registered.

    """
    from teamwatch.api.app import AppDependencies
    from teamwatch.api.app import create_app as _create_api_app
    from teamwatch.github.client import GitHubRestClient
    from teamwatch.verification.pipeline import build_pipeline

    config = load_config()
    github_client = GitHubRestClient(config.github_rest_config())
    pipeline = build_pipeline(github_client, config.verification_settings())
    deps = AppDependencies(
        pipeline=pipeline,
        github_client=github_client,
        webhook_secret=config.webhook_secret,
    )
    return _create_api_app(deps)


def serve(config: TeamwatchConfig) -> None:
    """Start the Granian ASGI server for ``config``."""
    from granian import Granian
    from granian.constants import Interfaces

    log_info(
        logger,
        "Server started on port %d (host=%s, organizations=%s, delay=%gs)",
        config.port,
        config.host,
        ",".join(sorted(config.allowed_organizations)),
        config.delay_seconds,
    )
    if config.webhook_secret is None:
        log_warning(logger, "TEAMWATCH_WEBHOOK_SECRET is not set; signatures unchecked")

    server = Granian(
        "teamwatch.runtime:create_app",
        address=config.host,
        port=config.port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


def main() -> None:
    """Configure logging, validate the environment and serve."""
    log_level_str = os.environ.get("TEAMWATCH_LOG_LEVEL", "INFO")
    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid TEAMWATCH_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )
    serve(load_config())


if __name__ == "__main__":
    main()
