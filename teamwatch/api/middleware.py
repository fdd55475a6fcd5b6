"""ASGI lifespan middleware for the verification pipeline.

Pending checks are held only in memory. When the server shuts down they
are dropped; this middleware reports how many were lost and closes the
shared GitHub client.

Usage
-----
::

    lifespan = PipelineLifespan(pipeline, github_client)
    app = falcon.asgi.App(middleware=[lifespan])

"""

from __future__ import annotations

import typing as typ

from teamwatch.logging import get_logger, log_info
from teamwatch.verification.observability import CheckEventLogger

if typ.TYPE_CHECKING:
    from teamwatch.github.client import GitHubRestClient
    from teamwatch.verification.pipeline import VerificationPipeline

__all__ = ["PipelineLifespan"]

logger = get_logger(__name__)


class PipelineLifespan:
    """Falcon middleware hooking the ASGI lifespan startup/shutdown events."""

    def __init__(
        self,
        pipeline: VerificationPipeline,
        github_client: GitHubRestClient | None = None,
        *,
        event_logger: CheckEventLogger | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._github_client = github_client
        self._events = event_logger or CheckEventLogger()

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Log the settings the pipeline runs with."""
        settings = self._pipeline.settings
        log_info(
            logger,
            "Watching organizations %s; checks run %g seconds after creation",
            ", ".join(sorted(settings.allowed_organizations)),
            settings.delay_seconds,
        )

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Report dropped checks and release HTTP resources."""
        pending = self._pipeline.pending_count
        if pending:
            self._events.log_checks_dropped(pending)
        if self._github_client is not None:
            await self._github_client.aclose()
