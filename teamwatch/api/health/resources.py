"""Liveness and readiness probes.

Usage
-----
::

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(pipeline))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from teamwatch.verification.pipeline import VerificationPipeline

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe; always answers ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe reporting whether webhooks can be processed.

    Without a pipeline the service still answers probes but cannot accept
    webhooks, so it reports ``degraded`` with HTTP 503.
    """

    def __init__(self, pipeline: VerificationPipeline | None = None) -> None:
        self._pipeline = pipeline

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        if self._pipeline is None:
            resp.media = {"status": "degraded"}
            resp.status = HTTPStatus.SERVICE_UNAVAILABLE
            return

        media: dict[str, object] = {"status": "ready"}
        pending = self._pipeline.pending_count
        if pending is not None:
            media["pending_checks"] = pending
        resp.media = media
        resp.status = HTTPStatus.OK
