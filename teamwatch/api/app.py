"""Application factory for the teamwatch Falcon ASGI application.

Usage
-----
Create a health-only app (no pipeline)::

    app = create_app()

Create the full webhook receiver::

    from teamwatch.api.app import AppDependencies, create_app

    deps = AppDependencies(pipeline=pipeline, github_client=client)
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from teamwatch.api.errors import InvalidSignatureError, handle_invalid_signature
from teamwatch.api.health.resources import HealthResource, ReadyResource

if typ.TYPE_CHECKING:
    from teamwatch.github.client import GitHubRestClient
    from teamwatch.verification.pipeline import VerificationPipeline

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    pipeline
        Verification pipeline fed by the webhook endpoint. When ``None``
        only the health endpoints are registered.
    github_client
        Shared GitHub client, closed on lifespan shutdown when provided.
    webhook_secret
        Optional secret for ``X-Hub-Signature-256`` verification.

    """

    pipeline: VerificationPipeline | None = None
    github_client: GitHubRestClient | None = None
    webhook_secret: str | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. Without a pipeline, only
        ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    pipeline = dependencies.pipeline if dependencies is not None else None
    middleware: list[object] = []

    if dependencies is not None and pipeline is not None:
        from teamwatch.api.middleware import PipelineLifespan

        middleware.append(PipelineLifespan(pipeline, dependencies.github_client))

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(pipeline))

    if dependencies is not None and pipeline is not None:
        from teamwatch.api.webhook.resources import WebhookResource

        app.add_route(
            "/",
            WebhookResource(pipeline, webhook_secret=dependencies.webhook_secret),
        )

    app.add_error_handler(InvalidSignatureError, handle_invalid_signature)

    return app
