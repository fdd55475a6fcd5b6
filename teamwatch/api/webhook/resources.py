"""GitHub webhook receiver.

Every delivery that passes signature verification is acknowledged with
``200 OK`` whatever the pipeline decides, so GitHub never redelivers an
event just because it was ignored.
"""

from __future__ import annotations

import hashlib
import hmac
import typing as typ

import falcon

from teamwatch.api.errors import InvalidSignatureError
from teamwatch.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from teamwatch.verification.pipeline import VerificationPipeline

__all__ = ["WebhookResource", "verify_signature"]

logger = get_logger(__name__)

REPOSITORY_EVENT = "repository"
_SIGNATURE_PREFIX = "sha256="


def verify_signature(secret: str, body: bytes, header: str | None) -> bool:
    """Return True when ``header`` is the HMAC-SHA256 of ``body`` under ``secret``."""
    if not header or not header.startswith(_SIGNATURE_PREFIX):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, header.removeprefix(_SIGNATURE_PREFIX))


class WebhookResource:
    """Accept repository webhooks and hand them to the pipeline.

    Parameters
    ----------
    pipeline
        Verification pipeline that filters and schedules deliveries.
    webhook_secret
        Shared secret configured on the GitHub webhook. When ``None``,
        signatures are not checked.

    """

    def __init__(
        self,
        pipeline: VerificationPipeline,
        *,
        webhook_secret: str | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._secret = webhook_secret

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST / webhook deliveries."""
        body = await req.stream.read()
        delivery_id = req.get_header("X-GitHub-Delivery")

        if self._secret is not None and not verify_signature(
            self._secret, body, req.get_header("X-Hub-Signature-256")
        ):
            raise InvalidSignatureError(
                "X-Hub-Signature-256 does not match the request body",
                delivery_id=delivery_id,
            )

        event_name = req.get_header("X-GitHub-Event")
        if event_name is not None and event_name != REPOSITORY_EVENT:
            log_debug(
                logger,
                "Ignoring %s delivery %s",
                event_name,
                delivery_id,
            )
        else:
            self._pipeline.submit(body)

        resp.status = falcon.HTTP_200
        resp.content_type = falcon.MEDIA_TEXT
        resp.text = "OK"
