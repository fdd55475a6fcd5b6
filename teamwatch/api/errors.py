"""Domain exceptions and Falcon error handlers for the webhook endpoint.

Usage
-----
Register the handler on the Falcon app::

    from teamwatch.api.errors import InvalidSignatureError, handle_invalid_signature

    app.add_error_handler(InvalidSignatureError, handle_invalid_signature)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["InvalidSignatureError", "handle_invalid_signature"]


class InvalidSignatureError(Exception):
    """Raised when a webhook delivery fails ``X-Hub-Signature-256`` checks.

    Attributes
    ----------
    delivery_id
        Value of the ``X-GitHub-Delivery`` header, when present.

    """

    def __init__(self, reason: str, *, delivery_id: str | None = None) -> None:
        self.reason = reason
        self.delivery_id = delivery_id
        super().__init__(reason)


async def handle_invalid_signature(
    _req: Request,
    resp: Response,
    ex: InvalidSignatureError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidSignatureError`` to an HTTP 401 JSON response."""
    resp.status = falcon.HTTP_401
    resp.media = {
        "title": "Invalid signature",
        "description": ex.reason,
    }
