"""teamwatch HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application that receives GitHub webhooks and answers health
probes.

Public API
----------
create_app
    Application factory; registers the webhook endpoint when a
    verification pipeline is supplied.
"""

from teamwatch.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
