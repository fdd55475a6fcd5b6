"""Deferred team-association verification for newly created repositories.

Usage
-----
Build a pipeline and feed it webhook deliveries::

    from teamwatch.verification import VerificationSettings, build_pipeline

    settings = VerificationSettings(allowed_organizations=frozenset({"acme"}))
    pipeline = build_pipeline(github_client, settings)
    pipeline.submit(request_body)

"""

from __future__ import annotations

from .events import EventFilter, RepositoryWebhook
from .models import (
    DEFAULT_ISSUE_TEMPLATE,
    ISSUE_TITLE,
    MAX_DELAY_SECONDS,
    CreationEvent,
    PendingCheck,
    VerificationSettings,
)
from .notifier import IssueNotifier
from .observability import CheckEventLogger, CheckEventType, CheckStage, ErrorCategory
from .pipeline import VerificationPipeline, build_pipeline
from .scheduler import AsyncioDeferral, CheckScheduler, Deferral
from .verifier import (
    CheckOutcome,
    CheckState,
    IllegalTransitionError,
    TeamVerifier,
    transition,
)

__all__ = [
    "DEFAULT_ISSUE_TEMPLATE",
    "ISSUE_TITLE",
    "MAX_DELAY_SECONDS",
    "AsyncioDeferral",
    "CheckEventLogger",
    "CheckEventType",
    "CheckOutcome",
    "CheckScheduler",
    "CheckStage",
    "CheckState",
    "CreationEvent",
    "Deferral",
    "ErrorCategory",
    "EventFilter",
    "IllegalTransitionError",
    "IssueNotifier",
    "PendingCheck",
    "RepositoryWebhook",
    "TeamVerifier",
    "VerificationPipeline",
    "VerificationSettings",
    "build_pipeline",
    "transition",
]
