"""Wiring of the filter, scheduler, verifier and notifier into one pipeline."""

from __future__ import annotations

import dataclasses
import typing as typ

from .events import EventFilter
from .notifier import IssueNotifier
from .observability import CheckEventLogger
from .scheduler import AsyncioDeferral, CheckScheduler
from .verifier import TeamVerifier

if typ.TYPE_CHECKING:
    from teamwatch.github.client import GitHubPlatformClient

    from .events import RawEvent
    from .models import CreationEvent, VerificationSettings
    from .scheduler import Deferral


@dataclasses.dataclass(frozen=True, slots=True)
class VerificationPipeline:
    """Entry point handed to the webhook resource.

    Attributes
    ----------
    settings
        Read-only settings shared by every check.
    event_filter
        Filter applied to each webhook delivery.
    scheduler
        Scheduler that defers accepted events to the verifier.
    deferral
        Deferral capability backing the scheduler.

    """

    settings: VerificationSettings
    event_filter: EventFilter
    scheduler: CheckScheduler
    deferral: Deferral

    def submit(self, raw: RawEvent) -> CreationEvent | None:
        """Filter ``raw`` and schedule a check when it is accepted.

        Returns the accepted event, or ``None`` when the delivery was
        dropped. Never raises for malformed deliveries.
        """
        event = self.event_filter.accept(raw)
        if event is not None:
            self.scheduler.schedule(event, self.settings.delay_seconds)
        return event

    @property
    def pending_count(self) -> int | None:
        """Return the number of unfinished checks when the deferral tracks it."""
        if isinstance(self.deferral, AsyncioDeferral):
            return self.deferral.pending_count
        return None


def build_pipeline(
    client: GitHubPlatformClient,
    settings: VerificationSettings,
    *,
    deferral: Deferral | None = None,
    event_logger: CheckEventLogger | None = None,
) -> VerificationPipeline:
    """Assemble a :class:`VerificationPipeline` around ``client``."""
    events = event_logger or CheckEventLogger()
    deferral = deferral or AsyncioDeferral()
    notifier = IssueNotifier(client, settings, event_logger=events)
    verifier = TeamVerifier(client, settings, notifier, event_logger=events)
    return VerificationPipeline(
        settings=settings,
        event_filter=EventFilter(events),
        scheduler=CheckScheduler(verifier, deferral, event_logger=events),
        deferral=deferral,
    )
