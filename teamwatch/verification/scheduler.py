"""In-memory scheduling of deferred team-association checks.

A scheduled check lives only in process memory. If the process stops before
the check fires, the check is lost; the service logs how many checks were
dropped at shutdown but never persists or replays them.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import datetime as dt
import typing as typ

from .models import PendingCheck, check_delay_seconds
from .observability import CheckEventLogger

if typ.TYPE_CHECKING:
    from .models import CreationEvent

DeferredJob: typ.TypeAlias = cabc.Callable[[], cabc.Awaitable[object]]


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp used for check fire times."""
    return dt.datetime.now(dt.UTC)


class Deferral(typ.Protocol):
    """Capability that runs a job once after a delay without blocking."""

    def defer(self, delay_seconds: float, job: DeferredJob) -> None:
        """Arrange for ``job`` to run once, no earlier than ``delay_seconds``."""
        ...


class Verifier(typ.Protocol):
    """Anything that can run the verification step for a creation event."""

    async def run(self, event: CreationEvent) -> object:
        """Verify the repository referenced by ``event``."""
        ...


class AsyncioDeferral:
    """Run deferred jobs as tasks on the running asyncio event loop.

    The event loop only keeps weak references to tasks, so every task is
    held in ``_tasks`` until it completes.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending_count(self) -> int:
        """Return the number of jobs that have not finished yet."""
        return len(self._tasks)

    def defer(self, delay_seconds: float, job: DeferredJob) -> None:
        """Start a task that sleeps for ``delay_seconds`` then awaits ``job``."""
        task = asyncio.get_running_loop().create_task(
            self._run_later(delay_seconds, job)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait until every job deferred so far has finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    @staticmethod
    async def _run_later(delay_seconds: float, job: DeferredJob) -> None:
        await asyncio.sleep(delay_seconds)
        await job()


class CheckScheduler:
    """Schedule exactly one deferred verification per creation event.

    Scheduling is fire-and-forget: the caller gets no handle, cannot cancel
    the check, and never learns its outcome.
    """

    def __init__(
        self,
        verifier: Verifier,
        deferral: Deferral,
        *,
        clock: cabc.Callable[[], dt.datetime] = utcnow,
        event_logger: CheckEventLogger | None = None,
    ) -> None:
        self._verifier = verifier
        self._deferral = deferral
        self._clock = clock
        self._events = event_logger or CheckEventLogger()

    def schedule(self, event: CreationEvent, delay: dt.timedelta | float) -> None:
        """Arrange for the verifier to run ``event`` once after ``delay``.

        Raises
        ------
        ValueError
            If ``delay`` is negative, not a number, or longer than
            :data:`~teamwatch.verification.models.MAX_DELAY_SECONDS`.

        """
        delay_seconds = check_delay_seconds(
            delay.total_seconds() if isinstance(delay, dt.timedelta) else float(delay)
        )

        check = PendingCheck(
            repository_id=event.repository_id,
            creator_login=event.creator_login,
            fire_at=self._clock() + dt.timedelta(seconds=delay_seconds),
        )
        self._events.log_check_scheduled(check, event.repository_name, delay_seconds)
        self._deferral.defer(delay_seconds, lambda: self._fire(check, event))

    async def _fire(self, check: PendingCheck, event: CreationEvent) -> None:
        self._events.log_check_fired(check)
        try:
            await self._verifier.run(event)
        except Exception as exc:  # noqa: BLE001 - nothing awaits a deferred check
            self._events.log_check_crashed(check.repository_id, exc)
