"""Team-association verification run when a deferred check fires.

A check is a strictly sequential state machine::

    FETCHING -> ORG_FILTERING -> TEAM_QUERYING -> DECIDING -> FILING

``FETCHING``, ``ORG_FILTERING``, ``TEAM_QUERYING`` and ``FILING`` may end the
check in ``FAILED``; there are no backward or retry edges.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from teamwatch.github.errors import GITHUB_CALL_ERRORS

from .observability import CheckEventLogger, CheckStage

if typ.TYPE_CHECKING:
    from teamwatch.github.client import GitHubPlatformClient
    from teamwatch.github.models import (
        CreatedIssue,
        RepositoryRecord,
        TeamAssociationResult,
    )

    from .models import CreationEvent, VerificationSettings
    from .notifier import IssueNotifier


class CheckState(enum.StrEnum):
    """States a single verification passes through."""

    FETCHING = "fetching"
    ORG_FILTERING = "org_filtering"
    TEAM_QUERYING = "team_querying"
    DECIDING = "deciding"
    FILING = "filing"
    SKIPPED = "skipped"
    COMPLIANT = "compliant"
    ISSUE_FILED = "issue_filed"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[CheckState, frozenset[CheckState]] = {
    CheckState.FETCHING: frozenset({CheckState.ORG_FILTERING, CheckState.FAILED}),
    CheckState.ORG_FILTERING: frozenset(
        {CheckState.TEAM_QUERYING, CheckState.SKIPPED, CheckState.FAILED}
    ),
    CheckState.TEAM_QUERYING: frozenset({CheckState.DECIDING, CheckState.FAILED}),
    CheckState.DECIDING: frozenset({CheckState.COMPLIANT, CheckState.FILING}),
    CheckState.FILING: frozenset({CheckState.ISSUE_FILED, CheckState.FAILED}),
    CheckState.SKIPPED: frozenset(),
    CheckState.COMPLIANT: frozenset(),
    CheckState.ISSUE_FILED: frozenset(),
    CheckState.FAILED: frozenset(),
}

TERMINAL_STATES = frozenset(
    state for state, targets in ALLOWED_TRANSITIONS.items() if not targets
)


class IllegalTransitionError(ValueError):
    """Raised when a check attempts a transition outside the state graph."""

    def __init__(self, current: CheckState, target: CheckState) -> None:
        self.current = current
        self.target = target
        super().__init__(f"illegal check transition {current} -> {target}")


def transition(current: CheckState, target: CheckState) -> CheckState:
    """Return ``target`` if the graph allows moving there from ``current``."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise IllegalTransitionError(current, target)
    return target


@dataclasses.dataclass(frozen=True, slots=True)
class CheckOutcome:
    """What a finished check observed and did."""

    state: CheckState
    repository: RepositoryRecord | None = None
    teams: TeamAssociationResult | None = None
    issue: CreatedIssue | None = None
    failed_stage: CheckStage | None = None

    @property
    def issue_filed(self) -> bool:
        """Return True when the check created a remediation issue."""
        return self.state is CheckState.ISSUE_FILED


class TeamVerifier:
    """Re-resolve a new repository and file an issue if it has no team."""

    def __init__(
        self,
        client: GitHubPlatformClient,
        settings: VerificationSettings,
        notifier: IssueNotifier,
        *,
        event_logger: CheckEventLogger | None = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self._notifier = notifier
        self._events = event_logger or CheckEventLogger()

    async def run(self, event: CreationEvent) -> CheckOutcome:
        """Run one verification for ``event`` and return its outcome.

        External failures are logged and reported through the outcome; they
        are never raised to the caller.
        """
        state = CheckState.FETCHING
        repository_id = event.repository_id
        try:
            record = await self._client.get_repository(repository_id)
        except GITHUB_CALL_ERRORS as exc:
            return self._fail(state, repository_id, CheckStage.REPOSITORY, exc)

        state = transition(state, CheckState.ORG_FILTERING)
        if not self._settings.is_allowed(record.owner_login):
            self._events.log_not_allowed(record)
            return CheckOutcome(
                state=transition(state, CheckState.SKIPPED), repository=record
            )

        state = transition(state, CheckState.TEAM_QUERYING)
        try:
            teams = await self._client.list_teams(record.owner_login, record.name)
        except GITHUB_CALL_ERRORS as exc:
            outcome = self._fail(state, repository_id, CheckStage.TEAMS, exc)
            return dataclasses.replace(outcome, repository=record)

        state = transition(state, CheckState.DECIDING)
        if not teams.is_empty:
            self._events.log_teams_associated(record, teams)
            return CheckOutcome(
                state=transition(state, CheckState.COMPLIANT),
                repository=record,
                teams=teams,
            )

        self._events.log_no_teams(record)
        state = transition(state, CheckState.FILING)
        issue = await self._notifier.file(
            repository_id, record.owner_login, record.name, event.creator_login
        )
        final = CheckState.ISSUE_FILED if issue is not None else CheckState.FAILED
        return CheckOutcome(
            state=transition(state, final),
            repository=record,
            teams=teams,
            issue=issue,
        )

    def _fail(
        self,
        state: CheckState,
        repository_id: int,
        stage: CheckStage,
        exc: Exception,
    ) -> CheckOutcome:
        self._events.log_check_failed(repository_id, stage, exc)
        return CheckOutcome(
            state=transition(state, CheckState.FAILED), failed_stage=stage
        )
