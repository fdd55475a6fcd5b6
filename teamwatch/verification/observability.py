"""Structured log events for the deferred verification pipeline.

Operators observe check outcomes only through logs, so every transition
that matters is emitted here with a stable bracketed event tag followed by
the human-readable message and ``key=value`` fields suitable for log
aggregators.
"""

from __future__ import annotations

import enum
import typing as typ

from teamwatch.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)
from teamwatch.logging import (
    format_log_message,
    get_logger,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    from teamwatch.github.models import (
        CreatedIssue,
        RepositoryRecord,
        TeamAssociationResult,
    )

    from .models import PendingCheck

logger = get_logger(__name__)

_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_NOT_FOUND = 404


class CheckEventType(enum.StrEnum):
    """Structured log event types for verification observability."""

    EVENT_IGNORED = "event.ignored"
    CHECK_SCHEDULED = "check.scheduled"
    CHECK_FIRED = "check.fired"
    CHECK_SKIPPED = "check.skipped"
    CHECK_COMPLIANT = "check.compliant"
    CHECK_NO_TEAMS = "check.no_teams"
    CHECK_FAILED = "check.failed"
    CHECK_CRASHED = "check.crashed"
    CHECKS_DROPPED = "check.dropped"
    ISSUE_FILED = "issue.filed"
    ISSUE_FAILED = "issue.failed"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSIENT = "transient"
    NOT_FOUND = "not_found"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class CheckStage(enum.StrEnum):
    """External call that failed during a check."""

    REPOSITORY = "repository"
    TEAMS = "teams"


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception raised by the GitHub client."""
    if isinstance(exc, GitHubAPIError):
        status = exc.status_code
        if status is None or status >= _HTTP_SERVER_ERROR_THRESHOLD:
            return ErrorCategory.TRANSIENT
        if status == _HTTP_NOT_FOUND:
            return ErrorCategory.NOT_FOUND
        return ErrorCategory.CLIENT_ERROR
    if isinstance(exc, GitHubResponseShapeError):
        return ErrorCategory.SCHEMA_DRIFT
    if isinstance(exc, GitHubConfigError):
        return ErrorCategory.CONFIGURATION
    return ErrorCategory.UNKNOWN


class CheckEventLogger:
    """Emit structured verification events via femtologging."""

    def log_event_ignored(self, reason: str, *, action: str | None = None) -> None:
        """Log a webhook delivery that does not start a check."""
        log_debug(
            logger,
            "[%s] reason=%s action=%s",
            CheckEventType.EVENT_IGNORED,
            reason,
            action,
        )

    def log_public_repository_ignored(
        self, creator_login: str, repository_id: int, repository_name: str
    ) -> None:
        """Log a created repository that is public and therefore not tracked."""
        log_info(
            logger,
            "[%s] %s created a new public repository %d (%s), ignored",
            CheckEventType.EVENT_IGNORED,
            creator_login,
            repository_id,
            repository_name,
        )

    def log_check_scheduled(
        self, check: PendingCheck, repository_name: str, delay_seconds: float
    ) -> None:
        """Log a check accepted by the scheduler."""
        log_info(
            logger,
            "[%s] %s created a new repository %d (%s). "
            "Check will be performed in %g seconds. fire_at=%s",
            CheckEventType.CHECK_SCHEDULED,
            check.creator_login,
            check.repository_id,
            repository_name,
            delay_seconds,
            check.fire_at.isoformat(),
        )

    def log_check_fired(self, check: PendingCheck) -> None:
        """Log the start of a check at its fire time."""
        log_debug(
            logger,
            "[%s] repository_id=%d creator=%s fire_at=%s",
            CheckEventType.CHECK_FIRED,
            check.repository_id,
            check.creator_login,
            check.fire_at.isoformat(),
        )

    def log_not_allowed(self, record: RepositoryRecord) -> None:
        """Log a repository owned by an account outside the allow-list."""
        log_info(
            logger,
            "[%s] Repository ID %d (%s): Not in allowed organizations",
            CheckEventType.CHECK_SKIPPED,
            record.id,
            record.slug,
        )

    def log_teams_associated(
        self, record: RepositoryRecord, teams: TeamAssociationResult
    ) -> None:
        """Log a repository that already has team associations."""
        log_info(
            logger,
            "[%s] Repository ID %d (%s): Teams associated: %s",
            CheckEventType.CHECK_COMPLIANT,
            record.id,
            record.name,
            ", ".join(teams.team_names),
        )

    def log_no_teams(self, record: RepositoryRecord) -> None:
        """Log a repository without any team association."""
        log_info(
            logger,
            "[%s] Repository ID %d (%s): No teams associated",
            CheckEventType.CHECK_NO_TEAMS,
            record.id,
            record.name,
        )

    def log_check_failed(
        self, repository_id: int, stage: CheckStage, error: BaseException
    ) -> None:
        """Log an external read failure that terminated a check."""
        log_error(
            logger,
            "[%s] Failed to check team association for repository ID %d: %s "
            "stage=%s error_type=%s error_category=%s",
            CheckEventType.CHECK_FAILED,
            repository_id,
            str(error),
            stage,
            type(error).__name__,
            categorize_error(error),
        )

    def log_check_crashed(self, repository_id: int, error: BaseException) -> None:
        """Log an unexpected exception escaping a deferred check."""
        log_exception(
            logger,
            format_log_message(
                "[%s] Unexpected error in check for repository ID %d: %s",
                CheckEventType.CHECK_CRASHED,
                repository_id,
                str(error),
            ),
            error,
        )

    def log_issue_filed(
        self, repository_id: int, repo: str, issue: CreatedIssue
    ) -> None:
        """Log a remediation issue that was created."""
        log_info(
            logger,
            "[%s] Created an issue for repository ID %d (%s): %s",
            CheckEventType.ISSUE_FILED,
            repository_id,
            repo,
            issue.html_url,
        )

    def log_issue_failed(
        self, repository_id: int, repo: str, error: BaseException
    ) -> None:
        """Log a failed attempt to create a remediation issue."""
        log_error(
            logger,
            "[%s] Failed to create an issue for repository ID %d (%s): %s "
            "error_type=%s error_category=%s",
            CheckEventType.ISSUE_FAILED,
            repository_id,
            repo,
            str(error),
            type(error).__name__,
            categorize_error(error),
        )

    def log_checks_dropped(self, count: int) -> None:
        """Log checks that were still pending when the process stopped."""
        log_warning(
            logger,
            "[%s] Shutting down with %d pending check(s); they will not run",
            CheckEventType.CHECKS_DROPPED,
            count,
        )
