"""Data carried through the deferred verification pipeline."""

from __future__ import annotations

import dataclasses
import math
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt

ISSUE_TITLE = "Please check team association"
DEFAULT_ISSUE_TEMPLATE = (
    "This repository is not associated with any team. Please check."
)
MAX_DELAY_SECONDS = 365 * 24 * 60 * 60


def check_delay_seconds(delay_seconds: float) -> float:
    """Return ``delay_seconds`` when it is a usable grace period.

    Raises
    ------
    ValueError
        If the delay is negative, not a number, or longer than
        :data:`MAX_DELAY_SECONDS`.

    """
    if math.isnan(delay_seconds) or delay_seconds < 0:
        msg = f"delay must be zero or positive, got: {delay_seconds}"
        raise ValueError(msg)
    if delay_seconds > MAX_DELAY_SECONDS:
        msg = (
            f"delay must be at most {MAX_DELAY_SECONDS} seconds, "
            f"got: {delay_seconds}"
        )
        raise ValueError(msg)
    return delay_seconds


@dataclasses.dataclass(frozen=True, slots=True)
class CreationEvent:
    """A validated "private repository created" notification.

    Attributes
    ----------
    repository_id
        GitHub's numeric repository id; stable across renames and transfers.
    creator_login
        Login of the account that created the repository.
    repository_name
        Name at creation time. Only used in log messages; the verifier
        re-resolves the current name from ``repository_id``.

    """

    repository_id: int
    creator_login: str
    repository_name: str = ""


@dataclasses.dataclass(frozen=True, slots=True)
class PendingCheck:
    """A verification scheduled to run once at ``fire_at``."""

    repository_id: int
    creator_login: str
    fire_at: dt.datetime


@dataclasses.dataclass(frozen=True, slots=True)
class VerificationSettings:
    """Read-only settings shared by every check.

    Attributes
    ----------
    allowed_organizations
        Owner logins eligible for verification. Repositories owned by any
        other account are never acted upon.
    delay_seconds
        Grace period between the creation event and the check.
    issue_template
        Markdown appended after the ``@creator`` mention in remediation
        issues.

    """

    allowed_organizations: frozenset[str]
    delay_seconds: float = 300.0
    issue_template: str = DEFAULT_ISSUE_TEMPLATE

    def __post_init__(self) -> None:
        """Reject settings the pipeline cannot operate with."""
        if not self.allowed_organizations:
            msg = "at least one organization must be specified"
            raise ValueError(msg)
        check_delay_seconds(self.delay_seconds)

    def is_allowed(self, owner_login: str) -> bool:
        """Return True when ``owner_login`` is in the allow-list."""
        return owner_login in self.allowed_organizations

    def render_issue_body(self, creator_login: str) -> str:
        """Return the issue body mentioning ``creator_login``."""
        return f"@{creator_login} {self.issue_template}"
