"""Remediation issues for repositories without a team."""

from __future__ import annotations

import typing as typ

from teamwatch.github.errors import GITHUB_CALL_ERRORS

from .models import ISSUE_TITLE
from .observability import CheckEventLogger

if typ.TYPE_CHECKING:
    from teamwatch.github.client import GitHubPlatformClient
    from teamwatch.github.models import CreatedIssue

    from .models import VerificationSettings


class IssueNotifier:
    """File one issue asking the creator to associate a team.

    Filing is best-effort and not idempotent: every call that succeeds
    creates a new issue. The pipeline calls it at most once per check.
    """

    def __init__(
        self,
        client: GitHubPlatformClient,
        settings: VerificationSettings,
        *,
        event_logger: CheckEventLogger | None = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self._events = event_logger or CheckEventLogger()

    async def file(
        self, repository_id: int, owner: str, repo: str, creator_login: str
    ) -> CreatedIssue | None:
        """Create the remediation issue on ``owner/repo``.

        Returns the created issue, or ``None`` when the request failed. The
        failure is logged and never retried.
        """
        try:
            issue = await self._client.create_issue(
                owner,
                repo,
                title=ISSUE_TITLE,
                body=self._settings.render_issue_body(creator_login),
            )
        except GITHUB_CALL_ERRORS as exc:
            self._events.log_issue_failed(repository_id, repo, exc)
            return None

        self._events.log_issue_filed(repository_id, repo, issue)
        return issue
