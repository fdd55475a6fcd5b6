"""Unit tests for remediation issue filing."""

from __future__ import annotations

import pytest

from teamwatch.github.errors import GitHubAPIError
from teamwatch.github.models import CreatedIssue
from teamwatch.verification import ISSUE_TITLE, IssueNotifier, VerificationSettings
from tests.helpers.fakes import FakeGitHubClient, IssueRequest, RecordingLogger


@pytest.mark.asyncio
async def test_file_creates_issue_with_mention(
    github_client: FakeGitHubClient,
    settings: VerificationSettings,
    check_logs: RecordingLogger,
) -> None:
    """The issue body mentions the creator before the template."""
    notifier = IssueNotifier(github_client, settings)

    issue = await notifier.file(1296269, "acme", "new-service", "octocat")

    assert issue == CreatedIssue(
        number=1, html_url="https://github.com/acme/new-service/issues/1"
    ), "expected the created issue to be returned"
    assert github_client.issues == [
        IssueRequest(
            owner="acme",
            repo="new-service",
            title=ISSUE_TITLE,
            body=settings.render_issue_body("octocat"),
        )
    ], "unexpected issue request"
    assert check_logs.messages("INFO") == [
        "[issue.filed] Created an issue for repository ID 1296269 "
        "(new-service): https://github.com/acme/new-service/issues/1"
    ], "expected one success log line"


@pytest.mark.asyncio
async def test_file_returns_none_on_failure(
    github_client: FakeGitHubClient,
    settings: VerificationSettings,
    check_logs: RecordingLogger,
) -> None:
    """Failures are logged with their category and swallowed."""
    github_client.issue_error = GitHubAPIError.transport_error(
        "POST", "/repos/acme/new-service/issues", TimeoutError("timed out")
    )
    notifier = IssueNotifier(github_client, settings)

    issue = await notifier.file(1296269, "acme", "new-service", "octocat")

    assert issue is None, "expected no issue"
    [message] = check_logs.messages("ERROR")
    assert message.startswith(
        "[issue.failed] Failed to create an issue for repository ID 1296269 "
        "(new-service): GitHub POST /repos/acme/new-service/issues failed: "
        "timed out"
    ), "expected the failure in the log"
    assert message.endswith(
        "error_type=GitHubAPIError error_category=transient"
    ), "expected transport failures to be transient"


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(
    github_client: FakeGitHubClient, settings: VerificationSettings
) -> None:
    """Only GitHub call failures are absorbed by the notifier."""
    github_client.issue_error = KeyError("bug")
    notifier = IssueNotifier(github_client, settings)

    with pytest.raises(KeyError):
        await notifier.file(1296269, "acme", "new-service", "octocat")
