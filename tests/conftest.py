"""Shared pytest fixtures for the teamwatch test suite."""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt

import pytest

from teamwatch.github.models import RepositoryRecord
from teamwatch.verification.models import VerificationSettings
from tests.helpers.fakes import FakeGitHubClient, RecordingDeferral, RecordingLogger

_TEAMWATCH_ENV = (
    "GITHUB_TOKEN",
    "TEAMWATCH_ORGANIZATIONS",
    "TEAMWATCH_DELAY_SECONDS",
    "TEAMWATCH_MARKDOWN_FILE",
    "TEAMWATCH_HOST",
    "TEAMWATCH_PORT",
    "TEAMWATCH_GITHUB_API_URL",
    "TEAMWATCH_WEBHOOK_SECRET",
    "TEAMWATCH_LOG_LEVEL",
)

FIXED_NOW = dt.datetime(2025, 3, 1, 9, 30, tzinfo=dt.UTC)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove teamwatch variables inherited from the developer's shell."""
    for name in _TEAMWATCH_ENV:
        # Setting first records the variable, so values the CLI exports during
        # a test are undone at teardown.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def check_logs(monkeypatch: pytest.MonkeyPatch) -> RecordingLogger:
    """Capture every structured verification event."""
    recorder = RecordingLogger()
    monkeypatch.setattr("teamwatch.verification.observability.logger", recorder)
    return recorder


@pytest.fixture
def settings() -> VerificationSettings:
    """Settings allowing the ``acme`` organization with the default delay."""
    return VerificationSettings(allowed_organizations=frozenset({"acme"}))


@pytest.fixture
def github_client() -> FakeGitHubClient:
    """Fake GitHub client serving one ``acme`` repository with no teams."""
    client = FakeGitHubClient()
    client.add_repository(
        RepositoryRecord(id=1296269, owner_login="acme", name="new-service")
    )
    return client


@pytest.fixture
def deferral() -> RecordingDeferral:
    """Deferral that holds jobs until the test runs them."""
    return RecordingDeferral()


@pytest.fixture
def fixed_clock() -> cabc.Callable[[], dt.datetime]:
    """Clock that always returns :data:`FIXED_NOW`."""
    return lambda: FIXED_NOW
