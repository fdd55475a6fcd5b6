"""Unit tests for environment-driven configuration."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from teamwatch.config import (
    DEFAULT_DELAY_SECONDS,
    DEFAULT_HOST,
    DEFAULT_PORT,
    TeamwatchConfig,
    TeamwatchConfigError,
    parse_delay,
    parse_organizations,
    parse_port,
)
from teamwatch.verification import DEFAULT_ISSUE_TEMPLATE, MAX_DELAY_SECONDS

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@pytest.fixture
def set_env(monkeypatch: pytest.MonkeyPatch) -> cabc.Callable[..., None]:
    """Set teamwatch variables; GITHUB_TOKEN and organizations by default."""

    def _set(**values: str) -> None:
        defaults = {
            "GITHUB_TOKEN": "ghp_example",
            "TEAMWATCH_ORGANIZATIONS": "acme",
        }
        for name, value in (defaults | values).items():
            monkeypatch.setenv(name, value)

    return _set


class TestFromEnv:
    """Tests for TeamwatchConfig.from_env."""

    def test_defaults(self, set_env: cabc.Callable[..., None]) -> None:
        """Only the token and organizations are required."""
        set_env()

        config = TeamwatchConfig.from_env()

        assert config.github_token == "ghp_example", "unexpected token"
        assert config.allowed_organizations == frozenset({"acme"}), "wrong orgs"
        assert config.delay_seconds == DEFAULT_DELAY_SECONDS, "wrong default delay"
        assert config.port == DEFAULT_PORT, "wrong default port"
        assert config.host == DEFAULT_HOST, "wrong default host"
        assert config.markdown_file is None, "expected no markdown file"
        assert config.webhook_secret is None, "expected no webhook secret"

    def test_reads_optional_variables(
        self, set_env: cabc.Callable[..., None]
    ) -> None:
        """Optional variables override the defaults."""
        set_env(
            TEAMWATCH_ORGANIZATIONS="acme, initech,,",
            TEAMWATCH_DELAY_SECONDS="12.5",
            TEAMWATCH_PORT="8080",
            TEAMWATCH_HOST="127.0.0.1",
            TEAMWATCH_GITHUB_API_URL="https://ghe.example.test/api/v3",
            TEAMWATCH_WEBHOOK_SECRET="s3cret",
            TEAMWATCH_LOG_LEVEL="debug",
        )

        config = TeamwatchConfig.from_env()

        assert config.allowed_organizations == frozenset({"acme", "initech"}), (
            "expected blank entries to be dropped"
        )
        assert config.delay_seconds == 12.5, "wrong delay"  # noqa: PLR2004
        assert config.port == 8080, "wrong port"  # noqa: PLR2004
        assert config.host == "127.0.0.1", "wrong host"
        assert config.github_rest_config().api_url == (
            "https://ghe.example.test/api/v3"
        ), "wrong API URL"
        assert config.webhook_secret == "s3cret", "wrong secret"
        assert config.log_level == "debug", "expected the raw level"

    def test_missing_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """GITHUB_TOKEN is required."""
        monkeypatch.setenv("TEAMWATCH_ORGANIZATIONS", "acme")

        with pytest.raises(
            TeamwatchConfigError,
            match="the environment variable GITHUB_TOKEN is not specified",
        ):
            TeamwatchConfig.from_env()

    def test_missing_organizations(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """At least one organization is required."""
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_example")

        with pytest.raises(TeamwatchConfigError, match="At least one organization"):
            TeamwatchConfig.from_env()

    def test_overrides_replace_environment(
        self, set_env: cabc.Callable[..., None]
    ) -> None:
        """Keyword overrides win over environment values."""
        set_env(TEAMWATCH_PORT="not-a-port", TEAMWATCH_DELAY_SECONDS="-5")

        config = TeamwatchConfig.from_env(
            port=9000,
            delay_seconds=1.0,
            allowed_organizations=frozenset({"initech"}),
        )

        assert config.port == 9000, "expected the port override"  # noqa: PLR2004
        assert config.delay_seconds == 1.0, "expected the delay override"
        assert config.allowed_organizations == frozenset({"initech"}), (
            "expected the organization override"
        )

    @pytest.mark.parametrize(
        ("name", "value", "message"),
        [
            ("TEAMWATCH_PORT", "0", "Port number must be in the range 1-65535"),
            ("TEAMWATCH_PORT", "70000", "Port number must be in the range 1-65535"),
            ("TEAMWATCH_PORT", "http", "TEAMWATCH_PORT must be an integer"),
            ("TEAMWATCH_DELAY_SECONDS", "-1", "must be zero or positive"),
            ("TEAMWATCH_DELAY_SECONDS", "nan", "must be zero or positive"),
            ("TEAMWATCH_DELAY_SECONDS", "soon", "must be a number"),
            ("TEAMWATCH_DELAY_SECONDS", "inf", "must be at most 31536000 seconds"),
            ("TEAMWATCH_DELAY_SECONDS", "1e12", "must be at most 31536000 seconds"),
        ],
    )
    def test_invalid_values(
        self,
        set_env: cabc.Callable[..., None],
        name: str,
        value: str,
        message: str,
    ) -> None:
        """Invalid numeric settings are rejected at startup."""
        set_env(**{name: value})

        with pytest.raises(TeamwatchConfigError, match=message):
            TeamwatchConfig.from_env()


class TestIssueTemplate:
    """Tests for markdown template loading."""

    def test_default_template(self, set_env: cabc.Callable[..., None]) -> None:
        """Without a markdown file the built-in template is used."""
        set_env()

        assert TeamwatchConfig.from_env().issue_template() == DEFAULT_ISSUE_TEMPLATE

    def test_markdown_file_template(
        self, set_env: cabc.Callable[..., None], tmp_path: Path
    ) -> None:
        """The markdown file contents become the issue template."""
        template = tmp_path / "issue.md"
        template.write_text("## Missing team\nAdd one.\n", encoding="utf-8")
        set_env(TEAMWATCH_MARKDOWN_FILE=str(template))

        settings = TeamwatchConfig.from_env().verification_settings()

        assert settings.issue_template == "## Missing team\nAdd one.\n", (
            "expected the file contents"
        )

    def test_unreadable_markdown_file(
        self, set_env: cabc.Callable[..., None], tmp_path: Path
    ) -> None:
        """A missing markdown file is a configuration error."""
        set_env(TEAMWATCH_MARKDOWN_FILE=str(tmp_path / "missing.md"))
        config = TeamwatchConfig.from_env()

        with pytest.raises(TeamwatchConfigError, match="cannot read markdown file"):
            config.issue_template()


class TestToEnv:
    """Tests for exporting configuration to worker processes."""

    def test_round_trips_through_from_env(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Exported variables rebuild an equal configuration."""
        config = TeamwatchConfig(
            github_token="ghp_example",
            allowed_organizations=frozenset({"acme", "initech"}),
            delay_seconds=0.5,
            markdown_file=tmp_path / "issue.md",
            port=8081,
            webhook_secret="s3cret",
        )
        for name, value in config.to_env().items():
            monkeypatch.setenv(name, value)

        assert TeamwatchConfig.from_env() == config, "expected an equal config"


class TestParsers:
    """Tests for the standalone parsing helpers."""

    def test_parse_port_names_source(self) -> None:
        """The error names where the bad value came from."""
        with pytest.raises(TeamwatchConfigError, match="^port must be an integer"):
            parse_port("abc", source="port")

    def test_parse_delay_accepts_zero(self) -> None:
        """A zero delay checks immediately."""
        assert parse_delay("0") == 0.0, "expected zero"

    def test_parse_delay_accepts_upper_bound(self) -> None:
        """The longest allowed grace period is one year."""
        assert parse_delay(str(MAX_DELAY_SECONDS)) == float(MAX_DELAY_SECONDS), (
            "expected the bound itself to be accepted"
        )

    def test_unbounded_delay_override_is_rejected(
        self, set_env: cabc.Callable[..., None]
    ) -> None:
        """Overrides go through the same delay validation as the environment."""
        set_env()

        with pytest.raises(TeamwatchConfigError, match="^delay must be at most"):
            TeamwatchConfig.from_env(delay_seconds=float("inf"))

    def test_parse_organizations_strips_whitespace(self) -> None:
        """Organization names are trimmed."""
        assert parse_organizations(" acme ,initech") == frozenset(
            {"acme", "initech"}
        ), "expected trimmed names"
