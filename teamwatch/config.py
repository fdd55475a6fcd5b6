"""Process configuration for the teamwatch service.

Usage
-----
Load configuration from the environment:

>>> import os
>>> os.environ["GITHUB_TOKEN"] = "ghp_example"
>>> os.environ["TEAMWATCH_ORGANIZATIONS"] = "acme,initech"
>>> config = TeamwatchConfig.from_env()
>>> sorted(config.allowed_organizations)
['acme', 'initech']

"""

from __future__ import annotations

import dataclasses as dc
import math
import os
import typing as typ
from pathlib import Path

from teamwatch.github.client import GitHubRestConfig
from teamwatch.github.errors import GitHubConfigError
from teamwatch.verification.models import (
    DEFAULT_ISSUE_TEMPLATE,
    MAX_DELAY_SECONDS,
    VerificationSettings,
)

DEFAULT_HOST = "0.0.0.0"  # noqa: S104 - webhook receiver listens on all interfaces
DEFAULT_PORT = 3000
DEFAULT_DELAY_SECONDS = 300.0
DEFAULT_GITHUB_API_URL = "https://api.github.com"

_MIN_PORT = 1
_MAX_PORT = 65535


class TeamwatchConfigError(ValueError):
    """Raised when startup configuration is missing or invalid."""


def parse_port(raw: str | int, *, source: str = "TEAMWATCH_PORT") -> int:
    """Return ``raw`` as a TCP port number in the range 1-65535."""
    try:
        port = int(raw)
    except ValueError as exc:
        msg = f"{source} must be an integer, got: {raw!r}"
        raise TeamwatchConfigError(msg) from exc
    if not (_MIN_PORT <= port <= _MAX_PORT):
        msg = f"Port number must be in the range {_MIN_PORT}-{_MAX_PORT}"
        raise TeamwatchConfigError(msg)
    return port


def parse_delay(raw: str | float, *, source: str = "TEAMWATCH_DELAY_SECONDS") -> float:
    """Return ``raw`` as a finite, non-negative number of seconds."""
    try:
        delay = float(raw)
    except ValueError as exc:
        msg = f"{source} must be a number, got: {raw!r}"
        raise TeamwatchConfigError(msg) from exc
    if delay < 0 or math.isnan(delay):
        msg = f"{source} must be zero or positive, got: {raw!r}"
        raise TeamwatchConfigError(msg)
    if delay > MAX_DELAY_SECONDS:
        msg = f"{source} must be at most {MAX_DELAY_SECONDS} seconds, got: {raw!r}"
        raise TeamwatchConfigError(msg)
    return delay


def parse_organizations(raw: str) -> frozenset[str]:
    """Split a comma-separated organization list, dropping blanks."""
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def read_markdown_file(path: Path) -> str:
    """Return the issue template stored in ``path``."""
    try:
        return path.resolve().read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"cannot read markdown file {path}: {exc.strerror or exc}"
        raise TeamwatchConfigError(msg) from exc


@dc.dataclass(frozen=True, slots=True)
class TeamwatchConfig:
    """Startup configuration for the webhook receiver and its checks.

    Attributes
    ----------
    github_token
        Token used for every GitHub REST call.
    allowed_organizations
        Organizations whose new private repositories are verified.
    delay_seconds
        Grace period before a new repository is checked.
    markdown_file
        Optional file holding the issue body template. When ``None`` the
        built-in template is used.
    host, port
        Bind address of the HTTP server.
    github_api_url
        REST API root, overridable for GitHub Enterprise Server.
    webhook_secret
        Optional secret used to verify ``X-Hub-Signature-256`` headers.
    log_level
        Raw log level; normalized when logging is configured.

    """

    github_token: str
    allowed_organizations: frozenset[str]
    delay_seconds: float = DEFAULT_DELAY_SECONDS
    markdown_file: Path | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    github_api_url: str = DEFAULT_GITHUB_API_URL
    webhook_secret: str | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate fields that cannot be expressed by their types."""
        if not self.github_token.strip():
            raise TeamwatchConfigError(str(GitHubConfigError.missing_token()))
        if not self.allowed_organizations:
            msg = "At least one organization must be specified"
            raise TeamwatchConfigError(msg)
        parse_port(self.port, source="port")
        parse_delay(self.delay_seconds, source="delay")

    @classmethod
    def from_env(cls, **overrides: typ.Any) -> TeamwatchConfig:
        """Create configuration from environment variables.

        Reads ``GITHUB_TOKEN`` and ``TEAMWATCH_ORGANIZATIONS`` (required)
        plus the optional ``TEAMWATCH_DELAY_SECONDS``,
        ``TEAMWATCH_MARKDOWN_FILE``, ``TEAMWATCH_HOST``, ``TEAMWATCH_PORT``,
        ``TEAMWATCH_GITHUB_API_URL``, ``TEAMWATCH_WEBHOOK_SECRET`` and
        ``TEAMWATCH_LOG_LEVEL``. Keyword ``overrides`` replace the value of
        the field they name before validation, so command-line arguments
        can stand in for a missing variable.

        Raises
        ------
        TeamwatchConfigError
            If a required value is missing or a value is invalid.

        """
        env = os.environ

        def _optional(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        fields: dict[str, typ.Any] = {
            "github_token": env.get("GITHUB_TOKEN", "").strip(),
            "allowed_organizations": parse_organizations(
                env.get("TEAMWATCH_ORGANIZATIONS", "")
            ),
            "host": _optional("TEAMWATCH_HOST") or DEFAULT_HOST,
            "github_api_url": _optional("TEAMWATCH_GITHUB_API_URL")
            or DEFAULT_GITHUB_API_URL,
            "webhook_secret": _optional("TEAMWATCH_WEBHOOK_SECRET"),
            "log_level": _optional("TEAMWATCH_LOG_LEVEL") or "INFO",
        }
        if "delay_seconds" not in overrides and (
            delay_raw := _optional("TEAMWATCH_DELAY_SECONDS")
        ):
            fields["delay_seconds"] = parse_delay(delay_raw)
        if "port" not in overrides and (port_raw := _optional("TEAMWATCH_PORT")):
            fields["port"] = parse_port(port_raw)
        if markdown_raw := _optional("TEAMWATCH_MARKDOWN_FILE"):
            fields["markdown_file"] = Path(markdown_raw)
        fields.update(overrides)
        return cls(**fields)

    def to_env(self) -> dict[str, str]:
        """Return the environment variables that reproduce this configuration."""
        env = {
            "GITHUB_TOKEN": self.github_token,
            "TEAMWATCH_ORGANIZATIONS": ",".join(sorted(self.allowed_organizations)),
            "TEAMWATCH_DELAY_SECONDS": repr(self.delay_seconds),
            "TEAMWATCH_HOST": self.host,
            "TEAMWATCH_PORT": str(self.port),
            "TEAMWATCH_GITHUB_API_URL": self.github_api_url,
            "TEAMWATCH_LOG_LEVEL": self.log_level,
        }
        if self.markdown_file is not None:
            env["TEAMWATCH_MARKDOWN_FILE"] = str(self.markdown_file)
        if self.webhook_secret is not None:
            env["TEAMWATCH_WEBHOOK_SECRET"] = self.webhook_secret
        return env

    def issue_template(self) -> str:
        """Return the markdown issue body template."""
        if self.markdown_file is None:
            return DEFAULT_ISSUE_TEMPLATE
        return read_markdown_file(self.markdown_file)

    def verification_settings(self) -> VerificationSettings:
        """Return the read-only settings bundle shared by every check."""
        return VerificationSettings(
            allowed_organizations=self.allowed_organizations,
            delay_seconds=self.delay_seconds,
            issue_template=self.issue_template(),
        )

    def github_rest_config(self) -> GitHubRestConfig:
        """Return the GitHub REST client configuration."""
        return GitHubRestConfig(token=self.github_token, api_url=self.github_api_url)
