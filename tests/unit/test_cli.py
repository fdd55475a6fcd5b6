"""Unit tests for the ``teamwatch`` command-line entrypoint."""

from __future__ import annotations

import os
import typing as typ

import pytest

from teamwatch import __version__, cli

if typ.TYPE_CHECKING:
    from pathlib import Path

    from teamwatch.config import TeamwatchConfig


class _ServeRecorder:
    """Stands in for ``serve`` so no server is started."""

    def __init__(self) -> None:
        self.configs: list[TeamwatchConfig] = []

    def __call__(self, config: TeamwatchConfig) -> None:
        self.configs.append(config)


@pytest.fixture
def served(monkeypatch: pytest.MonkeyPatch) -> _ServeRecorder:
    """Replace ``serve`` and logging setup with inert doubles."""
    recorder = _ServeRecorder()
    monkeypatch.setattr(cli, "serve", recorder)
    monkeypatch.setattr(cli, "configure_logging", lambda _level: ("INFO", False))
    return recorder


@pytest.fixture
def with_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide a GitHub token through the environment."""
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_example")


@pytest.mark.usefixtures("with_token")
class TestMainSuccess:
    """Tests for a valid command line."""

    def test_serves_with_parsed_options(self, served: _ServeRecorder) -> None:
        """Options and organizations reach the served configuration."""
        exit_code = cli.main(["--port", "8080", "--delay", "60", "acme", "initech"])

        assert exit_code == 0, "expected a clean exit"
        [config] = served.configs
        assert config.port == 8080, "wrong port"  # noqa: PLR2004
        assert config.delay_seconds == 60.0, "wrong delay"  # noqa: PLR2004
        assert config.allowed_organizations == frozenset({"acme", "initech"}), (
            "wrong organizations"
        )

    def test_defaults(self, served: _ServeRecorder) -> None:
        """Port 3000 and a 300 second delay are used by default."""
        cli.main(["acme"])

        [config] = served.configs
        assert config.port == 3000, "expected the default port"  # noqa: PLR2004
        assert config.delay_seconds == 300.0, "wrong default delay"  # noqa: PLR2004

    def test_exports_configuration_for_workers(self, served: _ServeRecorder) -> None:
        """Server workers rebuild the configuration from the environment."""
        cli.main(["-p", "8081", "-d", "5", "initech", "acme"])

        assert served.configs, "expected serve to be called"
        assert os.environ["TEAMWATCH_ORGANIZATIONS"] == "acme,initech", (
            "expected sorted organizations"
        )
        assert os.environ["TEAMWATCH_PORT"] == "8081", "expected the port"
        assert os.environ["TEAMWATCH_DELAY_SECONDS"] == "5.0", "expected the delay"

    def test_markdown_file_option(
        self, served: _ServeRecorder, tmp_path: Path
    ) -> None:
        """The markdown file replaces the default issue template."""
        template = tmp_path / "issue.md"
        template.write_text("Please add a team.", encoding="utf-8")

        cli.main(["-m", str(template), "acme"])

        [config] = served.configs
        assert config.issue_template() == "Please add a team.", (
            "expected the file contents"
        )


class TestMainErrors:
    """Tests for invalid command lines."""

    @pytest.mark.parametrize(
        ("argv", "message"),
        [
            ([], "At least one organization must be specified"),
            (["-p", "0", "acme"], "Port number must be in the range 1-65535"),
            (["-p", "65536", "acme"], "Port number must be in the range 1-65535"),
            (["-p", "web", "acme"], "port must be an integer, got: 'web'"),
            (["-d", "-5", "acme"], "delay must be zero or positive, got: '-5'"),
            (["-d", "later", "acme"], "delay must be a number, got: 'later'"),
            (
                ["-d", "inf", "acme"],
                "delay must be at most 31536000 seconds, got: 'inf'",
            ),
        ],
    )
    @pytest.mark.usefixtures("with_token")
    def test_invalid_arguments_exit_with_one(
        self,
        served: _ServeRecorder,
        capsys: pytest.CaptureFixture[str],
        argv: list[str],
        message: str,
    ) -> None:
        """Invalid arguments print an error and never start the server."""
        exit_code = cli.main(argv)

        assert exit_code == 1, "expected exit status 1"
        assert capsys.readouterr().err == f"Error: {message}\n", "wrong error"
        assert served.configs == [], "the server must not start"

    def test_missing_token_exits_with_one(
        self, served: _ServeRecorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """GITHUB_TOKEN is required."""
        exit_code = cli.main(["acme"])

        assert exit_code == 1, "expected exit status 1"
        assert capsys.readouterr().err == (
            "Error: the environment variable GITHUB_TOKEN is not specified\n"
        ), "wrong error"
        assert served.configs == [], "the server must not start"

    @pytest.mark.usefixtures("with_token")
    def test_missing_markdown_file_exits_with_one(
        self,
        served: _ServeRecorder,
        capsys: pytest.CaptureFixture[str],
        tmp_path: Path,
    ) -> None:
        """An unreadable markdown file is rejected before serving."""
        exit_code = cli.main(["-m", str(tmp_path / "missing.md"), "acme"])

        assert exit_code == 1, "expected exit status 1"
        assert capsys.readouterr().err.startswith(
            "Error: cannot read markdown file"
        ), "wrong error"
        assert served.configs == [], "the server must not start"


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    """--version prints the package version and exits."""
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])

    assert excinfo.value.code == 0, "expected a clean exit"
    assert capsys.readouterr().out == f"teamwatch {__version__}\n", "wrong version"
