"""GitHub REST client errors."""

from __future__ import annotations


class GitHubAPIError(RuntimeError):
    """Raised when a GitHub REST call fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(
        cls, method: str, path: str, status_code: int, detail: str | None = None
    ) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        message = f"GitHub {method} {path} returned HTTP {status_code}"
        if detail:
            message = f"{message}: {detail}"
        return cls(message, status_code=status_code)

    @classmethod
    def transport_error(cls, method: str, path: str, exc: Exception) -> GitHubAPIError:
        """Return an error for requests that never produced a response."""
        return cls(f"GitHub {method} {path} failed: {exc}")


class GitHubResponseShapeError(RuntimeError):
    """Raised when GitHub responses are missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"GitHub response missing expected field: {field}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("the environment variable GITHUB_TOKEN is not specified")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")


# Failures a single GitHub call can end with once the client is configured.
GITHUB_CALL_ERRORS: tuple[type[Exception], ...] = (
    GitHubAPIError,
    GitHubResponseShapeError,
)
