"""GitHub REST client used by the deferred verification pipeline."""

from __future__ import annotations

import dataclasses
import typing as typ
from urllib.parse import quote

import httpx
import msgspec

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import CreatedIssue, RepositoryRecord, TeamAssociationResult


class GitHubPlatformClient(typ.Protocol):
    """The three platform operations the verification pipeline depends on."""

    async def get_repository(self, repository_id: int) -> RepositoryRecord:
        """Resolve a repository by its immutable numeric id."""
        ...

    async def list_teams(self, owner: str, repo: str) -> TeamAssociationResult:
        """Return the teams that currently have access to ``owner/repo``."""
        ...

    async def create_issue(
        self, owner: str, repo: str, *, title: str, body: str
    ) -> CreatedIssue:
        """Open an issue on ``owner/repo``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    api_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "teamwatch/0.1"
    teams_page_size: int = 100


class _OwnerPayload(msgspec.Struct):
    login: str


class _RepositoryPayload(msgspec.Struct):
    id: int
    name: str
    owner: _OwnerPayload


class _TeamPayload(msgspec.Struct):
    name: str


class _IssuePayload(msgspec.Struct):
    number: int
    html_url: str


_HTTP_ERROR_STATUS_THRESHOLD = 400
_API_VERSION = "2022-11-28"


T = typ.TypeVar("T")


def _decode(content: bytes, payload_type: type[T], *, field: str) -> T:
    """Decode a JSON body into ``payload_type`` or raise a shape error."""
    try:
        return msgspec.json.decode(content, type=payload_type)
    except msgspec.ValidationError as exc:
        raise GitHubResponseShapeError.missing(f"{field} ({exc})") from exc
    except msgspec.DecodeError as exc:
        raise GitHubResponseShapeError.missing(field) from exc


def _error_detail(response: httpx.Response) -> str | None:
    """Return GitHub's ``message`` field from an error body when present."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str):
            return message
    return None


class GitHubRestClient:
    """httpx-backed implementation of :class:`GitHubPlatformClient`.

    One instance is shared by every pending check; ``httpx.AsyncClient``
    pools connections and is safe to use from concurrent tasks.
    """

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._base_url = config.api_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {config.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _API_VERSION,
            "User-Agent": config.user_agent,
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers=self._headers,
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def get_repository(self, repository_id: int) -> RepositoryRecord:
        """Fetch ``GET /repositories/{id}``.

        The numeric id survives renames and transfers, so the returned owner
        and name reflect the repository as it is now.
        """
        response = await self._request("GET", f"/repositories/{repository_id}")
        payload = _decode(response.content, _RepositoryPayload, field="repository")
        return RepositoryRecord(
            id=payload.id,
            owner_login=payload.owner.login,
            name=payload.name,
        )

    async def list_teams(self, owner: str, repo: str) -> TeamAssociationResult:
        """Fetch ``GET /repos/{owner}/{repo}/teams``, following pagination."""
        path: str | None = f"{self._repo_path(owner, repo)}/teams"
        params: dict[str, typ.Any] | None = {"per_page": self._config.teams_page_size}
        names: list[str] = []
        while path is not None:
            response = await self._request("GET", path, params=params)
            teams = _decode(response.content, list[_TeamPayload], field="teams")
            names.extend(team.name for team in teams)
            next_link = response.links.get("next", {}).get("url")
            # The next link already embeds the query string.
            path, params = (next_link, None) if next_link else (None, None)
        return TeamAssociationResult(team_names=tuple(names))

    async def create_issue(
        self, owner: str, repo: str, *, title: str, body: str
    ) -> CreatedIssue:
        """Create an issue with ``POST /repos/{owner}/{repo}/issues``."""
        response = await self._request(
            "POST",
            f"{self._repo_path(owner, repo)}/issues",
            json={"title": title, "body": body},
        )
        payload = _decode(response.content, _IssuePayload, field="issue")
        return CreatedIssue(number=payload.number, html_url=payload.html_url)

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, typ.Any] | None = None,
        json: dict[str, typ.Any] | None = None,
    ) -> httpx.Response:
        """Send a request and convert transport and HTTP failures."""
        url = path if path.startswith("http") else f"{self._base_url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            raise GitHubAPIError.transport_error(method, path, exc) from exc
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(
                method, path, response.status_code, _error_detail(response)
            )
        return response
