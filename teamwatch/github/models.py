"""Typed domain models returned by the GitHub REST client."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryRecord:
    """Current canonical state of a repository, fetched by its numeric id."""

    id: int
    owner_login: str
    name: str

    @property
    def slug(self) -> str:
        """Return the GitHub-style owner/name identifier."""
        return f"{self.owner_login}/{self.name}"


@dataclasses.dataclass(frozen=True, slots=True)
class TeamAssociationResult:
    """Teams currently granted access to a repository, in API order."""

    team_names: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Return True when no team is associated with the repository."""
        return not self.team_names


@dataclasses.dataclass(frozen=True, slots=True)
class CreatedIssue:
    """Minimal metadata of an issue created through the REST API."""

    number: int
    html_url: str
