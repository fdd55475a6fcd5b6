"""GitHub REST client and the models it returns."""

from __future__ import annotations

from .client import GitHubPlatformClient, GitHubRestClient, GitHubRestConfig
from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import CreatedIssue, RepositoryRecord, TeamAssociationResult

__all__ = [
    "CreatedIssue",
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubPlatformClient",
    "GitHubResponseShapeError",
    "GitHubRestClient",
    "GitHubRestConfig",
    "RepositoryRecord",
    "TeamAssociationResult",
]
