"""Sprint management over the GitHub and ZenHub REST APIs.

Both backends share one request layer: requests are signed with a
``token`` Authorization header, responses are classified into typed values
or typed errors, and issue search is exposed as a lazy paged iterator.
"""

from .errors import (
    BackendClientError,
    ConfigurationError,
    DeserializationError,
    NotFoundError,
    SprintOrchestratorError,
    TransportError,
    UnexpectedStatusError,
)
from .github import GitHubClient, IssueUpdate, MilestoneUpdate, SearchQueryBuilder
from .orchestrator import Sprint, SprintClient, get_sprint_client
from .paginate import PaginatedSearch
from .update import CLEAR, UNSET
from .zenhub import ZenhubClient

__all__ = [
    "BackendClientError",
    "CLEAR",
    "ConfigurationError",
    "DeserializationError",
    "GitHubClient",
    "IssueUpdate",
    "MilestoneUpdate",
    "NotFoundError",
    "PaginatedSearch",
    "SearchQueryBuilder",
    "Sprint",
    "SprintClient",
    "SprintOrchestratorError",
    "TransportError",
    "UNSET",
    "UnexpectedStatusError",
    "ZenhubClient",
    "get_sprint_client",
]
