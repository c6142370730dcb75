"""GitHub REST API client and data contracts."""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from pydantic import BaseModel

from .client import BaseClient
from .models import SEARCH_PAGE_SIZE, SearchResults
from .paginate import PaginatedSearch
from .update import UNSET, Marker, Update, query_params


class State(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


class Direction(str, enum.Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


class Milestone(BaseModel):
    id: int
    number: int
    title: str
    state: str
    due_on: datetime | None = None

    def __str__(self) -> str:
        return f"{self.title} ({self.state})"


class OrganisationMember(BaseModel):
    """A member reference in an organisation."""

    login: str
    id: int


class User(BaseModel):
    login: str
    id: int
    name: str | None = None


class Issue(BaseModel):
    id: int
    number: int
    state: str
    title: str
    milestone: Milestone | None = None
    assignees: list[OrganisationMember] = []
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None

    def __str__(self) -> str:
        return f"{self.number}: {self.title}"


class Repository(BaseModel):
    id: int
    name: str


@dataclass
class IssueUpdate(Update):
    """Fields of an issue PATCH. ``milestone=CLEAR`` removes the milestone."""

    milestone: int | Marker = UNSET
    assignees: list[str] | Marker = UNSET


@dataclass
class MilestoneUpdate(Update):
    title: str | Marker = UNSET
    state: State | Marker = UNSET
    description: str | Marker = UNSET
    due_on: datetime | Marker = UNSET


@dataclass
class SearchIssues:
    """Search request; ``sort`` and ``order`` are left out when None."""

    q: str
    sort: str | None = None
    order: Direction | None = None

    def to_params(self, per_page: int, page: int = 1) -> dict[str, str]:
        return query_params(
            q=self.q,
            sort=self.sort,
            order=self.order,
            per_page=per_page,
            page=page if page > 1 else None,
        )


@dataclass
class SearchQueryBuilder:
    """Assemble a GitHub search ``q`` string, one qualifier at a time."""

    terms: list[str] = field(default_factory=list)

    def _add(self, term: str) -> "SearchQueryBuilder":
        self.terms.append(term)
        return self

    def state(self, state: State) -> "SearchQueryBuilder":
        return self._add(f"state:{State(state).value}")

    def milestone(self, title: str) -> "SearchQueryBuilder":
        escaped = title.replace('"', '\\"')
        return self._add(f'milestone:"{escaped}"')

    def closed_on_or_after(self, when: datetime) -> "SearchQueryBuilder":
        self.state(State.CLOSED)
        return self._add(f"closed:>={when.date().isoformat()}")

    def owner_repo(self, owner: str, repo: str) -> "SearchQueryBuilder":
        return self._add(f"repo:{owner}/{repo}")

    def issue(self) -> "SearchQueryBuilder":
        return self._add("type:issue")

    def assignee(self, login: str) -> "SearchQueryBuilder":
        return self._add(f"assignee:{login}")

    def label(self, name: str) -> "SearchQueryBuilder":
        if " " in name:
            name = f'"{name}"'
        return self._add(f"label:{name}")

    def build(self) -> str:
        return " ".join(self.terms)


class GitHubClient(BaseClient):
    """Typed access to the GitHub REST endpoints sprint management needs."""

    accept = "application/vnd.github+json"

    def get_issue(self, owner: str, repo: str, issue_number: int) -> Issue:
        return self._send("GET", "repos", owner, repo, "issues", issue_number, schema=Issue)

    def get_repository(self, owner: str, repo: str) -> Repository:
        return self._send("GET", "repos", owner, repo, schema=Repository)

    def get_members(self, organisation: str) -> list[OrganisationMember]:
        return self._send("GET", "orgs", organisation, "members", schema=list[OrganisationMember])

    def get_milestones(self, owner: str, repo: str) -> list[Milestone]:
        return self._send("GET", "repos", owner, repo, "milestones", schema=list[Milestone])

    def create_milestone(self, owner: str, repo: str, spec: MilestoneUpdate) -> Milestone:
        return self._send(
            "POST", "repos", owner, repo, "milestones", schema=Milestone, json=spec.to_payload()
        )

    def patch_milestone(
        self, owner: str, repo: str, milestone_number: int, update: MilestoneUpdate
    ) -> Milestone:
        return self._send(
            "PATCH",
            "repos", owner, repo, "milestones", milestone_number,
            schema=Milestone,
            json=update.to_payload(),
        )

    def patch_issue(self, owner: str, repo: str, issue_number: int, update: IssueUpdate) -> Issue:
        """Send only the fields set on ``update``; everything else stays as is."""
        return self._send(
            "PATCH",
            "repos", owner, repo, "issues", issue_number,
            schema=Issue,
            json=update.to_payload(),
        )

    def search_page(self, query: SearchIssues, page: int, per_page: int) -> SearchResults[Issue]:
        """Fetch a single page of issue search results."""
        return self._send(
            "GET", "search/issues",
            schema=SearchResults[Issue],
            params=query.to_params(per_page=per_page, page=page),
        )

    def search_issues(
        self,
        query: SearchIssues,
        per_page: int = SEARCH_PAGE_SIZE,
        on_incomplete: Callable[[int, SearchResults], None] | None = None,
    ) -> PaginatedSearch[Issue]:
        """Search issues lazily; no request is made until the result is iterated."""
        return PaginatedSearch(self, query, per_page=per_page, on_incomplete=on_incomplete)
