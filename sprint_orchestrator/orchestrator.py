"""Sprint operations spanning the GitHub and ZenHub clients."""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime

from .errors import ConfigurationError
from .github import (
    Direction,
    GitHubClient,
    Issue,
    IssueUpdate,
    Milestone,
    MilestoneUpdate,
    OrganisationMember,
    Repository,
    SearchIssues,
    SearchQueryBuilder,
    State,
)
from .models import SEARCH_PAGE_SIZE
from .paginate import PaginatedSearch
from .settings import Settings, get_settings
from .update import CLEAR
from .zenhub import Board, Pipeline, PipelinePosition, StartDate, Workspace, ZenhubClient, ZenhubIssue

logger = logging.getLogger(__name__)


@dataclass
class Sprint:
    """A GitHub milestone paired with its ZenHub start date."""

    milestone: Milestone
    start_date: StartDate


class SprintClient:
    """Runs sprint management tasks for one repository over both backends.

    Neither client is owned here; closing them is the caller's job. When an
    operation needs two calls and the second fails, the first is not undone.
    """

    def __init__(self, owner: str, repo: str, github: GitHubClient, zenhub: ZenhubClient):
        self.owner = owner
        self.repo = repo
        self.github = github
        self.zenhub = zenhub
        raw = f"{owner}|{repo}|{github.id}|{zenhub.id}"
        self.id = hashlib.sha256(raw.encode()).hexdigest()[:16]

    def __repr__(self) -> str:
        return f"SprintClient({self.id})"

    # GitHub

    def get_repository(self) -> Repository:
        return self.github.get_repository(self.owner, self.repo)

    def get_issue(self, issue_number: int) -> Issue:
        return self.github.get_issue(self.owner, self.repo, issue_number)

    def get_milestones(self) -> list[Milestone]:
        return self.github.get_milestones(self.owner, self.repo)

    def get_members(self) -> list[OrganisationMember]:
        return self.github.get_members(self.owner)

    def search_issues(self, query_builder: SearchQueryBuilder) -> PaginatedSearch[Issue]:
        """Search this repository's issues, least recently updated first."""
        query = SearchIssues(
            q=query_builder.owner_repo(self.owner, self.repo).issue().build(),
            sort="updated",
            order=Direction.ASCENDING,
        )
        return self.github.search_issues(query, per_page=SEARCH_PAGE_SIZE)

    def assign_issue_to_milestone(self, issue: Issue, milestone: Milestone | None) -> Issue:
        """Set the issue's milestone, replacing any existing one. ``None`` removes it."""
        update = IssueUpdate(milestone=milestone.number if milestone is not None else CLEAR)
        return self.github.patch_issue(self.owner, self.repo, issue.number, update)

    def assign_member_to_issue(self, member: OrganisationMember, issue: Issue) -> Issue:
        """Make ``member`` the only assignee of ``issue``."""
        update = IssueUpdate(assignees=[member.login])
        return self.github.patch_issue(self.owner, self.repo, issue.number, update)

    def update_milestone_title(self, milestone: Milestone, new_title: str) -> Milestone:
        update = MilestoneUpdate(title=new_title)
        return self.github.patch_milestone(self.owner, self.repo, milestone.number, update)

    def close_milestone(self, milestone: Milestone) -> Milestone:
        update = MilestoneUpdate(state=State.CLOSED)
        return self.github.patch_milestone(self.owner, self.repo, milestone.number, update)

    # ZenHub

    def get_start_date(self, repository: Repository, milestone: Milestone) -> StartDate:
        return self.zenhub.get_start_date(repository.id, milestone.number)

    def get_first_workspace(self, repository: Repository) -> Workspace:
        return self.zenhub.get_first_workspace(repository.id)

    def get_board(self, repository: Repository, workspace: Workspace) -> Board:
        return self.zenhub.get_board(repository.id, workspace.id)

    def get_zenhub_issue(self, repository: Repository, issue: Issue) -> ZenhubIssue:
        return self.zenhub.get_issue(repository.id, issue.number)

    def set_estimate(self, repository: Repository, issue: Issue, estimate: int) -> None:
        self.zenhub.set_estimate(repository.id, issue.number, estimate)

    def move_issue_to_pipeline(
        self, repository: Repository, workspace: Workspace, issue: Issue, pipeline: Pipeline
    ) -> None:
        position = PipelinePosition(pipeline_id=pipeline.id)
        self.zenhub.move_issue(repository.id, workspace.id, issue.number, position)

    # Both

    def get_sprint(self, repository: Repository, milestone: Milestone) -> Sprint:
        start_date = self.get_start_date(repository, milestone)
        return Sprint(milestone=milestone, start_date=start_date)

    def create_sprint(
        self,
        repository: Repository,
        sprint_number: str,
        start_date: datetime,
        due_on: datetime,
    ) -> Sprint:
        """Create the ``Sprint <n>`` milestone, then give it a ZenHub start date.

        If setting the start date fails the milestone is left in place.
        """
        spec = MilestoneUpdate(title=f"Sprint {sprint_number}", due_on=due_on)
        milestone = self.github.create_milestone(self.owner, self.repo, spec)
        logger.debug("Created milestone %s (#%d)", milestone.title, milestone.number)

        start = self.zenhub.set_start_date(
            repository.id, milestone.number, StartDate(start_date=start_date)
        )
        return Sprint(milestone=milestone, start_date=start)


def get_sprint_client(settings: Settings | None = None) -> SprintClient:
    """Build both backend clients and a SprintClient from settings."""
    settings = settings or get_settings()
    missing = [
        name
        for name in ("github_token", "zenhub_token", "owner", "repo")
        if not getattr(settings, name)
    ]
    if missing:
        names = ", ".join(f"SPRINT_{name.upper()}" for name in missing)
        raise ConfigurationError(f"{names} not set")
    github = GitHubClient(settings.github_url, settings.github_token, timeout=settings.timeout)
    try:
        zenhub = ZenhubClient(settings.zenhub_url, settings.zenhub_token, timeout=settings.timeout)
    except ConfigurationError:
        github.close()
        raise
    return SprintClient(settings.owner, settings.repo, github, zenhub)
