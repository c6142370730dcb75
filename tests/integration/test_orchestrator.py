"""Integration tests for SprintClient over both backends."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import httpx
import pytest

from sprint_orchestrator.errors import BackendClientError, ConfigurationError, UnexpectedStatusError
from sprint_orchestrator.github import (
    GitHubClient,
    Issue,
    IssueUpdate,
    Milestone,
    MilestoneUpdate,
    OrganisationMember,
    Repository,
    SearchQueryBuilder,
    State,
)
from sprint_orchestrator.orchestrator import Sprint, SprintClient, get_sprint_client
from sprint_orchestrator.settings import Settings
from sprint_orchestrator.update import CLEAR
from sprint_orchestrator.zenhub import Pipeline, PipelinePosition, StartDate, Workspace, ZenhubClient

OWNER = "tommilligan"
REPO = "decadog"

REPOSITORY = Repository(id=123, name=REPO)
MILESTONE = Milestone(id=501, number=1, title="Sprint 1", state="open")
ISSUE = Issue(
    id=1007,
    number=7,
    state="open",
    title="Seven",
    created_at="2019-01-01T00:00:00Z",
    updated_at="2019-01-02T00:00:00Z",
)


@pytest.fixture
def github():
    mock = MagicMock(spec=GitHubClient)
    mock.id = "gh-id"
    return mock


@pytest.fixture
def zenhub():
    mock = MagicMock(spec=ZenhubClient)
    mock.id = "zh-id"
    return mock


@pytest.fixture
def client(github, zenhub):
    return SprintClient(OWNER, REPO, github, zenhub)


class TestIdentity:
    def test_deterministic(self, github, zenhub):
        assert SprintClient(OWNER, REPO, github, zenhub).id == SprintClient(OWNER, REPO, github, zenhub).id

    def test_depends_on_context(self, github, zenhub):
        assert SprintClient(OWNER, REPO, github, zenhub).id != SprintClient(OWNER, "other", github, zenhub).id


class TestGitHubOperations:
    def test_threads_owner_and_repo(self, client, github):
        client.get_repository()
        client.get_issue(7)
        client.get_milestones()
        client.get_members()

        github.get_repository.assert_called_once_with(OWNER, REPO)
        github.get_issue.assert_called_once_with(OWNER, REPO, 7)
        github.get_milestones.assert_called_once_with(OWNER, REPO)
        github.get_members.assert_called_once_with(OWNER)

    def test_assign_issue_to_milestone(self, client, github):
        client.assign_issue_to_milestone(ISSUE, MILESTONE)
        github.patch_issue.assert_called_once_with(OWNER, REPO, 7, IssueUpdate(milestone=1))

    def test_remove_issue_from_milestone(self, client, github):
        client.assign_issue_to_milestone(ISSUE, None)
        update = github.patch_issue.call_args[0][3]
        assert update.to_payload() == {"milestone": None}

    def test_assign_member_to_issue(self, client, github):
        client.assign_member_to_issue(OrganisationMember(login="octocat", id=1), ISSUE)
        update = github.patch_issue.call_args[0][3]
        assert update.to_payload() == {"assignees": ["octocat"]}

    def test_update_milestone_title(self, client, github):
        client.update_milestone_title(MILESTONE, "Sprint 1 (done)")
        github.patch_milestone.assert_called_once_with(
            OWNER, REPO, 1, MilestoneUpdate(title="Sprint 1 (done)")
        )

    def test_close_milestone(self, client, github):
        client.close_milestone(MILESTONE)
        update = github.patch_milestone.call_args[0][3]
        assert update.to_payload() == {"state": "closed"}

    def test_search_issues_is_scoped_and_sorted(self, client, github):
        client.search_issues(
            SearchQueryBuilder().closed_on_or_after(datetime(2011, 4, 22, 13, 33, 48, tzinfo=timezone.utc))
        )

        query = github.search_issues.call_args[0][0]
        assert query.to_params(per_page=100) == {
            "q": "state:closed closed:>=2011-04-22 repo:tommilligan/decadog type:issue",
            "sort": "updated",
            "order": "asc",
            "per_page": "100",
        }
        assert github.search_issues.call_args[1]["per_page"] == 100

    def test_milestone_search(self, client, github):
        client.search_issues(SearchQueryBuilder().state(State.OPEN).milestone("Sprint 2"))
        query = github.search_issues.call_args[0][0]
        assert query.q == 'state:open milestone:"Sprint 2" repo:tommilligan/decadog type:issue'


class TestZenhubOperations:
    def test_passes_repository_id(self, client, zenhub):
        workspace = Workspace(id="ws1", name="Main")
        client.get_start_date(REPOSITORY, MILESTONE)
        client.get_first_workspace(REPOSITORY)
        client.get_board(REPOSITORY, workspace)
        client.get_zenhub_issue(REPOSITORY, ISSUE)
        client.set_estimate(REPOSITORY, ISSUE, 3)

        zenhub.get_start_date.assert_called_once_with(123, 1)
        zenhub.get_first_workspace.assert_called_once_with(123)
        zenhub.get_board.assert_called_once_with(123, "ws1")
        zenhub.get_issue.assert_called_once_with(123, 7)
        zenhub.set_estimate.assert_called_once_with(123, 7, 3)

    def test_move_issue_to_pipeline(self, client, zenhub):
        client.move_issue_to_pipeline(
            REPOSITORY, Workspace(id="ws1", name="Main"), ISSUE, Pipeline(id="p-done", name="Done")
        )
        zenhub.move_issue.assert_called_once_with(123, "ws1", 7, PipelinePosition(pipeline_id="p-done"))

    def test_get_sprint(self, client, zenhub):
        start = StartDate(start_date="2019-01-07T09:00:00Z")
        zenhub.get_start_date.return_value = start
        assert client.get_sprint(REPOSITORY, MILESTONE) == Sprint(milestone=MILESTONE, start_date=start)


class TestCreateSprint:
    START = datetime(2019, 1, 7, 9, tzinfo=timezone.utc)
    DUE = datetime(2019, 1, 18, 17, tzinfo=timezone.utc)

    def test_creates_milestone_then_start_date(self, client, github, zenhub):
        created = Milestone(id=502, number=2, title="Sprint 2", state="open", due_on=self.DUE)
        github.create_milestone.return_value = created
        zenhub.set_start_date.return_value = StartDate(start_date=self.START)

        sprint = client.create_sprint(REPOSITORY, "2", self.START, self.DUE)

        github.create_milestone.assert_called_once_with(
            OWNER, REPO, MilestoneUpdate(title="Sprint 2", due_on=self.DUE)
        )
        zenhub.set_start_date.assert_called_once_with(123, 2, StartDate(start_date=self.START))
        assert sprint == Sprint(milestone=created, start_date=StartDate(start_date=self.START))

    def test_milestone_failure_stops_before_zenhub(self, client, github, zenhub):
        github.create_milestone.side_effect = UnexpectedStatusError(500)
        with pytest.raises(UnexpectedStatusError):
            client.create_sprint(REPOSITORY, "2", self.START, self.DUE)
        zenhub.set_start_date.assert_not_called()

    def test_partial_completion_is_surfaced(self):
        github = GitHubClient("https://api.mygithub.com/", "gh_token")
        zenhub = ZenhubClient("https://api.myzenhub.com/", "zh_token")
        github._client.request = MagicMock(
            return_value=httpx.Response(
                201, json={"id": 502, "number": 2, "title": "Sprint 2", "state": "open", "due_on": None}
            )
        )
        zenhub._client.request = MagicMock(return_value=httpx.Response(404, json={"message": "Not Found"}))
        client = SprintClient(OWNER, REPO, github, zenhub)

        with pytest.raises(BackendClientError) as exc_info:
            client.create_sprint(REPOSITORY, "2", self.START, self.DUE)

        assert exc_info.value.status == 404
        github._client.request.assert_called_once()
        zenhub._client.request.assert_called_once()
        assert github._client.request.call_args[1]["json"]["title"] == "Sprint 2"


class TestGetSprintClient:
    def test_builds_from_settings(self):
        settings = Settings(
            github_token="gh",
            zenhub_token="zh",
            owner=OWNER,
            repo=REPO,
            zenhub_url="https://zenhub.example.com/",
        )
        client = get_sprint_client(settings)
        assert client.owner == OWNER
        assert client.repo == REPO
        assert str(client.zenhub.base_url) == "https://zenhub.example.com/"
        assert client.github == GitHubClient("https://api.github.com/", "gh")

    def test_missing_values(self):
        settings = Settings(_env_file=None, github_token="gh", owner=OWNER)
        with pytest.raises(ConfigurationError, match="SPRINT_ZENHUB_TOKEN, SPRINT_REPO"):
            get_sprint_client(settings)

    def test_bad_url(self):
        settings = Settings(github_url="::", github_token="gh", zenhub_token="zh", owner=OWNER, repo=REPO)
        with pytest.raises(ConfigurationError, match="Invalid base url ::"):
            get_sprint_client(settings)

    def test_bad_zenhub_url_closes_github_client(self):
        settings = Settings(zenhub_url="nope", github_token="gh", zenhub_token="zh", owner=OWNER, repo=REPO)
        with patch("sprint_orchestrator.orchestrator.GitHubClient") as github_cls:
            with pytest.raises(ConfigurationError, match="Invalid base url nope"):
                get_sprint_client(settings)
        github_cls.return_value.close.assert_called_once_with()
