"""ZenHub REST API client and data contracts."""

from datetime import datetime

from pydantic import BaseModel

from .client import BaseClient
from .errors import NotFoundError


class StartDate(BaseModel):
    start_date: datetime


class Estimate(BaseModel):
    value: int


class Workspace(BaseModel):
    id: str
    name: str
    description: str | None = None
    repositories: list[int] = []


class PipelineIssue(BaseModel):
    issue_number: int
    estimate: Estimate | None = None
    position: int | None = None
    is_epic: bool = False


class Pipeline(BaseModel):
    id: str
    name: str
    issues: list[PipelineIssue] = []


class Board(BaseModel):
    pipelines: list[Pipeline]

    def pipeline(self, name: str) -> Pipeline:
        """Find a pipeline by name, case-insensitively."""
        for pipeline in self.pipelines:
            if pipeline.name.lower() == name.lower():
                return pipeline
        raise NotFoundError(f"No pipeline named {name!r}")


class IssuePipeline(BaseModel):
    name: str
    pipeline_id: str | None = None
    workspace_id: str | None = None


class ZenhubIssue(BaseModel):
    """ZenHub metadata attached to a GitHub issue."""

    estimate: Estimate | None = None
    is_epic: bool = False
    pipeline: IssuePipeline | None = None
    pipelines: list[IssuePipeline] = []


class PipelinePosition(BaseModel):
    """Target of an issue move; ``position`` is "top", "bottom" or an index."""

    pipeline_id: str
    position: str | int = "top"


class ZenhubClient(BaseClient):
    """Typed access to the ZenHub board, estimate and start date endpoints."""

    def get_start_date(self, repo_id: int, milestone_number: int) -> StartDate:
        return self._send(
            "GET", "p1/repositories", repo_id, "milestones", milestone_number, "start_date",
            schema=StartDate,
        )

    def set_start_date(self, repo_id: int, milestone_number: int, start_date: StartDate) -> StartDate:
        return self._send(
            "POST", "p1/repositories", repo_id, "milestones", milestone_number, "start_date",
            schema=StartDate,
            json=start_date.model_dump(mode="json"),
        )

    def get_workspaces(self, repo_id: int) -> list[Workspace]:
        return self._send("GET", "p2/repositories", repo_id, "workspaces", schema=list[Workspace])

    def get_first_workspace(self, repo_id: int) -> Workspace:
        workspaces = self.get_workspaces(repo_id)
        if not workspaces:
            raise NotFoundError(f"No ZenHub workspace for repository {repo_id}")
        return workspaces[0]

    def get_board(self, repo_id: int, workspace_id: str) -> Board:
        return self._send(
            "GET", "p2/workspaces", workspace_id, "repositories", repo_id, "board",
            schema=Board,
        )

    def get_issue(self, repo_id: int, issue_number: int) -> ZenhubIssue:
        return self._send("GET", "p1/repositories", repo_id, "issues", issue_number, schema=ZenhubIssue)

    def set_estimate(self, repo_id: int, issue_number: int, estimate: int) -> None:
        self._send(
            "PUT", "p1/repositories", repo_id, "issues", issue_number, "estimate",
            json={"estimate": estimate},
        )

    def move_issue(
        self, repo_id: int, workspace_id: str, issue_number: int, position: PipelinePosition
    ) -> None:
        self._send(
            "POST",
            "p2/workspaces", workspace_id, "repositories", repo_id, "issues", issue_number, "moves",
            json=position.model_dump(mode="json"),
        )
