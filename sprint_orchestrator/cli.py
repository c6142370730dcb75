"""CLI commands for sprint management."""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone


def _parse_date(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO date: {value}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _dump(data) -> None:
    json.dump(data, sys.stdout, indent=2)
    sys.stdout.write("\n")


def _run(args: argparse.Namespace) -> None:
    from .orchestrator import get_sprint_client

    client = get_sprint_client()
    try:
        if args.command == "issue":
            _dump(client.get_issue(args.number).model_dump(mode="json"))
        elif args.command == "milestones":
            _dump([m.model_dump(mode="json") for m in client.get_milestones()])
        elif args.command == "members":
            _dump([m.model_dump(mode="json") for m in client.get_members()])
        elif args.command == "closed-since":
            from .github import SearchQueryBuilder

            search = client.search_issues(SearchQueryBuilder().closed_on_or_after(args.date))
            _dump([issue.model_dump(mode="json") for issue in search])
            if search.incomplete:
                print(
                    f"warning: search results incomplete on page(s) {search.incomplete_pages}",
                    file=sys.stderr,
                )
        elif args.command == "sprint-create":
            repository = client.get_repository()
            sprint = client.create_sprint(repository, args.number, args.start, args.due)
            _dump(
                {
                    "milestone": sprint.milestone.model_dump(mode="json"),
                    "start_date": sprint.start_date.model_dump(mode="json")["start_date"],
                }
            )
        elif args.command == "estimate":
            repository = client.get_repository()
            issue = client.get_issue(args.issue)
            client.set_estimate(repository, issue, args.value)
            print(f"Estimated {issue} at {args.value}")
        elif args.command == "move":
            repository = client.get_repository()
            workspace = client.get_first_workspace(repository)
            pipeline = client.get_board(repository, workspace).pipeline(args.pipeline)
            issue = client.get_issue(args.issue)
            client.move_issue_to_pipeline(repository, workspace, issue, pipeline)
            print(f"Moved {issue} to {pipeline.name}")
    finally:
        client.github.close()
        client.zenhub.close()


def main():
    parser = argparse.ArgumentParser(
        description="Manage sprints over GitHub and ZenHub",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    issue_parser = subparsers.add_parser("issue", help="Show a GitHub issue")
    issue_parser.add_argument("number", type=int, help="Issue number")

    subparsers.add_parser("milestones", help="List repository milestones")
    subparsers.add_parser("members", help="List organisation members")

    closed_parser = subparsers.add_parser(
        "closed-since",
        help="List issues closed on or after a date",
    )
    closed_parser.add_argument("date", type=_parse_date, help="ISO date, e.g. 2024-01-31")

    sprint_parser = subparsers.add_parser(
        "sprint-create",
        help="Create a sprint milestone and set its ZenHub start date",
    )
    sprint_parser.add_argument("number", help="Sprint number, used in the milestone title")
    sprint_parser.add_argument("start", type=_parse_date, help="Start date (ISO)")
    sprint_parser.add_argument("due", type=_parse_date, help="Due date (ISO)")

    estimate_parser = subparsers.add_parser("estimate", help="Set the ZenHub estimate of an issue")
    estimate_parser.add_argument("issue", type=int, help="Issue number")
    estimate_parser.add_argument("value", type=int, help="Estimate value")

    move_parser = subparsers.add_parser("move", help="Move an issue to a ZenHub pipeline")
    move_parser.add_argument("issue", type=int, help="Issue number")
    move_parser.add_argument("pipeline", help="Pipeline name (case-insensitive)")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return

    from .errors import SprintOrchestratorError
    from .settings import get_settings

    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        _run(args)
    except SprintOrchestratorError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
