"""CLI entrypoint for ghicli."""

from __future__ import annotations

import argparse
import functools
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from ghicli import __version__
from ghicli.config import CliSettings, MissingTokenError, load_token, validate_repository
from ghicli.editor import EditorError, TemplateError, edit_issue, resolve_editor
from ghicli.github.client import GitHubClient
from ghicli.github.issue_service import (
    IssueAlreadyExists,
    IssueService,
    format_issue_line,
)
from ghicli.logging import configure_logging, verbosity_to_level

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """Raised for invalid command-line input detected after argument parsing."""


def _add_connection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo",
        "--repository",
        dest="repository",
        default=None,
        help="Repository in the form 'owner/repo' (default: GHICLI_DEFAULT_REPO or golang/go)",
    )
    parser.add_argument(
        "--token-file",
        "--ghtoken",
        dest="token_file",
        type=Path,
        default=None,
        help="Path to a file containing a GitHub personal access token",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="GitHub API base URL (default: https://api.github.com/)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghicli",
        description="Search, create, fetch and modify GitHub issues",
    )
    parser.add_argument("--version", action="version", version=f"ghicli {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_issues = subparsers.add_parser("list", help="Search a repository's issues")
    _add_connection_arguments(list_issues)
    list_issues.add_argument("terms", nargs="*", help="Free-text search terms")

    create = subparsers.add_parser("create", help="Compose a new issue in your editor")
    _add_connection_arguments(create)
    create.add_argument("--editor", default=None, help="Editor command, e.g. 'nvim'")

    fetch = subparsers.add_parser("fetch", help="Show a single issue")
    _add_connection_arguments(fetch)
    fetch.add_argument("--issue-number", type=int, required=True, help="Issue number")

    modify = subparsers.add_parser("modify", help="Edit an issue's title and body")
    _add_connection_arguments(modify)
    modify.add_argument("--issue-number", type=int, required=True, help="Issue number")
    modify.add_argument("--editor", default=None, help="Editor command, e.g. 'nvim'")

    delete = subparsers.add_parser("delete", help="Delete an issue (not supported by GitHub)")
    _add_connection_arguments(delete)
    delete.add_argument("--issue-number", type=int, required=True, help="Issue number")

    return parser


def _build_client(args: argparse.Namespace, settings: CliSettings) -> GitHubClient:
    try:
        repository = validate_repository(args.repository or settings.default_repository)
    except ValueError as e:
        raise UsageError(str(e)) from e

    token = load_token(settings, args.token_file)
    return GitHubClient(
        token=token,
        repository=repository,
        base_url=args.url or settings.github_base_url,
    )


def _print_issue_details(service: IssueService, issue_number: int) -> None:
    issue = service.fetch_issue(issue_number)
    print(format_issue_line(issue))
    print(f"State:   {issue.state}")
    print(f"Author:  {issue.user.login}")
    print(f"Created: {issue.created_at.isoformat()}")
    print(f"URL:     {issue.html_url}")
    if issue.body:
        print()
        print(issue.body)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = CliSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(verbosity_to_level(settings.log_level, args.verbose))

    if args.command == "delete":
        print(
            "delete is not currently supported: the GitHub REST API cannot delete issues",
            file=sys.stderr,
        )
        return 2

    try:
        github = _build_client(args, settings)
    except (UsageError, MissingTokenError) as e:
        print(str(e), file=sys.stderr)
        return 2
    except OSError as e:
        print(f"Could not read token file: {e}", file=sys.stderr)
        return 2

    try:
        service = IssueService(github=github)

        if args.command == "list":
            print(f"querying URL {github.search_url}")
            result = service.list_issues(args.terms)
            print(f"{result.total_count} issues:")
            for item in result.items:
                print(format_issue_line(item))
            return 0

        if args.command == "create":
            editor = resolve_editor(args.editor, settings.editor)
            draft = edit_issue(editor)
            print(f"Found title: {draft.title}")
            print(f"Found body: {draft.body}")
            issue = service.create_issue(draft)
            print(f"Created issue at {issue.html_url}")
            print(format_issue_line(issue))
            return 0

        if args.command == "fetch":
            _print_issue_details(service, args.issue_number)
            return 0

        if args.command == "modify":
            editor = resolve_editor(args.editor, settings.editor)
            outcome = service.modify_issue(
                args.issue_number, functools.partial(edit_issue, editor)
            )
            if not outcome.updated:
                print(f"No changes; issue #{outcome.issue.number} left untouched")
                return 0
            print(f"Updated issue at {outcome.issue.html_url}")
            print(format_issue_line(outcome.issue))
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except IssueAlreadyExists as e:
        logger.warning(str(e), extra={"issue_number": e.existing.number})
        print(str(e), file=sys.stderr)
        return 3

    except (EditorError, TemplateError) as e:
        print(str(e), file=sys.stderr)
        return 1

    except Exception:
        logger.exception("Command failed")
        return 1

    finally:
        github.close()


if __name__ == "__main__":
    raise SystemExit(main())
