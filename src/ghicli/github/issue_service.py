"""Issue search, creation and editing on top of `GitHubClient`.

Creation is guarded against duplicates: an issue whose title already exists
in the repository is never posted twice.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ghicli.editor import IssueDraft
from ghicli.github.client import GitHubClient, Issue, IssuesSearchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IssueAlreadyExists(Exception):
    """Raised when an issue with the same title already exists in the repository."""

    existing: Issue

    def __str__(self) -> str:
        return f"Issue already exists: #{self.existing.number} {self.existing.title!r}"


@dataclass(frozen=True, slots=True)
class IssueMismatch(Exception):
    """Raised when GitHub echoes back a different title than the one posted."""

    posted_title: str
    returned: Issue

    def __str__(self) -> str:
        return (
            f"Response title {self.returned.title!r} not equivalent to posted title "
            f"{self.posted_title!r}"
        )


@dataclass(frozen=True, slots=True)
class IssueModification:
    """Outcome of an edit: the resulting issue and whether a PATCH was sent."""

    issue: Issue
    updated: bool


def format_issue_line(issue: Issue) -> str:
    """One-line summary: number, author (9 chars), title (55 chars)."""

    return f"#{issue.number:<5d} {issue.user.login[:9]:>9} {issue.title[:55]}"


class IssueService:
    """High-level, testable issue operations."""

    def __init__(self, *, github: GitHubClient) -> None:
        self._github = github

    def list_issues(self, terms: list[str]) -> IssuesSearchResult:
        return self._github.search_issues(terms)

    def create_issue(self, draft: IssueDraft) -> Issue:
        existing = self._github.find_issues_by_title(draft.title)
        if existing:
            raise IssueAlreadyExists(existing=existing[0])

        created = self._github.create_issue(title=draft.title, body=draft.body)
        if created.title != draft.title:
            raise IssueMismatch(posted_title=draft.title, returned=created)

        logger.info(
            "Issue created",
            extra={"repo": self._github.repository, "issue_number": created.number},
        )
        return created

    def fetch_issue(self, issue_number: int) -> Issue:
        return self._github.get_issue(issue_number=issue_number)

    def modify_issue(
        self,
        issue_number: int,
        edit: Callable[..., IssueDraft],
    ) -> IssueModification:
        """Edit an issue in place.

        `edit` receives the current `title` and `body` as keyword arguments and
        returns the edited draft. An unchanged draft sends no request and comes
        back with `updated=False`.
        """

        current = self._github.get_issue(issue_number=issue_number)
        draft = edit(title=current.title, body=current.body)
        if draft.title == current.title.strip() and draft.body == current.body.strip():
            logger.info("Issue unchanged; skipping update", extra={"issue_number": issue_number})
            return IssueModification(issue=current, updated=False)

        updated = self._github.update_issue(
            issue_number=issue_number, title=draft.title, body=draft.body
        )
        return IssueModification(issue=updated, updated=True)
