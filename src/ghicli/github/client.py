"""GitHub API client wrapper.

Searches, reads and updates go through the REST API with a bearer-token session;
issue creation goes through PyGithub.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import requests
from github import Auth, Github
from github.Repository import Repository

logger = logging.getLogger(__name__)

MAX_SEARCH_QUERY_LENGTH = 256


class GitHubAPIError(RuntimeError):
    """Raised when GitHub answers a request with an unexpected status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class IssueUser:
    """Author of an issue."""

    login: str
    html_url: str


@dataclass(frozen=True, slots=True)
class Issue:
    """Issue metadata as returned by GitHub."""

    number: int
    html_url: str
    title: str
    state: str
    user: IssueUser
    created_at: datetime
    body: str


@dataclass(frozen=True, slots=True)
class IssuesSearchResult:
    total_count: int
    items: list[Issue]


class GitHubClient:
    """Small wrapper around the GitHub issue endpoints ghicli needs."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not repository or "/" not in repository:
            raise ValueError("GitHub repository is required in the form 'owner/repo'")

        self._token = token
        self._repository_name = repository.strip().strip("/")
        self._rest_base_url = base_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "ghicli",
            }
        )

        # The PyGithub repository is only needed for issue creation; resolving it
        # costs a request, so it is looked up on first use.
        self._repo = repo
        self._github = github_api
        if repo is not None:
            logger.debug("Using injected Repository instance")

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    @property
    def search_url(self) -> str:
        return f"{self._rest_base_url}/search/issues"

    def _issues_url(self, *, issue_number: int | None = None) -> str:
        url = f"{self._rest_base_url}/repos/{self._repository_name}/issues"
        if issue_number is None:
            return url
        if issue_number <= 0:
            raise ValueError("issue_number must be a positive integer")
        return f"{url}/{issue_number}"

    def _get_repo(self) -> Repository:
        if self._repo is None:
            if self._github is None:
                self._github = Github(auth=Auth.Token(self._token), base_url=self._rest_base_url)
            self._repo = self._github.get_repo(self._repository_name)
            logger.info(
                "Authenticated with GitHub and connected to repository",
                extra={"repo": self._repository_name},
            )
        return self._repo

    @staticmethod
    def _parse_datetime(value: object) -> datetime:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Invalid datetime value")
        # GitHub commonly returns timestamps like "2025-01-01T00:00:00Z".
        iso = value.replace("Z", "+00:00")
        return datetime.fromisoformat(iso)

    @staticmethod
    def _parse_user(value: object) -> IssueUser:
        if isinstance(value, dict):
            login = value.get("login")
            html_url = value.get("html_url")
            return IssueUser(
                login=login if isinstance(login, str) else "",
                html_url=html_url if isinstance(html_url, str) else "",
            )
        return IssueUser(login="", html_url="")

    @classmethod
    def _parse_issue_json(cls, data: dict[str, Any]) -> Issue:
        number = data.get("number")
        if not isinstance(number, int) or number <= 0:
            raise ValueError("Invalid issue response: missing number")

        title = data.get("title")
        state = data.get("state")
        html_url = data.get("html_url")
        body = data.get("body")

        return Issue(
            number=number,
            html_url=html_url if isinstance(html_url, str) else "",
            title=title if isinstance(title, str) else "",
            state=state if isinstance(state, str) else "",
            user=cls._parse_user(data.get("user")),
            created_at=cls._parse_datetime(data.get("created_at")),
            body=body if isinstance(body, str) else "",
        )

    def search_issues(self, terms: list[str]) -> IssuesSearchResult:
        """Search this repository's issues and pull requests by free-text terms."""

        query = " ".join([f"repo:{self._repository_name}", *terms])
        logger.info("Sending search query", extra={"url": self.search_url, "q": query})
        resp = self._session.get(self.search_url, params={"q": query}, timeout=30)
        if resp.status_code != requests.codes.ok:
            raise GitHubAPIError(
                f"search query failed: {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
            )

        payload: dict[str, Any] = resp.json()
        if not isinstance(payload, dict):
            raise ValueError("Unexpected search response: expected an object")

        total_count = payload.get("total_count")
        if not isinstance(total_count, int):
            raise ValueError("Unexpected search response: missing total_count")

        raw_items = payload.get("items")
        if not isinstance(raw_items, list):
            raise ValueError("Unexpected search response: missing items")
        if not all(isinstance(item, dict) for item in raw_items):
            raise ValueError("Unexpected search response: items must be objects")
        items = [self._parse_issue_json(item) for item in raw_items]
        logger.debug(
            "Search returned issues",
            extra={"total_count": total_count, "returned": len(items)},
        )
        return IssuesSearchResult(total_count=total_count, items=items)

    def find_issues_by_title(self, title: str) -> list[Issue]:
        """Return issues in this repo whose title equals `title` exactly."""

        normalized = title.strip()
        if not normalized:
            raise ValueError("title must be non-empty")

        phrase = normalized.replace('"', " ")
        qualifiers = ["is:issue", "in:title"]
        # Search rejects long queries; match on a prefix and filter exactly below.
        budget = MAX_SEARCH_QUERY_LENGTH - len(
            " ".join([f"repo:{self._repository_name}", *qualifiers, '""'])
        )
        if len(phrase) > budget:
            shortened = phrase[:budget]
            head, sep, _ = shortened.rpartition(" ")
            phrase = (head if sep and head.strip() else shortened).strip()
            logger.debug(
                "Title too long for search; matching on a prefix",
                extra={"title_length": len(normalized), "prefix_length": len(phrase)},
            )

        result = self.search_issues([*qualifiers, f'"{phrase}"'])
        return [issue for issue in result.items if issue.title.strip() == normalized]

    def create_issue(self, *, title: str, body: str | None) -> Issue:
        if not title.strip():
            raise ValueError("Issue title is required")

        issue = self._get_repo().create_issue(title=title, body=body or "")
        user = issue.user
        return Issue(
            number=issue.number,
            html_url=issue.html_url,
            title=issue.title,
            state=getattr(issue, "state", "open"),
            user=IssueUser(
                login=getattr(user, "login", "") or "",
                html_url=getattr(user, "html_url", "") or "",
            ),
            created_at=issue.created_at,
            body=issue.body or "",
        )

    def get_issue(self, *, issue_number: int) -> Issue:
        """Fetch an issue by number via REST."""

        url = self._issues_url(issue_number=issue_number)
        resp = self._session.get(url, timeout=30)
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()
        return self._parse_issue_json(data)

    def update_issue(self, *, issue_number: int, title: str, body: str) -> Issue:
        """Replace the title and body of an existing issue."""

        if not title.strip():
            raise ValueError("Issue title is required")

        url = self._issues_url(issue_number=issue_number)
        resp = self._session.patch(url, json={"title": title, "body": body}, timeout=30)
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()
        logger.info("Issue updated", extra={"issue_number": issue_number})
        return self._parse_issue_json(data)

    def close(self) -> None:
        self._session.close()
        if self._github is not None:
            self._github.close()
