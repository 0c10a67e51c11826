"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from ghicli.github.client import GitHubClient

_SETTINGS_ENV_VARS = (
    "GHICLI_GITHUB_TOKEN",
    "GHICLI_TOKEN_FILE",
    "GITHUB_BASE_URL",
    "GHICLI_DEFAULT_REPO",
    "GHICLI_EDITOR",
    "LOG_LEVEL",
    "VISUAL",
    "EDITOR",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test in an empty directory with no ghicli settings in the environment."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def token_file(tmp_path: Path) -> Path:
    """Provide a token file with a trailing newline, as editors usually leave it."""
    path = tmp_path / "token.txt"
    path.write_text("test-token\n", encoding="utf-8")
    return path


@pytest.fixture
def make_issue_json() -> Callable[..., dict[str, Any]]:
    """Factory for REST issue payloads."""
    return _issue_json


@pytest.fixture
def make_response() -> Callable[..., Mock]:
    """Factory for mocked `requests` responses."""
    return _json_response


def _issue_json(
    number: int = 1,
    title: str = "Hello",
    login: str = "octocat",
    body: str | None = "Body",
    state: str = "open",
) -> dict[str, Any]:
    return {
        "number": number,
        "html_url": f"https://github.com/octo-org/octo-repo/issues/{number}",
        "title": title,
        "state": state,
        "user": {"login": login, "html_url": f"https://github.com/{login}"},
        "created_at": "2025-01-01T00:00:00Z",
        "body": body,
    }


def _json_response(payload: Any, status_code: int = 200, reason: str = "OK") -> Mock:
    resp = Mock()
    resp.status_code = status_code
    resp.reason = reason
    resp.json.return_value = payload
    return resp


@pytest.fixture
def client() -> GitHubClient:
    """A client with an injected repository and a mocked HTTP session."""
    github = GitHubClient(
        token="test-token",
        repository="octo-org/octo-repo",
        base_url="https://api.github.com/",
        repo=Mock(),
    )
    github._session = Mock()
    return github
