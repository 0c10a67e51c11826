"""Configuration for the ghicli command-line client.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Command-line flags take precedence over anything configured here. The token is
normally read from a file (`--token-file` or `GHICLI_TOKEN_FILE`); a raw token
in `GHICLI_GITHUB_TOKEN` is accepted as a fallback.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REPOSITORY = "golang/go"
DEFAULT_BASE_URL = "https://api.github.com/"


class MissingTokenError(Exception):
    """Raised when no personal access token could be found."""


class CliSettings(BaseSettings):
    """Settings for the ghicli client.

    Environment variables:
    - GHICLI_GITHUB_TOKEN   (optional, used when no token file is given)
    - GHICLI_TOKEN_FILE     (optional)
    - GITHUB_BASE_URL       (optional)
    - GHICLI_DEFAULT_REPO   (optional)
    - GHICLI_EDITOR         (optional)
    - LOG_LEVEL             (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `CliSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias="GHICLI_GITHUB_TOKEN",
        description="GitHub token used when no token file is provided",
    )
    token_file: Path | None = Field(
        default=None,
        validation_alias="GHICLI_TOKEN_FILE",
        description="Path to a file containing a GitHub personal access token",
    )
    github_base_url: str = Field(
        default=DEFAULT_BASE_URL,
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    default_repository: str = Field(
        default=DEFAULT_REPOSITORY,
        validation_alias="GHICLI_DEFAULT_REPO",
        description="Repository queried when --repo is not given",
    )
    editor: str = Field(
        default="",
        validation_alias="GHICLI_EDITOR",
        description="Editor command used to compose issues",
    )
    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return normalized


def validate_repository(repository: str) -> str:
    """Return the normalized "owner/name" form or raise ValueError."""

    repo = repository.strip().strip("/")
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Invalid repo owner/name provided: {repository!r}")
    return repo


def load_token(settings: CliSettings, token_file: Path | None = None) -> str:
    """Resolve the personal access token.

    The explicit token file wins over the configured one; a configured raw token
    is only used when no file is given at all.

    Raises:
        MissingTokenError: if no token source is available or it is empty.
        OSError: if the token file cannot be read.
    """

    path = token_file or settings.token_file
    if path is not None:
        token = Path(path).expanduser().read_text(encoding="utf-8").strip()
        if not token:
            raise MissingTokenError(f"Token file is empty: {path}")
        return token

    if settings.github_token.strip():
        return settings.github_token.strip()

    raise MissingTokenError("No personal access token provided")
