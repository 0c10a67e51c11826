"""Compose issues in an external text editor.

The editor is handed a small template::

    Title: <title>
    Body: <body>

and the file is parsed back into an `IssueDraft` once the editor exits.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TITLE_TAG = "Title: "
BODY_TAG = "Body: "


class EditorError(RuntimeError):
    """Raised when the editor cannot be resolved, launched, or exits with an error."""


class TemplateError(ValueError):
    """Raised when an edited template cannot be parsed into a title and body."""


@dataclass(frozen=True, slots=True)
class IssueDraft:
    title: str
    body: str


def write_template(path: Path, *, title: str = "", body: str = "") -> None:
    path.write_text(f"{TITLE_TAG}{title}\n{BODY_TAG}{body}\n", encoding="utf-8")


def parse_issue_text(text: str) -> IssueDraft:
    """Split edited template text into a draft.

    Raises:
        TemplateError: if a tag is missing or the title is empty.
    """

    if not text.startswith(TITLE_TAG):
        raise TemplateError(f"{TITLE_TAG.strip()!r} tag not found at the start of the file")

    after = text[len(TITLE_TAG) :]
    if BODY_TAG not in after:
        raise TemplateError(f"{BODY_TAG.strip()!r} tag not found in the file")

    title, _, body = after.partition(BODY_TAG)
    title = title.strip()
    if not title:
        raise TemplateError("Issue title is empty")

    return IssueDraft(title=title, body=body.strip())


def resolve_editor(
    explicit: str | None,
    configured: str = "",
    prompt: Callable[[str], str] = input,
) -> str:
    """Pick the editor command: flag, setting, $VISUAL, $EDITOR, then ask."""

    for candidate in (explicit, configured, os.environ.get("VISUAL"), os.environ.get("EDITOR")):
        if candidate and candidate.strip():
            return candidate.strip()

    try:
        answer = prompt(
            "Enter the binary for the editor you would like to use (nvim, nano, etc.): "
        )
    except EOFError:
        answer = ""
    if not answer.strip():
        raise EditorError("No editor provided")
    return answer.strip()


def launch_editor(editor: str, path: Path) -> None:
    """Run the editor on `path`, attached to the current terminal, and wait for it."""

    command = [*shlex.split(editor), str(path)]
    logger.debug("Launching editor", extra={"command": command})
    try:
        subprocess.run(command, check=True)
    except FileNotFoundError as e:
        raise EditorError(f"Editor not found: {command[0]}") from e
    except subprocess.CalledProcessError as e:
        raise EditorError(f"Editor exited with status {e.returncode}") from e
    logger.info("Template successfully edited", extra={"path": str(path)})


def edit_issue(editor: str, *, title: str = "", body: str = "") -> IssueDraft:
    """Let the user edit an issue template and return the parsed result."""

    fd, name = tempfile.mkstemp(prefix="ghicli-issue-", suffix=".txt")
    os.close(fd)
    path = Path(name)
    try:
        write_template(path, title=title, body=body)
        launch_editor(editor, path)
        return parse_issue_text(path.read_text(encoding="utf-8"))
    finally:
        path.unlink(missing_ok=True)
