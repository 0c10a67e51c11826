"""Unit tests for the editor bridge."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from ghicli import editor as editor_module
from ghicli.editor import (
    EditorError,
    IssueDraft,
    TemplateError,
    edit_issue,
    parse_issue_text,
    resolve_editor,
    write_template,
)


def test_write_template_is_parseable_once_filled(tmp_path: Path) -> None:
    path = tmp_path / "issue.txt"
    write_template(path, title="Crash on start", body="Steps:\n1. run it")

    assert path.read_text(encoding="utf-8") == "Title: Crash on start\nBody: Steps:\n1. run it\n"
    assert parse_issue_text(path.read_text(encoding="utf-8")) == IssueDraft(
        title="Crash on start", body="Steps:\n1. run it"
    )


def test_parse_keeps_body_tag_out_of_title() -> None:
    draft = parse_issue_text("Title: Fix it\nBody: It is broken.\nBody: is also a word\n")

    assert draft.title == "Fix it"
    assert draft.body == "It is broken.\nBody: is also a word"


def test_parse_allows_empty_body() -> None:
    assert parse_issue_text("Title: Only a title\nBody: \n") == IssueDraft(
        title="Only a title", body=""
    )


def test_parse_requires_title_tag_at_start() -> None:
    with pytest.raises(TemplateError, match="Title"):
        parse_issue_text("\nTitle: late\nBody: x\n")


def test_parse_requires_body_tag() -> None:
    with pytest.raises(TemplateError, match="Body"):
        parse_issue_text("Title: no body here\n")


def test_parse_rejects_empty_title() -> None:
    with pytest.raises(TemplateError, match="empty"):
        parse_issue_text("Title: \nBody: something\n")


def test_resolve_editor_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VISUAL", "code --wait")
    monkeypatch.setenv("EDITOR", "vi")

    assert resolve_editor("nvim", "nano") == "nvim"
    assert resolve_editor(None, "nano") == "nano"
    assert resolve_editor(None, "") == "code --wait"

    monkeypatch.delenv("VISUAL")
    assert resolve_editor(None, "") == "vi"


def test_resolve_editor_prompts_when_unconfigured() -> None:
    prompts: list[str] = []

    def fake_prompt(message: str) -> str:
        prompts.append(message)
        return " nano \n"

    assert resolve_editor(None, "", prompt=fake_prompt) == "nano"
    assert len(prompts) == 1


def test_resolve_editor_rejects_empty_answer() -> None:
    with pytest.raises(EditorError):
        resolve_editor(None, "", prompt=lambda _: "")


def test_edit_issue_runs_editor_and_parses_result(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    def fake_run(command: list[str], check: bool) -> subprocess.CompletedProcess[bytes]:
        path = Path(command[-1])
        seen["command"] = command
        seen["template"] = path.read_text(encoding="utf-8")
        seen["path"] = path
        path.write_text("Title: Edited title\nBody: Edited body\n", encoding="utf-8")
        return subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr(editor_module.subprocess, "run", fake_run)

    draft = edit_issue("code --wait", title="Old", body="Old body")

    assert draft == IssueDraft(title="Edited title", body="Edited body")
    assert seen["command"][:2] == ["code", "--wait"]  # type: ignore[index]
    assert seen["template"] == "Title: Old\nBody: Old body\n"
    assert not Path(seen["path"]).exists()  # type: ignore[arg-type]


def test_edit_issue_reports_missing_editor(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command: list[str], check: bool) -> None:
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(editor_module.subprocess, "run", fake_run)

    with pytest.raises(EditorError, match="Editor not found: no-such-editor"):
        edit_issue("no-such-editor")


def test_edit_issue_reports_editor_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command: list[str], check: bool) -> None:
        raise subprocess.CalledProcessError(returncode=1, cmd=command)

    monkeypatch.setattr(editor_module.subprocess, "run", fake_run)

    with pytest.raises(EditorError, match="status 1"):
        edit_issue("vi")


def test_resolve_editor_treats_closed_stdin_as_no_answer() -> None:
    def closed_stdin(_: str) -> str:
        raise EOFError

    with pytest.raises(EditorError, match="No editor provided"):
        resolve_editor(None, "", prompt=closed_stdin)
