"""Tests for the notetree CLI."""

import json
from collections.abc import Iterator

import pytest
from loguru import logger
from typer.testing import CliRunner

from notetree.cli import app
from notetree.errors import TransportError
from tests.unit.fakes import TREE_PAYLOAD
from tests.unit.fakes import FakeNoteApi

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep log lines out of the captured command output."""
    monkeypatch.setattr("notetree.cli.configure_logging", lambda **kwargs: logger.remove())


@pytest.fixture
def fake_api(monkeypatch: pytest.MonkeyPatch) -> Iterator[FakeNoteApi]:
    """Replace NoteApi in the CLI with an in-memory fake."""
    api = FakeNoteApi(TREE_PAYLOAD)
    monkeypatch.setattr("notetree.cli.NoteApi", lambda *args, **kwargs: api)
    yield api


def test_trash_lists_deleted_notes(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["trash"])

    assert result.exit_code == 0, result.output
    assert "2 notes in trash" in result.output
    assert "id=a" in result.output
    assert "id=b" in result.output
    assert "Work" not in result.output


def test_trash_filters_by_keyword_as_json(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["trash", "notes", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["count"] == 1
    assert data["notes"][0]["id"] == "b"


def test_trash_reports_transport_failure(fake_api: FakeNoteApi) -> None:
    fake_api.error = TransportError("offline")

    result = runner.invoke(app, ["trash"])

    assert result.exit_code == 1


def test_restore_sends_resolved_parent(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["restore", "b"])

    assert result.exit_code == 0, result.output
    assert "Restored 'Archive notes' under root" in result.output
    assert fake_api.calls == [("restore", {"id": "b", "parentId": "root"})]


def test_restore_unknown_note_fails(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["restore", "work"])

    assert result.exit_code == 1
    assert "not in the trash" in result.output
    assert fake_api.calls == []


def test_delete_with_yes_skips_prompt(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["delete", "a", "--yes"])

    assert result.exit_code == 0, result.output
    assert fake_api.calls == [("delete", {"id": "a"})]


def test_delete_aborts_when_not_confirmed(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["delete", "a"], input="n\n")

    assert result.exit_code == 1
    assert fake_api.calls == []


def test_delete_failure_exits_non_zero(fake_api: FakeNoteApi) -> None:
    fake_api.errors["a"] = TransportError("offline")

    result = runner.invoke(app, ["delete", "a", "--yes"])

    assert result.exit_code == 1


def test_search_finds_live_notes(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["search", "friday", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["total"] == 1
    assert data["results"][0]["note_id"] == "plan"
    assert data["results"][0]["breadcrumbs"] == ["Work"]


def test_search_text_output(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["search", "Home"])

    assert result.exit_code == 0, result.output
    assert "Found 1 results" in result.output
    assert "id=home" in result.output


def test_tree_prints_markdown(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["tree"])

    assert result.exit_code == 0, result.output
    assert "- Work\n    - Plan (draft)\n- Home\n" in result.output
    assert "Archive" not in result.output


def test_tree_unknown_note_fails(fake_api: FakeNoteApi) -> None:
    result = runner.invoke(app, ["tree", "missing"])

    assert result.exit_code == 1
    assert "not found" in result.output
