import io
import json
from datetime import datetime, timezone

import pytest

from workshot.cli import build_plugin_manager, main
from workshot.render import render_restore_commands
from workshot.storage import Storage
from workshot.types import Snapshot, get_version


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("USERPROFILE", str(home_dir))
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return home_dir


def _save(home, name, workdir):
    snap = Snapshot(
        name=name,
        created_at=datetime.now(timezone.utc),
        working_dir=str(workdir),
    )
    Storage(home).save(snap)
    return snap


def test_plugin_manager_registers_git_and_terminal():
    assert build_plugin_manager().list_capturers() == ["git", "terminal"]


def test_version_prints_only_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out == get_version() + "\n"


def test_freeze_then_show_json(home, tmp_path, capsys):
    assert main(["freeze", "task"]) == 0
    assert "saved successfully!" in capsys.readouterr().out
    assert main(["show", "task", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["name"] == "task"
    assert data["working_dir"] == str(tmp_path / "work")


def test_freeze_existing_name_fails(home, capsys):
    assert main(["freeze", "task"]) == 0
    capsys.readouterr()
    assert main(["freeze", "task"]) == 1
    assert "already exists" in capsys.readouterr().err


def test_list_empty(home, capsys):
    assert main(["list"]) == 0
    assert "No saved workshots found." in capsys.readouterr().out


def test_list_alias_shows_saved(home, tmp_path, capsys):
    _save(home, "alpha", tmp_path / "work")
    assert main(["ls"]) == 0
    out = capsys.readouterr().out
    assert "Found 1 saved workshot(s):" in out
    assert "alpha" in out
    assert "just now" in out


def test_delete_force(home, tmp_path, capsys):
    _save(home, "gone", tmp_path / "work")
    assert main(["delete", "gone", "-f"]) == 0
    assert Storage(home).exists("gone") is False


def test_delete_cancelled(home, tmp_path, capsys, monkeypatch):
    _save(home, "kept", tmp_path / "work")
    monkeypatch.setattr("sys.stdin", io.StringIO("n\n"))
    assert main(["delete", "kept"]) == 0
    assert "Cancelled." in capsys.readouterr().out
    assert Storage(home).exists("kept") is True


def test_rm_alias_confirmed(home, tmp_path, capsys, monkeypatch):
    _save(home, "old", tmp_path / "work")
    monkeypatch.setattr("sys.stdin", io.StringIO("yes\n"))
    assert main(["rm", "old"]) == 0
    assert Storage(home).exists("old") is False


def test_delete_missing(home, capsys):
    assert main(["delete", "nope", "-f"]) == 1
    assert "workshot 'nope' not found" in capsys.readouterr().err


def test_restore_commands_only(home, tmp_path, capsys):
    snap = _save(home, "task", tmp_path / "work")
    assert main(["restore", "task", "-c"]) == 0
    assert capsys.readouterr().out == render_restore_commands(snap)


def test_restore_full_view(home, tmp_path, capsys):
    _save(home, "task", tmp_path / "work")
    assert main(["restore", "task"]) == 0
    out = capsys.readouterr().out
    assert " Snapshot: task" in out
    assert " Commands to restore:" in out


def test_restore_missing(home, capsys):
    assert main(["restore", "nope"]) == 1
    assert "failed to load snapshot 'nope'" in capsys.readouterr().err


def test_info_alias_and_show_missing(home, tmp_path, capsys):
    _save(home, "task", tmp_path / "work")
    assert main(["info", "task"]) == 0
    assert " Metadata:" in capsys.readouterr().out
    assert main(["show", "nope"]) == 1
    assert "workshot 'nope' not found" in capsys.readouterr().err


def test_missing_argument_is_an_error(home, capsys):
    assert main(["show"]) == 1