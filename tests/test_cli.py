"""Tests for the agent-manager CLI."""

from __future__ import annotations

import subprocess
import sys

import pytest

from agent_manager import launcher
from agent_manager.cli.main import main
from agent_manager.storage.annotations import AnnotationStore

from conftest import APP_1, APP_2, LIB_1, write_index


@pytest.fixture
def run(config_file, capsys):
    """Invoke main() in-process and return (exit_code, stdout, stderr)."""
    def _run(*args: str):
        code = 0
        try:
            main(["--config", str(config_file), *args])
        except SystemExit as e:
            code = e.code
        out, err = capsys.readouterr()
        return code, out, err
    return _run


@pytest.fixture
def cli_store(config) -> AnnotationStore:
    return AnnotationStore(config.paths.data_file)


def test_no_command_prints_help(config_file, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(config_file)])
    assert exc.value.code == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_missing_config_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(tmp_path / "nope.yaml"), "list"])
    assert exc.value.code == 1
    assert "not found" in capsys.readouterr().err


class TestStatus:
    def test_dashboard(self, run, cli_store):
        cli_store.add_tag(APP_1, "bug")
        code, out, _ = run("status")
        assert code == 0
        assert "Agent Manager Dashboard" in out
        assert "Projects:   2" in out
        assert "3 total" in out
        assert "#bug" in out
        assert "aaaa1111" in out
        assert "no-branch" in out


class TestList:
    def test_non_string_index_fields(self, run, claude_dir):
        write_index(claude_dir / "projects" / "-odd", [
            {"sessionId": "odd-1", "summary": 7, "gitBranch": 3, "firstPrompt": ["x"]},
        ])
        code, out, _ = run("list", "--branch", "main")
        assert code == 0
        assert "Sessions (1)" in out
        code, out, _ = run("list")
        assert code == 0
        assert "Sessions (4)" in out

    def test_lists_all(self, run):
        code, out, _ = run("list")
        assert code == 0
        assert "Sessions (3)" in out
        lines = out.splitlines()
        assert any(line.startswith("#   | ID") for line in lines)
        assert out.index("aaaa1111") < out.index("aaaa2222") < out.index("bbbb3333")

    def test_alias(self, run):
        assert "Sessions (3)" in run("ls")[1]

    def test_branch_filter(self, run):
        _, out, _ = run("list", "--branch", "SEARCH")
        assert "Sessions (1)" in out
        assert "aaaa2222" in out

    def test_tag_filter(self, run, cli_store):
        cli_store.add_tag(LIB_1, "later")
        _, out, _ = run("list", "--tag", "later")
        assert "Sessions (1)" in out
        assert "bbbb3333" in out
        assert "later" in out

    def test_sort_by_messages(self, run):
        _, out, _ = run("list", "--sort", "messages")
        assert out.index("aaaa2222") < out.index("aaaa1111")

    def test_limit(self, run):
        _, out, _ = run("list", "-n", "1")
        assert "Sessions (1)" in out

    def test_project_filter(self, run):
        _, out, _ = run("list", "--project", "/work/lib")
        assert "Sessions (1)" in out

    def test_no_results(self, run):
        _, out, _ = run("list", "--branch", "nothing-like-this")
        assert "No sessions found." in out


class TestShow:
    def test_details_and_messages(self, run, cli_store):
        cli_store.set_note(APP_1, "remember this")
        code, out, _ = run("show", "aaaa1")
        assert code == 0
        assert f"Session ID:    {APP_1}" in out
        assert "Fix login bug" in out
        assert "hello world" in out
        assert "[1 tool call(s)]" in out
        assert "remember this" in out
        assert "Debug Log:" in out
        assert f"claude --resume {APP_1}" in out

    def test_inspect_alias_and_message_limit(self, run):
        _, out, _ = run("inspect", APP_2, "-m", "1")
        assert "Last 1 Messages" in out
        assert "thanks" in out
        assert "where is the world config" not in out

    def test_missing_log(self, run):
        code, out, _ = run("show", "bbbb")
        assert code == 0
        assert "Error reading messages" in out

    def test_ambiguous_prefix(self, run):
        code, _, err = run("show", "aaaa")
        assert code == 1
        assert "Ambiguous" in err

    def test_unknown_session(self, run):
        code, _, err = run("show", "zzzz")
        assert code == 1
        assert "No session found" in err


class TestSearch:
    def test_matches(self, run):
        code, out, _ = run("search", "world")
        assert code == 0
        assert "Found 2 match(es)" in out
        assert "hello world" in out

    def test_multi_word_query(self, run):
        _, out, _ = run("find", "world", "config")
        assert "Found 1 match(es)" in out

    def test_limit(self, run):
        _, out, _ = run("search", "world", "-n", "1")
        assert "Found 1 match(es)" in out

    def test_no_matches(self, run):
        _, out, _ = run("search", "xyzzy")
        assert "No matches found." in out


class TestTagsAndNotes:
    def test_tag_untag(self, run, cli_store):
        code, out, _ = run("tag", "aaaa1", "urgent")
        assert code == 0
        assert "#urgent" in out
        assert cli_store.get_tags(APP_1) == ["urgent"]

        run("untag", "aaaa1", "urgent")
        assert cli_store.get_tags(APP_1) == []

    def test_tag_resolves_full_id(self, run, cli_store):
        run("tag", "bbbb", "lib")
        assert cli_store.get_sessions_by_tag("lib") == [LIB_1]

    def test_tags_listing(self, run, cli_store):
        _, out, _ = run("tags")
        assert "No tags yet" in out
        cli_store.add_tag(APP_1, "bug")
        cli_store.add_tag(APP_2, "bug")
        _, out, _ = run("tags")
        assert "bug" in out
        assert "2" in out

    def test_note_set_and_clear(self, run, cli_store):
        run("note", "aaaa2", "needs", "review")
        assert cli_store.get_note(APP_2) == "needs review"
        _, out, _ = run("note", "aaaa2")
        assert "Note cleared" in out
        assert cli_store.get_note(APP_2) is None


class TestSnapshot:
    def test_save_all_and_list(self, run, cli_store):
        code, out, _ = run("snapshot", "save", "eod", "-d", "end of day")
        assert code == 0
        assert '"eod" saved with 3 session(s)' in out
        assert cli_store.get_snapshot("eod").sessions == [APP_1, APP_2, LIB_1]

        _, out, _ = run("snap", "list")
        assert "eod" in out
        assert "end of day" in out

    def test_save_selected(self, run, cli_store):
        run("snapshot", "save", "pair", "--sessions", f"{APP_2},{APP_1}")
        assert cli_store.get_snapshot("pair").sessions == [APP_2, APP_1]

    def test_list_empty(self, run):
        _, out, _ = run("snapshot", "list")
        assert "No snapshots saved yet." in out

    def test_action_is_required(self, run):
        code, _, err = run("snapshot")
        assert code == 2
        assert "snapshot_action" in err or "required" in err

    def test_list_tolerates_hand_edited_fields(self, run, cli_store):
        cli_store.path.parent.mkdir(parents=True)
        cli_store.path.write_text(
            '{"snapshots": {"odd": {"created": 3, "description": 5, "sessions": ["a", 7]}}}'
        )
        code, out, _ = run("snapshot", "list")
        assert code == 0
        assert "odd" in out

    def test_restore_prints_commands(self, run, cli_store):
        cli_store.save_snapshot("pair", [APP_1, "gone-session"])
        code, out, _ = run("snapshot", "restore", "pair")
        assert code == 0
        assert f"claude --resume {APP_1}" in out
        assert "claude --resume gone-session" in out
        assert "--exec" in out

    def test_restore_exec_launches(self, run, cli_store, monkeypatch):
        launched = []

        class FakeProc:
            pid = 1

        def fake_popen(cmd, **kwargs):
            launched.append(cmd)
            return FakeProc()

        monkeypatch.setattr(launcher.subprocess, "Popen", fake_popen)
        cli_store.save_snapshot("pair", [APP_1, APP_2])
        code, out, _ = run("snapshot", "restore", "pair", "--exec")
        assert code == 0
        assert launched == [
            ["claude", "--resume", APP_1],
            ["claude", "--resume", APP_2],
        ]
        assert out.count("launched") == 2

    def test_restore_unknown(self, run):
        code, _, err = run("snapshot", "restore", "nope")
        assert code == 1
        assert 'Snapshot "nope" not found.' in err

    def test_delete(self, run, cli_store):
        cli_store.save_snapshot("old", [APP_1])
        code, out, _ = run("snapshot", "delete", "old")
        assert code == 0
        assert cli_store.get_snapshot("old") is None
        code, _, err = run("snapshot", "delete", "old")
        assert code == 1


class TestResume:
    def test_resume_runs_agent(self, run, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0)

        monkeypatch.setattr(launcher.subprocess, "run", fake_run)
        code, out, _ = run("resume", "aaaa2", "-m", "continue")
        assert code == 0
        assert calls == [["claude", "--resume", APP_2, "continue"]]
        assert "Resuming Session" in out

    def test_nonzero_exit_is_a_warning(self, run, monkeypatch):
        monkeypatch.setattr(
            launcher.subprocess, "run",
            lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 2),
        )
        code, _, err = run("resume", "bbbb")
        assert code == 0
        assert "exited with code 2" in err

    def test_missing_executable(self, run, monkeypatch):
        def boom(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(launcher.subprocess, "run", boom)
        code, _, err = run("resume", "bbbb")
        assert code == 1
        assert "Failed to start" in err


class TestMisc:
    def test_history(self, run):
        _, out, _ = run("history", "-n", "2")
        assert out.index("third prompt") < out.index("second prompt")
        assert "first prompt" not in out

    def test_projects(self, run):
        _, out, _ = run("projects")
        assert "/work/app" in out
        assert "/work/lib" in out

    def test_config_validate(self, run):
        code, out, _ = run("config", "validate")
        assert code == 0
        assert "Config is valid." in out

    def test_config_validate_errors(self, tmp_path, capsys):
        bad = tmp_path / "bad.yaml"
        bad.write_text("display:\n  list_limit: 0\n")
        with pytest.raises(SystemExit) as exc:
            main(["--config", str(bad), "config", "validate"])
        assert exc.value.code == 1
        assert "list_limit" in capsys.readouterr().out


def test_module_entry_point(config_file):
    result = subprocess.run(
        [sys.executable, "-m", "agent_manager.cli.main", "--config", str(config_file), "list"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr
    assert "Sessions (3)" in result.stdout
