"""Shared fixtures for agent-manager tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from agent_manager.config import load_config
from agent_manager.storage.annotations import AnnotationStore
from agent_manager.types import AgentManagerConfig

APP_1 = "aaaa1111-0000-4000-8000-000000000001"
APP_2 = "aaaa2222-0000-4000-8000-000000000002"
LIB_1 = "bbbb3333-0000-4000-8000-000000000003"

T1 = "2025-03-01T09:00:00.000Z"
T2 = "2025-03-02T09:00:00.000Z"
T3 = "2025-03-03T09:00:00.000Z"

SAMPLE_LOG_LINES = [
    '{"message":{"role":"user","content":"hello world"}}',
    "",
    '{"type":"file-history-snapshot"}',
    '{"message":{"role":"assistant","content":[{"type":"text","text":"hi"},{"type":"tool_use"}]}}',
]


def write_index(project_dir: Path, entries: list[dict], **extra) -> Path:
    project_dir.mkdir(parents=True, exist_ok=True)
    path = project_dir / "sessions-index.json"
    path.write_text(json.dumps({"version": 1, "entries": entries, **extra}))
    return path


def write_log(project_dir: Path, session_id: str, lines: list) -> Path:
    """Write a JSONL log; dict lines are encoded, strings written verbatim."""
    project_dir.mkdir(parents=True, exist_ok=True)
    path = project_dir / f"{session_id}.jsonl"
    text = "\n".join(json.dumps(line) if isinstance(line, dict) else line for line in lines)
    path.write_text(text + "\n")
    return path


def user(text: str, ts: str | None = None) -> dict:
    record = {"type": "user", "message": {"role": "user", "content": text}}
    if ts:
        record["timestamp"] = ts
    return record


def assistant(text: str, tools: int = 0, ts: str | None = None) -> dict:
    content = [{"type": "text", "text": text}]
    content += [{"type": "tool_use", "name": "Bash", "input": {}} for _ in range(tools)]
    record = {"type": "assistant", "message": {"role": "assistant", "content": content}}
    if ts:
        record["timestamp"] = ts
    return record


@pytest.fixture
def claude_dir(tmp_path) -> Path:
    """A fake agent data root with two projects and three sessions.

    -work-app holds APP_1 (T3, main) and APP_2 (T2, feature/search), both
    with logs. -work-lib holds LIB_1 (T1, no branch, no summary) and no log.
    """
    root = tmp_path / "claude"
    app = root / "projects" / "-work-app"
    lib = root / "projects" / "-work-lib"

    write_index(app, [
        {
            "sessionId": APP_1,
            "projectPath": "/work/app",
            "gitBranch": "main",
            "summary": "Fix login bug",
            "firstPrompt": "the login form is broken",
            "messageCount": 5,
            "created": "2025-03-03T08:00:00.000Z",
            "modified": T3,
            "isSidechain": False,
        },
        {
            "sessionId": APP_2,
            "projectPath": "/work/app",
            "gitBranch": "feature/search",
            "summary": "Add search",
            "firstPrompt": "add a search box",
            "messageCount": 12,
            "created": "2025-03-02T08:00:00.000Z",
            "modified": T2,
        },
    ])
    write_index(lib, [
        {
            "sessionId": LIB_1,
            "firstPrompt": "hello lib",
            "messageCount": 2,
            "created": T1,
            "modified": T1,
        },
    ])

    write_log(app, APP_1, SAMPLE_LOG_LINES)
    write_log(app, APP_2, [
        user("where is the world config", ts=T2),
        assistant("It lives in config.yaml", tools=2, ts=T2),
        user("thanks"),
        {"type": "summary", "summary": "Add search"},
    ])

    (root / "debug").mkdir(parents=True)
    (root / "debug" / f"{APP_1}.txt").write_text("x" * 2048)

    history = [
        {"display": "first prompt", "timestamp": 1740819600000, "project": "/work/app"},
        {"display": "second prompt", "timestamp": 1740906000000, "project": "/work/lib"},
        {"display": "third prompt", "timestamp": 1740992400000, "project": "/work/app"},
    ]
    (root / "history.jsonl").write_text(
        "\n".join(json.dumps(h) for h in history) + "\nnot json\n"
    )
    return root


@pytest.fixture
def data_dir(tmp_path) -> Path:
    return tmp_path / "agent-manager"


@pytest.fixture
def config(claude_dir, data_dir) -> AgentManagerConfig:
    return load_config(config_dict={
        "claude_dir": str(claude_dir),
        "data_dir": str(data_dir),
    })


@pytest.fixture
def store(config) -> AnnotationStore:
    return AnnotationStore(config.paths.data_file)


@pytest.fixture
def config_file(claude_dir, data_dir, tmp_path) -> Path:
    """A YAML config file pointing at the fake tree, for CLI runs."""
    path = tmp_path / "agent-manager.yaml"
    path.write_text(
        f"claude_dir: {claude_dir}\n"
        f"data_dir: {data_dir}\n"
        "launcher:\n"
        "  executable: claude\n"
    )
    return path
