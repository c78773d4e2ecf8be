"""Configuration loading, validation, and defaults."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml

from .types import (
    AgentManagerConfig,
    DisplayConfig,
    LauncherConfig,
    PathsConfig,
    SearchConfig,
)

CONFIG_FILENAMES = [
    "agent-manager.yaml",
    "agent-manager.yml",
    "agent-manager.json",
]

CLAUDE_DIR_ENV = "CLAUDE_CONFIG_DIR"
DATA_DIR_ENV = "AGENT_MANAGER_HOME"

DEFAULT_CLAUDE_DIR = Path.home() / ".claude"
DEFAULT_DATA_DIR = Path.home() / ".agent-manager"


def _discover_config() -> Path | None:
    """Search CWD then parent dirs up to home, then the data dir."""
    cwd = Path.cwd()
    home = Path.home()
    search = cwd
    while True:
        for name in CONFIG_FILENAMES:
            candidate = search / name
            if candidate.is_file():
                return candidate
        if search == home or search == search.parent:
            break
        search = search.parent

    data_dir = Path(os.environ.get(DATA_DIR_ENV) or DEFAULT_DATA_DIR).expanduser()
    for name in ("config.yaml", "config.yml", "config.json"):
        candidate = data_dir / name
        if candidate.is_file():
            return candidate
    return None


def _resolve_dir(raw_value: Any, env_name: str, default: Path) -> Path:
    if raw_value:
        return Path(str(raw_value)).expanduser()
    env_value = os.environ.get(env_name)
    if env_value:
        return Path(env_value).expanduser()
    return default


def _build_config(raw: dict[str, Any], source: Path | None = None) -> AgentManagerConfig:
    """Build an AgentManagerConfig from a raw dict."""
    paths = PathsConfig(
        claude_dir=_resolve_dir(raw.get("claude_dir"), CLAUDE_DIR_ENV, DEFAULT_CLAUDE_DIR),
        data_dir=_resolve_dir(raw.get("data_dir"), DATA_DIR_ENV, DEFAULT_DATA_DIR),
    )

    launcher_raw = raw.get("launcher", {}) or {}
    launcher = LauncherConfig(
        executable=launcher_raw.get("executable", "claude"),
        resume_flag=launcher_raw.get("resume_flag", "--resume"),
    )

    display_raw = raw.get("display", {}) or {}
    display = DisplayConfig(
        list_limit=display_raw.get("list_limit", 20),
        show_messages=display_raw.get("show_messages", 10),
        search_limit=display_raw.get("search_limit", 20),
        recent_sessions=display_raw.get("recent_sessions", 8),
        history_limit=display_raw.get("history_limit", 20),
    )

    search_raw = raw.get("search", {}) or {}
    search = SearchConfig(workers=search_raw.get("workers", 1))

    return AgentManagerConfig(
        paths=paths,
        launcher=launcher,
        display=display,
        search=search,
        source=source,
    )


def validate_config(config: AgentManagerConfig) -> list[str]:
    """Validate a config. Returns list of error strings (empty = valid)."""
    errors: list[str] = []

    for name in ("list_limit", "show_messages", "search_limit", "recent_sessions", "history_limit"):
        value = getattr(config.display, name)
        if not isinstance(value, int) or value < 1:
            errors.append(f"display.{name} must be a positive integer (got {value!r})")

    if not isinstance(config.search.workers, int) or config.search.workers < 1:
        errors.append(f"search.workers must be >= 1 (got {config.search.workers!r})")

    if not config.launcher.executable:
        errors.append("launcher.executable must not be empty")

    return errors


def load_config(
    config_path: str | Path | None = None,
    config_dict: dict | None = None,
) -> AgentManagerConfig:
    """Load config from dict, explicit path, or auto-discover."""
    if config_dict is not None:
        return _build_config(config_dict)

    if config_path is not None:
        path = Path(config_path)
    else:
        path = _discover_config()

    if path is None:
        return _build_config({})

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text) or {}

    return _build_config(raw, source=path)
