"""All dataclasses, enums, and exceptions for agent-manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


def _str_or_none(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Project:
    """One directory under the agent runtime's projects root."""
    dir_name: str
    project_path: str  # decoded from dir_name, lossy
    full_path: Path


class LoadStatus(str, Enum):
    OK = "ok"
    MISSING = "missing"
    MALFORMED = "malformed"


@dataclass
class SessionRecord:
    """Lightweight session metadata from a project's sessions-index.json."""
    session_id: str
    project_path: str = ""
    git_branch: str | None = None
    summary: str | None = None
    first_prompt: str | None = None
    message_count: int = 0
    created: str | None = None
    modified: str | None = None
    full_path: str | None = None
    is_sidechain: bool = False

    @classmethod
    def from_index_entry(cls, entry: dict, fallback_project_path: str) -> SessionRecord:
        count = entry.get("messageCount") or 0
        return cls(
            session_id=entry["sessionId"],
            project_path=_str_or_none(entry.get("projectPath")) or fallback_project_path,
            git_branch=_str_or_none(entry.get("gitBranch")),
            summary=_str_or_none(entry.get("summary")),
            first_prompt=_str_or_none(entry.get("firstPrompt")),
            message_count=count if isinstance(count, int) else 0,
            created=entry.get("created"),
            modified=entry.get("modified"),
            full_path=_str_or_none(entry.get("fullPath")),
            is_sidechain=bool(entry.get("isSidechain", False)),
        )

    @property
    def last_activity(self) -> str | None:
        return self.modified or self.created

    @property
    def title(self) -> str:
        return self.summary or self.first_prompt or ""

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "projectPath": self.project_path,
            "gitBranch": self.git_branch,
            "summary": self.summary,
            "firstPrompt": self.first_prompt,
            "messageCount": self.message_count,
            "created": self.created,
            "modified": self.modified,
        }


@dataclass
class IndexReadResult:
    """Entries read from one sessions-index.json, plus why it may be empty."""
    path: Path
    status: LoadStatus
    entries: list[SessionRecord] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Messages & search
# ---------------------------------------------------------------------------

@dataclass
class Message:
    role: str  # "user", "assistant", or the record type
    text: str
    timestamp: str | None = None
    tool_use_count: int = 0
    uuid: str | None = None


@dataclass
class SearchHit:
    """A matching message annotated with its session's metadata."""
    session_id: str
    role: str
    text: str
    timestamp: str | None = None
    summary: str | None = None
    project_path: str = ""
    git_branch: str | None = None


@dataclass
class DebugLogInfo:
    exists: bool
    path: Path
    size: int = 0
    modified: datetime | None = None


# ---------------------------------------------------------------------------
# Annotations
# ---------------------------------------------------------------------------

@dataclass
class Snapshot:
    """Named, timestamped list of session IDs saved for later replay."""
    name: str
    created: str
    description: str = ""
    sessions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        # name is the key in the document, not a field
        return {
            "created": self.created,
            "description": self.description,
            "sessions": list(self.sessions),
        }

    @classmethod
    def from_dict(cls, name: str, raw: dict) -> Snapshot:
        sessions = raw.get("sessions")
        if not isinstance(sessions, list):
            sessions = []
        return cls(
            name=name,
            created=_str_or_none(raw.get("created")) or "",
            description=_str_or_none(raw.get("description")) or "",
            sessions=[s for s in sessions if isinstance(s, str)],
        )


@dataclass
class AnnotationData:
    """The whole annotation document: tags, notes, snapshots."""
    tags: dict[str, list[str]] = field(default_factory=dict)
    notes: dict[str, str] = field(default_factory=dict)
    snapshots: dict[str, Snapshot] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "tags": self.tags,
            "notes": self.notes,
            "snapshots": {name: snap.to_dict() for name, snap in self.snapshots.items()},
        }


# ---------------------------------------------------------------------------
# Dashboard overview
# ---------------------------------------------------------------------------

@dataclass
class BranchGroup:
    branch: str
    sessions: list[SessionRecord] = field(default_factory=list)
    latest: datetime | None = None


@dataclass
class StatusOverview:
    projects: list[Project] = field(default_factory=list)
    sessions: list[SessionRecord] = field(default_factory=list)
    today_count: int = 0
    week_count: int = 0
    branches: list[BranchGroup] = field(default_factory=list)
    snapshots: list[Snapshot] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class AgentManagerError(Exception):
    """Base class for user-facing lookup and launch failures."""


class SessionNotFoundError(AgentManagerError):
    pass


class AmbiguousSessionError(AgentManagerError):
    def __init__(self, prefix: str, count: int):
        super().__init__(
            f'Ambiguous session ID "{prefix}" matches {count} sessions. '
            f"Use a longer prefix."
        )
        self.prefix = prefix
        self.count = count


class SnapshotNotFoundError(AgentManagerError):
    def __init__(self, name: str):
        super().__init__(f'Snapshot "{name}" not found.')
        self.name = name


class LauncherError(AgentManagerError):
    def __init__(self, message: str, executable: str):
        super().__init__(message)
        self.executable = executable


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class PathsConfig:
    claude_dir: Path = field(default_factory=lambda: Path.home() / ".claude")
    data_dir: Path = field(default_factory=lambda: Path.home() / ".agent-manager")

    @property
    def projects_dir(self) -> Path:
        return self.claude_dir / "projects"

    @property
    def history_file(self) -> Path:
        return self.claude_dir / "history.jsonl"

    @property
    def debug_dir(self) -> Path:
        return self.claude_dir / "debug"

    @property
    def data_file(self) -> Path:
        return self.data_dir / "data.json"


@dataclass
class LauncherConfig:
    executable: str = "claude"
    resume_flag: str = "--resume"


@dataclass
class DisplayConfig:
    list_limit: int = 20
    show_messages: int = 10
    search_limit: int = 20
    recent_sessions: int = 8
    history_limit: int = 20


@dataclass
class SearchConfig:
    workers: int = 1  # >1 parses logs on a thread pool, same results


@dataclass
class AgentManagerConfig:
    paths: PathsConfig = field(default_factory=PathsConfig)
    launcher: LauncherConfig = field(default_factory=LauncherConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    source: Path | None = None  # config file this was loaded from, if any
