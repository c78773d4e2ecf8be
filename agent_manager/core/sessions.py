"""SessionCatalog: merges session indexes across projects, newest first."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..storage.helpers import timestamp_sort_key
from ..types import (
    AgentManagerConfig,
    AmbiguousSessionError,
    IndexReadResult,
    Project,
    SessionNotFoundError,
    SessionRecord,
)
from .projects import get_all_projects
from .session_index import read_session_index

logger = logging.getLogger(__name__)


def session_sort_key(session: SessionRecord) -> float:
    """Epoch seconds of the last activity (modified, else created), 0 if unknown."""
    return timestamp_sort_key(session.last_activity)


class SessionCatalog:
    """Read-only view of every session the agent runtime has indexed."""

    def __init__(self, config: AgentManagerConfig) -> None:
        self.config = config
        self.last_reads: list[IndexReadResult] = []

    def get_projects(self) -> list[Project]:
        return get_all_projects(self.config)

    def get_sessions(self, project_path: str | None = None) -> list[SessionRecord]:
        """All sessions (optionally for one decoded project path), most recent first."""
        projects = self.get_projects()
        if project_path:
            projects = [p for p in projects if p.project_path == project_path]

        self.last_reads = [read_session_index(p.full_path) for p in projects]
        sessions: list[SessionRecord] = []
        for result in self.last_reads:
            sessions.extend(result.entries)

        sessions.sort(key=session_sort_key, reverse=True)
        return sessions

    def find_session(self, id_or_prefix: str) -> SessionRecord:
        """Resolve a full session ID or a unique prefix of one."""
        sessions = self.get_sessions()
        for session in sessions:
            if session.session_id == id_or_prefix:
                return session

        matches = [s for s in sessions if s.session_id.startswith(id_or_prefix)]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise AmbiguousSessionError(id_or_prefix, len(matches))
        raise SessionNotFoundError(f'No session found matching "{id_or_prefix}".')

    def session_map(self) -> dict[str, SessionRecord]:
        return {s.session_id: s for s in self.get_sessions()}


def filter_sessions(
    sessions: Iterable[SessionRecord],
    branch: str | None = None,
    session_ids: set[str] | None = None,
) -> list[SessionRecord]:
    """Branch substring match (case-insensitive) and optional ID allow-list."""
    result = list(sessions)
    if branch:
        needle = branch.lower()
        result = [s for s in result if s.git_branch and needle in s.git_branch.lower()]
    if session_ids is not None:
        result = [s for s in result if s.session_id in session_ids]
    return result


def sort_sessions(sessions: list[SessionRecord], by: str = "date") -> list[SessionRecord]:
    """Sort by message count ("messages") or keep catalog order ("date")."""
    if by == "messages":
        return sorted(sessions, key=lambda s: s.message_count or 0, reverse=True)
    return list(sessions)
