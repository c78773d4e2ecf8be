"""Dashboard overview: session activity, branches, tags, snapshots."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..storage.annotations import AnnotationStore
from ..storage.helpers import parse_timestamp
from ..types import BranchGroup, SessionRecord, StatusOverview
from .sessions import SessionCatalog

NO_BRANCH = "no-branch"


def group_by_branch(sessions: list[SessionRecord]) -> list[BranchGroup]:
    """Groups ordered by session count, largest first."""
    groups: dict[str, BranchGroup] = {}
    for s in sessions:
        name = s.git_branch or NO_BRANCH
        group = groups.setdefault(name, BranchGroup(branch=name))
        group.sessions.append(s)
        activity = parse_timestamp(s.last_activity)
        if activity and (group.latest is None or activity > group.latest):
            group.latest = activity
    return sorted(groups.values(), key=lambda g: len(g.sessions), reverse=True)


def count_since(sessions: list[SessionRecord], cutoff: datetime) -> int:
    count = 0
    for s in sessions:
        activity = parse_timestamp(s.last_activity)
        if activity and activity > cutoff:
            count += 1
    return count


def build_overview(
    catalog: SessionCatalog,
    store: AnnotationStore,
    now: datetime | None = None,
) -> StatusOverview:
    now = now or datetime.now(timezone.utc)
    sessions = catalog.get_sessions()
    return StatusOverview(
        projects=catalog.get_projects(),
        sessions=sessions,
        today_count=count_since(sessions, now - timedelta(days=1)),
        week_count=count_since(sessions, now - timedelta(days=7)),
        branches=group_by_branch(sessions),
        snapshots=store.list_snapshots(),
        tags=store.get_all_tags(),
    )
