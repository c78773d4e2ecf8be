"""Global prompt history and per-session debug log metadata."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from ..types import AgentManagerConfig, DebugLogInfo

logger = logging.getLogger(__name__)


def get_history(config: AgentManagerConfig, limit: int = 50) -> list[dict]:
    """Last ``limit`` parseable history records, most recent first."""
    path = config.paths.history_file
    entries: list[dict] = []
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
    except OSError as e:
        logger.debug("History file %s not readable: %s", path, e)
        return []

    if limit < 1:
        return []
    return list(reversed(entries[-limit:]))


def get_debug_log_info(config: AgentManagerConfig, session_id: str) -> DebugLogInfo:
    """Presence, size and mtime of ``debug/<session_id>.txt``. Contents are not read."""
    path = config.paths.debug_dir / f"{session_id}.txt"
    try:
        st = path.stat()
    except OSError:
        return DebugLogInfo(exists=False, path=path)
    return DebugLogInfo(
        exists=True,
        path=path,
        size=st.st_size,
        modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
    )
