"""Reader for a project's sessions-index.json."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..types import IndexReadResult, LoadStatus, SessionRecord
from .projects import decode_project_dir

logger = logging.getLogger(__name__)

INDEX_FILENAME = "sessions-index.json"


def read_session_index(project_dir: Path) -> IndexReadResult:
    """Read one project's session index.

    Never raises on bad input: a missing, unreadable, or malformed index
    yields no entries, with ``status`` telling the two cases apart.
    """
    path = Path(project_dir) / INDEX_FILENAME
    fallback_path = decode_project_dir(Path(project_dir).name)

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No session index at %s", path)
        return IndexReadResult(path=path, status=LoadStatus.MISSING)
    except (OSError, UnicodeDecodeError) as e:
        logger.info("Unreadable session index %s: %s", path, e)
        return IndexReadResult(path=path, status=LoadStatus.MALFORMED)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.info("Malformed session index %s: %s", path, e)
        return IndexReadResult(path=path, status=LoadStatus.MALFORMED)

    if not isinstance(data, dict):
        logger.info("Session index %s is not a JSON object", path)
        return IndexReadResult(path=path, status=LoadStatus.MALFORMED)

    raw_entries = data.get("entries") or []
    if not isinstance(raw_entries, list):
        logger.info("Session index %s has a non-list 'entries' field", path)
        return IndexReadResult(path=path, status=LoadStatus.MALFORMED)

    entries: list[SessionRecord] = []
    for entry in raw_entries:
        if not isinstance(entry, dict):
            continue
        session_id = entry.get("sessionId")
        if not isinstance(session_id, str) or not session_id:
            continue
        entries.append(SessionRecord.from_index_entry(entry, fallback_path))

    return IndexReadResult(path=path, status=LoadStatus.OK, entries=entries)
