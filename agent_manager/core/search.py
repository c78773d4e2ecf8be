"""Cross-session text search over every session log."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from ..types import Message, SearchHit, SessionNotFoundError, SessionRecord
from .log_parser import SessionLogReader
from .sessions import SessionCatalog

logger = logging.getLogger(__name__)


def _matching_messages(
    reader: SessionLogReader,
    session: SessionRecord,
    query: str,
) -> list[Message]:
    try:
        return reader.get_session_messages(session.session_id, search=query)
    except (SessionNotFoundError, OSError) as e:
        logger.debug("Skipping session %s during search: %s", session.session_id, e)
        return []


def _to_hit(session: SessionRecord, msg: Message) -> SearchHit:
    return SearchHit(
        session_id=session.session_id,
        role=msg.role,
        text=msg.text,
        timestamp=msg.timestamp,
        summary=session.summary,
        project_path=session.project_path,
        git_branch=session.git_branch,
    )


def search_all_sessions(
    catalog: SessionCatalog,
    reader: SessionLogReader,
    query: str,
    max_results: int = 20,
    workers: int = 1,
) -> list[SearchHit]:
    """Matches for ``query``, most recent session first, capped at ``max_results``.

    With ``workers > 1`` logs are parsed in ordered batches on a thread
    pool; hits are still consumed in catalog order, so the result is the
    same as the sequential run.
    """
    if not query or max_results < 1:
        return []

    sessions = catalog.get_sessions()
    hits: list[SearchHit] = []

    if workers <= 1:
        for session in sessions:
            for msg in _matching_messages(reader, session, query):
                hits.append(_to_hit(session, msg))
                if len(hits) >= max_results:
                    return hits
        return hits

    with ThreadPoolExecutor(max_workers=workers) as pool:
        for start in range(0, len(sessions), workers):
            batch = sessions[start:start + workers]
            results = pool.map(lambda s: _matching_messages(reader, s, query), batch)
            for session, messages in zip(batch, results):
                for msg in messages:
                    hits.append(_to_hit(session, msg))
                    if len(hits) >= max_results:
                        return hits
    return hits
