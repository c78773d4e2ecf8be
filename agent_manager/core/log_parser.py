"""SessionLogReader: streams a session's JSONL record file into Messages."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator

from ..types import AgentManagerConfig, Message, SessionNotFoundError
from .projects import get_all_projects

logger = logging.getLogger(__name__)

LOG_SUFFIX = ".jsonl"
SKIPPED_RECORD_TYPES = ("file-history-snapshot",)


def extract_content(content: object) -> tuple[str, int]:
    """Return (text, tool_use_count) for a message's content field.

    A string is taken as-is. A list contributes the newline-joined text of
    its ``text`` blocks and one tool use per ``tool_use`` block.
    """
    if isinstance(content, str):
        return content, 0
    if not isinstance(content, list):
        return "", 0

    parts: list[str] = []
    tool_uses = 0
    for block in content:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        if block_type == "text":
            text = block.get("text")
            parts.append(text if isinstance(text, str) else "")
        elif block_type == "tool_use":
            tool_uses += 1
    return "\n".join(parts), tool_uses


def parse_record(record: object, search: str | None = None) -> Message | None:
    """Normalize one decoded JSONL record, or None if it is not a message.

    With ``search``, the untrimmed text must contain it (case-insensitive).
    """
    if not isinstance(record, dict):
        return None
    message = record.get("message")
    if not message or not isinstance(message, dict):
        return None
    if record.get("type") in SKIPPED_RECORD_TYPES:
        return None

    role = message.get("role") or record.get("type") or ""
    if not isinstance(role, str):
        role = ""
    text, tool_uses = extract_content(message.get("content"))

    if search and search.lower() not in text.lower():
        return None

    if not text and tool_uses == 0:
        return None
    text = text.strip()

    return Message(
        role=role,
        text=text,
        timestamp=record.get("timestamp"),
        tool_use_count=tool_uses,
        uuid=record.get("uuid"),
    )


def iter_records(path: Path) -> Iterator[dict]:
    """Yield each JSON object in a JSONL file, skipping blank and bad lines."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("Skipping malformed line %d in %s", line_num, path)
                continue
            if isinstance(obj, dict):
                yield obj


class SessionLogReader:
    """Finds and parses per-session record files across all projects."""

    def __init__(self, config: AgentManagerConfig) -> None:
        self.config = config

    def locate_session_log(self, session_id: str) -> Path:
        """Path of ``<session_id>.jsonl``, probing projects in sorted order.

        Session IDs are expected to be globally unique. If several projects
        hold the same file the first is used and the rest are logged.
        """
        filename = f"{session_id}{LOG_SUFFIX}"
        candidates = [
            p.full_path / filename
            for p in get_all_projects(self.config)
            if (p.full_path / filename).is_file()
        ]
        if not candidates:
            raise SessionNotFoundError(f'Session log file not found for "{session_id}".')
        if len(candidates) > 1:
            logger.warning(
                "Session %s has %d log files; using %s (ignoring %s)",
                session_id,
                len(candidates),
                candidates[0],
                ", ".join(str(c) for c in candidates[1:]),
            )
        return candidates[0]

    def get_session_messages(
        self,
        session_id: str,
        search: str | None = None,
        limit: int | None = None,
    ) -> list[Message]:
        """Conversation messages for a session, optionally filtered and tail-limited."""
        path = self.locate_session_log(session_id)
        messages = self.read_messages(path, search=search)
        if limit and len(messages) > limit:
            return messages[-limit:]
        return messages

    def read_messages(self, path: Path, search: str | None = None) -> list[Message]:
        messages: list[Message] = []
        for record in iter_records(path):
            msg = parse_record(record, search=search)
            if msg is not None:
                messages.append(msg)
        return messages
