"""AnnotationStore: tags, notes, and snapshots in a single JSON document."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from ..types import AnnotationData, LoadStatus, Snapshot
from .helpers import dt_to_str

logger = logging.getLogger(__name__)


def _parse_document(data: object) -> AnnotationData:
    """Best-effort conversion of a decoded document; bad sections become empty."""
    if not isinstance(data, dict):
        raise ValueError("annotation document is not a JSON object")

    tags: dict[str, list[str]] = {}
    raw_tags = data.get("tags")
    if isinstance(raw_tags, dict):
        for session_id, values in raw_tags.items():
            if not isinstance(values, list):
                continue
            cleaned = list(dict.fromkeys(v for v in values if isinstance(v, str)))
            if cleaned:
                tags[session_id] = cleaned

    notes: dict[str, str] = {}
    raw_notes = data.get("notes")
    if isinstance(raw_notes, dict):
        notes = {k: v for k, v in raw_notes.items() if isinstance(v, str)}

    snapshots: dict[str, Snapshot] = {}
    raw_snapshots = data.get("snapshots")
    if isinstance(raw_snapshots, dict):
        for name, raw in raw_snapshots.items():
            if isinstance(raw, dict):
                snapshots[name] = Snapshot.from_dict(name, raw)

    return AnnotationData(tags=tags, notes=notes, snapshots=snapshots)


class AnnotationStore:
    """Read-modify-write store for user annotations.

    Every call reloads the document from disk. There is no locking: two
    processes mutating the store race and the last full write wins. Writes
    go through a temp file and ``os.replace`` so readers never see a
    partial document.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.last_load_status = LoadStatus.MISSING

    def _ensure_root(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> AnnotationData:
        """Full document; empty default when missing or corrupt."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.last_load_status = LoadStatus.MISSING
            return AnnotationData()
        except (OSError, UnicodeDecodeError) as e:
            logger.info("Unreadable annotation store %s: %s", self.path, e)
            self.last_load_status = LoadStatus.MALFORMED
            return AnnotationData()

        try:
            data = _parse_document(json.loads(raw))
        except (json.JSONDecodeError, ValueError) as e:
            logger.info("Malformed annotation store %s: %s", self.path, e)
            self.last_load_status = LoadStatus.MALFORMED
            return AnnotationData()

        self.last_load_status = LoadStatus.OK
        return data

    def save(self, data: AnnotationData) -> None:
        self._ensure_root()
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # -- tags ---------------------------------------------------------------

    def get_tags(self, session_id: str) -> list[str]:
        return list(self.load().tags.get(session_id, []))

    def add_tag(self, session_id: str, tag: str) -> None:
        data = self.load()
        tags = data.tags.setdefault(session_id, [])
        if tag not in tags:
            tags.append(tag)
        self.save(data)

    def remove_tag(self, session_id: str, tag: str) -> None:
        """Remove a tag; a session left with no tags is dropped from the map."""
        data = self.load()
        if session_id in data.tags:
            remaining = [t for t in data.tags[session_id] if t != tag]
            if remaining:
                data.tags[session_id] = remaining
            else:
                del data.tags[session_id]
        self.save(data)

    def get_sessions_by_tag(self, tag: str) -> list[str]:
        return [sid for sid, tags in self.load().tags.items() if tag in tags]

    def get_all_tags(self) -> list[str]:
        distinct: set[str] = set()
        for tags in self.load().tags.values():
            distinct.update(tags)
        return sorted(distinct)

    def get_tag_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for tags in self.load().tags.values():
            for tag in tags:
                counts[tag] = counts.get(tag, 0) + 1
        return dict(sorted(counts.items()))

    # -- notes --------------------------------------------------------------

    def get_note(self, session_id: str) -> str | None:
        return self.load().notes.get(session_id) or None

    def set_note(self, session_id: str, note: str) -> None:
        data = self.load()
        data.notes[session_id] = note
        self.save(data)

    def remove_note(self, session_id: str) -> None:
        data = self.load()
        data.notes.pop(session_id, None)
        self.save(data)

    # -- snapshots ----------------------------------------------------------

    def save_snapshot(
        self,
        name: str,
        session_ids: list[str],
        description: str = "",
    ) -> Snapshot:
        """Save (or overwrite) a named snapshot of session IDs."""
        data = self.load()
        snapshot = Snapshot(
            name=name,
            created=dt_to_str(datetime.now(timezone.utc)),
            description=description or "",
            sessions=list(session_ids),
        )
        data.snapshots[name] = snapshot
        self.save(data)
        return snapshot

    def get_snapshot(self, name: str) -> Snapshot | None:
        return self.load().snapshots.get(name)

    def list_snapshots(self) -> list[Snapshot]:
        return list(self.load().snapshots.values())

    def delete_snapshot(self, name: str) -> bool:
        data = self.load()
        if name not in data.snapshots:
            return False
        del data.snapshots[name]
        self.save(data)
        return True
