"""Shared helpers for timestamps and text excerpts."""

from __future__ import annotations

from datetime import datetime, timezone

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def dt_to_str(dt: datetime) -> str:
    return dt.isoformat()


def str_to_dt(s: str) -> datetime:
    # fromisoformat only accepts a trailing "Z" from 3.11 on
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_timestamp(value: object) -> datetime | None:
    """Coerce an ISO string or epoch number (seconds or milliseconds) to a datetime.

    Returns None for missing or unparseable values.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return str_to_dt(value.strip())
        except ValueError:
            return None
    return None


def timestamp_sort_key(value: object) -> float:
    """Epoch seconds for sorting; 0 for missing or unparseable values."""
    dt = parse_timestamp(value)
    return dt.timestamp() if dt else 0.0


def extract_excerpt(text: str, query: str, context_chars: int = 200) -> str:
    """Extract text around the first occurrence of query."""
    idx = text.lower().find(query.lower())
    if idx == -1:
        return text[:context_chars * 2]
    start = max(0, idx - context_chars)
    end = min(len(text), idx + len(query) + context_chars)
    excerpt = text[start:end]
    if start > 0:
        excerpt = "..." + excerpt
    if end < len(text):
        excerpt = excerpt + "..."
    return excerpt
