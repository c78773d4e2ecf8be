"""Plain-text formatting helpers for CLI output."""

from __future__ import annotations

from datetime import datetime, timezone

from ..storage.helpers import parse_timestamp

ELLIPSIS = "…"
MAX_AUTO_WIDTH = 50


def truncate(text: str | None, max_len: int) -> str:
    if not text:
        return ""
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + ELLIPSIS


def short_id(session_id: str | None) -> str:
    return session_id[:8] if session_id else "????????"


def time_ago(value: object, now: datetime | None = None) -> str:
    """Relative time like "5m ago"; falls back to a date after four weeks."""
    dt = parse_timestamp(value)
    if dt is None:
        return "-"
    now = now or datetime.now(timezone.utc)
    seconds = int((now - dt).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    weeks = days // 7

    if seconds < 60:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    if weeks < 4:
        return f"{weeks}w ago"
    return dt.astimezone().strftime("%Y-%m-%d")


def short_date(value: object) -> str:
    """Local "Mon D, HH:MM" rendering of a timestamp."""
    dt = parse_timestamp(value)
    if dt is None:
        return "-"
    local = dt.astimezone()
    return f"{local.strftime('%b')} {local.day}, {local.strftime('%H:%M')}"


def render_table(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int] | None = None,
) -> list[str]:
    """Render rows as aligned text lines (header, separator, rows)."""
    if not rows:
        return []
    if widths is None:
        widths = [
            min(max([len(h)] + [len(r[i]) if i < len(r) else 0 for r in rows]), MAX_AUTO_WIDTH)
            for i, h in enumerate(headers)
        ]

    lines = [" | ".join(f"{h:<{w}}" for h, w in zip(headers, widths)).rstrip()]
    lines.append("-+-".join("-" * w for w in widths))
    for row in rows:
        cells = [truncate(cell, w) if cell else "" for cell, w in zip(row, widths)]
        lines.append(" | ".join(f"{c:<{w}}" for c, w in zip(cells, widths)).rstrip())
    return lines


def print_header(title: str, char: str = "=") -> None:
    print(title)
    print(char * max(len(title), 40))
