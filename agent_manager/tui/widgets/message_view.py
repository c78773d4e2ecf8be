"""Scrollable session message display."""

from __future__ import annotations

from rich.markup import escape
from textual.widgets import RichLog

from ...cli.format import short_date, short_id
from ...types import Message, SessionRecord

ROLE_STYLES = {
    "user": ("You", "bold cyan"),
    "assistant": ("Assistant", "bold green"),
}


class MessageView(RichLog):
    """Shows the tail of one session's conversation."""

    def __init__(self, **kwargs) -> None:
        super().__init__(markup=True, wrap=True, auto_scroll=True, **kwargs)
        self._message_log: list[str] = []

    def _write_line(self, markup: str) -> None:
        self._message_log.append(markup)
        self.write(markup)

    def reset(self) -> None:
        self._message_log = []
        self.clear()

    def add_system_message(self, text: str) -> None:
        self._write_line(f"[dim italic]{escape(text)}[/dim italic]")
        self._write_line("")

    def show_messages(self, session: SessionRecord, messages: list[Message]) -> None:
        self.reset()
        self._write_line(
            f"[bold]{short_id(session.session_id)}[/bold]  "
            f"[dim]{escape(session.git_branch or '-')}[/dim]  {escape(session.title or '')}"
        )
        self._write_line("")
        if not messages:
            self.add_system_message("No messages found.")
            return
        for msg in messages:
            label, style = ROLE_STYLES.get(msg.role, (msg.role or "?", "bold magenta"))
            when = f" [dim]{short_date(msg.timestamp)}[/dim]" if msg.timestamp else ""
            self._write_line(f"[{style}]{escape(label)}:[/{style}]{when}")
            if msg.text:
                self._write_line(escape(msg.text))
            if msg.tool_use_count:
                self._write_line(f"[dim]\\[{msg.tool_use_count} tool call(s)][/dim]")
            self._write_line("")
