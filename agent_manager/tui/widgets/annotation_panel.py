"""Tags and note for the selected session."""

from __future__ import annotations

from rich.markup import escape
from textual.widgets import Static


class AnnotationPanel(Static):
    """Shows the selected session's tags and note.

    Uses render() instead of Static.update() so the panel always draws the
    data set by the most recent worker callback.
    """

    DEFAULT_CSS = """
    AnnotationPanel {
        padding: 0 1;
        height: auto;
        max-height: 12;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._tags: list[str] = []
        self._note: str | None = None

    @property
    def tags(self) -> list[str]:
        return list(self._tags)

    @property
    def note(self) -> str | None:
        return self._note

    def update_annotations(self, tags: list[str], note: str | None) -> None:
        self._tags = list(tags)
        self._note = note
        self.refresh(layout=True)

    def render(self) -> str:
        lines = ["[bold]TAGS[/bold]"]
        if self._tags:
            lines.append("  " + "  ".join(f"[yellow]#{escape(t)}[/yellow]" for t in self._tags))
        else:
            lines.append("  [dim]No tags[/dim]")
        lines.append("[bold]NOTE[/bold]")
        lines.append(f"  {escape(self._note)}" if self._note else "  [dim]No note[/dim]")
        return "\n".join(lines)
