"""SessionBrowserApp: Textual browser over sessions, messages, and annotations."""

from __future__ import annotations

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Footer, Static

from ..cli.format import short_id, time_ago, truncate
from ..config import load_config
from ..core.log_parser import SessionLogReader
from ..core.sessions import SessionCatalog
from ..storage.annotations import AnnotationStore
from ..types import AgentManagerConfig, AgentManagerError, Message, SessionRecord
from .widgets.annotation_panel import AnnotationPanel
from .widgets.message_view import MessageView

COLUMNS = ("ID", "Branch", "Summary", "Msgs", "Modified", "Tags")


class SessionBrowserApp(App):
    """Session table on the left, conversation tail and annotations on the right."""

    CSS = """
    #main-layout {
        height: 1fr;
    }
    #session-area {
        width: 3fr;
    }
    #detail-panel {
        width: 2fr;
        border-left: solid $accent;
    }
    #session-table {
        height: 1fr;
    }
    #message-view {
        height: 1fr;
    }
    #status-line {
        height: 1;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "reload", "Reload"),
        Binding("ctrl+f", "next_session", "Next", priority=True),
        Binding("ctrl+b", "prev_session", "Prev", priority=True),
    ]

    def __init__(
        self,
        config: AgentManagerConfig | None = None,
        config_path: str | None = None,
    ) -> None:
        super().__init__()
        self.config = config or load_config(config_path)
        self.catalog = SessionCatalog(self.config)
        self.reader = SessionLogReader(self.config)
        self.store = AnnotationStore(self.config.paths.data_file)
        self._sessions: list[SessionRecord] = []
        self._selected: SessionRecord | None = None

    @property
    def _table(self) -> DataTable:
        return self.query_one("#session-table", DataTable)

    @property
    def _message_view(self) -> MessageView:
        return self.query_one("#message-view", MessageView)

    @property
    def _annotation_panel(self) -> AnnotationPanel:
        return self.query_one("#annotation-panel", AnnotationPanel)

    @property
    def sessions(self) -> list[SessionRecord]:
        return list(self._sessions)

    @property
    def selected_session(self) -> SessionRecord | None:
        return self._selected

    def compose(self) -> ComposeResult:
        with Horizontal(id="main-layout"):
            with Vertical(id="session-area"):
                yield DataTable(id="session-table", cursor_type="row", zebra_stripes=True)
                yield Static("", id="status-line")
            with Vertical(id="detail-panel"):
                yield AnnotationPanel(id="annotation-panel")
                yield MessageView(id="message-view")
        yield Footer()

    def on_mount(self) -> None:
        self._table.add_columns(*COLUMNS)
        self._populate()
        self._table.focus()

    def _populate(self) -> None:
        self._sessions = self.catalog.get_sessions()
        data = self.store.load()
        table = self._table
        table.clear()
        for s in self._sessions:
            tags = data.tags.get(s.session_id, [])
            table.add_row(
                short_id(s.session_id),
                truncate(s.git_branch or "-", 24),
                truncate(s.title or "-", 40),
                str(s.message_count or 0),
                time_ago(s.last_activity),
                ", ".join(tags) if tags else "",
                key=s.session_id,
            )

        status = self.query_one("#status-line", Static)
        status.update(
            f"{len(self._sessions)} session(s) in {len(self.catalog.get_projects())} project(s)"
        )

        if self._sessions:
            self._select(0)
        else:
            self._selected = None
            self._message_view.reset()
            self._message_view.add_system_message(
                f"No sessions found under {self.config.paths.projects_dir}"
            )
            self._annotation_panel.update_annotations([], None)

    def _select(self, index: int) -> None:
        if not 0 <= index < len(self._sessions):
            return
        session = self._sessions[index]
        if self._selected is not None and self._selected.session_id == session.session_id:
            return
        self._selected = session
        self._annotation_panel.update_annotations(
            self.store.get_tags(session.session_id),
            self.store.get_note(session.session_id),
        )
        self._message_view.reset()
        self._message_view.add_system_message("Loading messages...")
        self._load_messages(session)

    @work(thread=True, exclusive=True)
    def _load_messages(self, session: SessionRecord) -> None:
        """Read the session log off the UI thread."""
        try:
            messages = self.reader.get_session_messages(
                session.session_id, limit=self.config.display.show_messages
            )
        except (AgentManagerError, OSError) as e:
            self.call_from_thread(self._show_error, session, str(e))
            return
        self.call_from_thread(self._show_messages, session, messages)

    def _show_messages(self, session: SessionRecord, messages: list[Message]) -> None:
        # a newer selection may have landed while the worker ran
        if self._selected is None or self._selected.session_id != session.session_id:
            return
        self._message_view.show_messages(session, messages)

    def _show_error(self, session: SessionRecord, error: str) -> None:
        if self._selected is None or self._selected.session_id != session.session_id:
            return
        self._message_view.reset()
        self._message_view.add_system_message(f"Error reading messages: {error}")

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._select(event.cursor_row)

    def action_next_session(self) -> None:
        """Move the table cursor to the next session."""
        row = self._table.cursor_row
        if row < len(self._sessions) - 1:
            self._table.move_cursor(row=row + 1)
            self._select(row + 1)

    def action_prev_session(self) -> None:
        """Move the table cursor to the previous session."""
        row = self._table.cursor_row
        if row > 0:
            self._table.move_cursor(row=row - 1)
            self._select(row - 1)

    def action_reload(self) -> None:
        """Rescan projects and annotations."""
        self._selected = None
        self._populate()
        self.notify(f"Reloaded {len(self._sessions)} session(s)")


def run_browser(
    config_path: str | None = None,
    config: AgentManagerConfig | None = None,
) -> None:
    """Entry point for the interactive browser."""
    app = SessionBrowserApp(config=config, config_path=config_path)
    app.run()
