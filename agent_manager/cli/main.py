"""CLI: agent-manager status, list, show, resume, search, snapshot, tag, untag, tags, note, history, projects, browse, config validate."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ..config import load_config, validate_config
from ..core.history import get_debug_log_info, get_history
from ..core.log_parser import SessionLogReader
from ..core.overview import build_overview
from ..core.search import search_all_sessions
from ..core.sessions import SessionCatalog, filter_sessions, sort_sessions
from ..launcher import build_resume_command, launch_detached, resolve_workdir, resume_session
from ..storage.annotations import AnnotationStore
from ..storage.helpers import extract_excerpt
from ..types import AgentManagerConfig, AgentManagerError, SnapshotNotFoundError
from .format import print_header, render_table, short_date, short_id, time_ago, truncate

MESSAGE_PREVIEW_LINES = 6
SEARCH_PREVIEW_LINES = 3


def _get_context(args) -> tuple[AgentManagerConfig, SessionCatalog, AnnotationStore]:
    config = load_config(args.config)
    return config, SessionCatalog(config), AnnotationStore(config.paths.data_file)


def cmd_status(args):
    """Dashboard overview."""
    config, catalog, store = _get_context(args)
    overview = build_overview(catalog, store)
    sessions = overview.sessions

    print_header("Agent Manager Dashboard")
    project_names = ", ".join(p.project_path for p in overview.projects)
    print(f"Projects:   {len(overview.projects)}" + (f" ({project_names})" if project_names else ""))
    print(
        f"Sessions:   {len(sessions)} total | {overview.today_count} today | "
        f"{overview.week_count} this week"
    )
    print(f"Snapshots:  {len(overview.snapshots)} saved" if overview.snapshots else "Snapshots:  none")
    print(f"Tags:       {'  '.join('#' + t for t in overview.tags)}" if overview.tags else "Tags:       none")
    print(f"Branches:   {len(overview.branches)} active")

    recent_count = config.display.recent_sessions
    print()
    print("Recent Sessions:")
    for s in sessions[:recent_count]:
        print(
            f"  -> {short_id(s.session_id)}  {truncate(s.git_branch or '-', 22):<22}  "
            f"\"{truncate(s.title or '-', 35)}\"  {time_ago(s.last_activity)}"
        )
    if len(sessions) > recent_count:
        print(f"  ... and {len(sessions) - recent_count} more sessions")

    print()
    print("Active Branches:")
    for group in overview.branches[:6]:
        latest = time_ago(group.latest) if group.latest else "-"
        print(f"  {truncate(group.branch, 30):<30} | {len(group.sessions)} session(s) | {latest}")

    if overview.snapshots:
        print()
        print("Saved Snapshots:")
        for snap in overview.snapshots:
            print(f"  {snap.name} | {len(snap.sessions)} session(s) | {time_ago(snap.created)}")

    print()
    print("Quick actions:")
    print("  agent-manager list                  List all sessions")
    print("  agent-manager show <id>             Inspect a session")
    print("  agent-manager snapshot save <name>  Save current state")
    print("  agent-manager search \"query\"        Search conversations")


def cmd_list(args):
    """List sessions with filtering and sorting."""
    config, catalog, store = _get_context(args)
    sessions = catalog.get_sessions(args.project)

    tagged = set(store.get_sessions_by_tag(args.tag)) if args.tag else None
    sessions = filter_sessions(sessions, branch=args.branch, session_ids=tagged)
    sessions = sort_sessions(sessions, by=args.sort)

    if not args.all:
        limit = args.limit if args.limit is not None else config.display.list_limit
        sessions = sessions[:limit]

    if not sessions:
        print("No sessions found.")
        return

    data = store.load()
    print_header(f"Sessions ({len(sessions)})")
    headers = ["#", "ID", "Branch", "Summary", "Msgs", "Modified", "Tags"]
    widths = [3, 10, 24, 32, 5, 12, 16]
    rows = []
    for i, s in enumerate(sessions, 1):
        tags = data.tags.get(s.session_id, [])
        rows.append([
            str(i),
            short_id(s.session_id),
            s.git_branch or "-",
            s.title or "-",
            str(s.message_count or 0),
            time_ago(s.last_activity),
            ", ".join(tags) if tags else "-",
        ])
    for line in render_table(headers, rows, widths):
        print(line)
    print()
    print("Use `agent-manager show <id>` to inspect a session.")


def cmd_show(args):
    """Show detailed information about a session."""
    config, catalog, store = _get_context(args)
    session = catalog.find_session(args.session_id)
    limit = args.messages if args.messages is not None else config.display.show_messages

    tags = store.get_tags(session.session_id)
    note = store.get_note(session.session_id)
    debug_info = get_debug_log_info(config, session.session_id)

    print_header("Session Details")
    print(f"Session ID:    {session.session_id}")
    print(f"Project:       {session.project_path or '-'}")
    print(f"Branch:        {session.git_branch or '-'}")
    print(f"Summary:       {session.summary or '-'}")
    print(f"Messages:      {session.message_count or 0}")
    print(f"Created:       {short_date(session.created)} ({time_ago(session.created)})")
    print(f"Modified:      {short_date(session.modified)} ({time_ago(session.modified)})")
    print(f"First Prompt:  {truncate(session.first_prompt or '-', 70)}")
    if tags:
        print(f"Tags:          {'  '.join('#' + t for t in tags)}")
    if note:
        print(f"Note:          {note}")
    if debug_info.exists:
        print(f"Debug Log:     {debug_info.size / 1024:.1f}KB - {debug_info.path}")

    print()
    print("-" * 60)
    print(f"Last {limit} Messages:")
    print()

    reader = SessionLogReader(config)
    try:
        messages = reader.get_session_messages(session.session_id, limit=limit)
    except (AgentManagerError, OSError) as e:
        print(f"  Error reading messages: {e}")
        messages = None

    if messages is not None:
        if not messages:
            print("  No messages found.")
        for msg in messages:
            label = "YOU" if msg.role == "user" else msg.role.upper() or "?"
            print(f"  {label} {short_date(msg.timestamp) if msg.timestamp else ''}".rstrip())
            lines = msg.text.split("\n")
            for line in lines[:MESSAGE_PREVIEW_LINES]:
                print(f"  | {truncate(line, 80)}")
            if len(lines) > MESSAGE_PREVIEW_LINES:
                print("  | ... (truncated)")
            if msg.tool_use_count:
                print(f"  | [{msg.tool_use_count} tool call(s)]")
            print()

    sid = short_id(session.session_id)
    print("-" * 60)
    print("Quick actions:")
    print(f"  Resume:  agent-manager resume {sid}")
    print(f"  Tag:     agent-manager tag {sid} <tag>")
    print(f"  Note:    agent-manager note {sid} \"your note\"")
    print(f"  Agent:   {' '.join(build_resume_command(session.session_id, config=config.launcher))}")


def cmd_resume(args):
    """Resume a session in the external agent."""
    config, catalog, store = _get_context(args)
    session = catalog.find_session(args.session_id)

    cmd = build_resume_command(session.session_id, args.message, config.launcher)
    cwd = resolve_workdir(session.project_path)

    print_header("Resuming Session")
    print(f"Session:  {short_id(session.session_id)}")
    print(f"Branch:   {session.git_branch or '-'}")
    print(f"Summary:  {session.summary or '-'}")
    print(f"Project:  {session.project_path or '-'}")
    print()
    print(f"$ {' '.join(cmd)}")
    print(f"cwd: {cwd}")
    print()
    sys.stdout.flush()

    code = resume_session(session, args.message, config.launcher)
    if code != 0:
        print(f"Warning: {config.launcher.executable} exited with code {code}", file=sys.stderr)


def cmd_search(args):
    """Search across all session conversations."""
    config, catalog, store = _get_context(args)
    query = " ".join(args.query).strip()
    if not query:
        print("Please provide a search query.", file=sys.stderr)
        sys.exit(1)

    limit = args.limit if args.limit is not None else config.display.search_limit
    reader = SessionLogReader(config)
    hits = search_all_sessions(catalog, reader, query, max_results=limit, workers=config.search.workers)

    print_header(f'Searching: "{query}"')
    if not hits:
        print("No matches found.")
        return

    print(f"Found {len(hits)} match(es):")
    print()
    query_lower = query.lower()
    for hit in hits:
        label = "YOU" if hit.role == "user" else hit.role.upper() or "?"
        print(f"{short_id(hit.session_id)} | {hit.git_branch or '-'} | {label} | {time_ago(hit.timestamp)}")
        shown = 0
        for line in hit.text.split("\n"):
            if query_lower not in line.lower():
                continue
            if shown >= SEARCH_PREVIEW_LINES:
                print("     ... (more matches in this message)")
                break
            print(f"     {extract_excerpt(line, query, context_chars=35)}")
            shown += 1
        print()
    print("Use `agent-manager show <id>` to see full session details.")


def cmd_snapshot(args):
    """Save, list, restore, or delete snapshots."""
    action = args.snapshot_action
    config, catalog, store = _get_context(args)

    if action == "save":
        if args.sessions:
            session_ids = [s.strip() for s in args.sessions.split(",") if s.strip()]
        else:
            session_ids = [s.session_id for s in catalog.get_sessions()]
        snapshot = store.save_snapshot(args.name, session_ids, args.description or "")
        print(f'Snapshot "{snapshot.name}" saved with {len(snapshot.sessions)} session(s).')
        if snapshot.description:
            print(f"Description: {snapshot.description}")

    elif action == "list":
        snapshots = store.list_snapshots()
        if not snapshots:
            print("No snapshots saved yet.")
            print("Create one with: agent-manager snapshot save <name>")
            return
        print_header("Snapshots")
        rows = [
            [snap.name, str(len(snap.sessions)), short_date(snap.created), snap.description or "-"]
            for snap in snapshots
        ]
        for line in render_table(["Name", "Sessions", "Created", "Description"], rows, [20, 10, 18, 40]):
            print(line)

    elif action == "restore":
        snapshot = store.get_snapshot(args.name)
        if snapshot is None:
            raise SnapshotNotFoundError(args.name)

        print_header(f'Restoring Snapshot: "{snapshot.name}"')
        print(f"Created:   {short_date(snapshot.created)}")
        print(f"Sessions:  {len(snapshot.sessions)}")
        if snapshot.description:
            print(f"Description: {snapshot.description}")
        print()

        known = catalog.session_map()
        if args.exec:
            print(f"Launching {len(snapshot.sessions)} session(s)...")
        else:
            print("Resume commands:")
        print()
        for sid in snapshot.sessions:
            session = known.get(sid)
            project_path = session.project_path if session else None
            branch = (session.git_branch if session else None) or "-"
            summary = (session.summary if session else None) or "-"
            print(f"{short_id(sid)} | {branch} | {truncate(summary, 40)}")
            if args.exec:
                launch_detached(sid, project_path, config.launcher)
                print("    launched")
            else:
                print(f"    $ {' '.join(build_resume_command(sid, config=config.launcher))}")
                print(f"    cwd: {project_path or Path.cwd()}")
        if not args.exec:
            print()
            print("Tip: add --exec to launch all sessions automatically.")

    elif action == "delete":
        if not store.delete_snapshot(args.name):
            raise SnapshotNotFoundError(args.name)
        print(f'Snapshot "{args.name}" deleted.')


def cmd_tag(args):
    """Add a tag to a session."""
    config, catalog, store = _get_context(args)
    session = catalog.find_session(args.session_id)
    store.add_tag(session.session_id, args.tag)
    print(f"Tagged {short_id(session.session_id)} with #{args.tag}")


def cmd_untag(args):
    """Remove a tag from a session."""
    config, catalog, store = _get_context(args)
    session = catalog.find_session(args.session_id)
    store.remove_tag(session.session_id, args.tag)
    print(f"Removed tag #{args.tag} from {short_id(session.session_id)}")


def cmd_tags(args):
    """List all tags with session counts."""
    config, catalog, store = _get_context(args)
    counts = store.get_tag_counts()
    if not counts:
        print("No tags yet. Add one with: agent-manager tag <id> <tag>")
        return
    print(f"{'Tag':<30} {'Sessions':>8}")
    print("-" * 39)
    for tag, count in counts.items():
        print(f"{tag:<30} {count:>8}")


def cmd_note(args):
    """Set or clear a session note."""
    config, catalog, store = _get_context(args)
    session = catalog.find_session(args.session_id)
    text = " ".join(args.text).strip()
    if not text:
        store.remove_note(session.session_id)
        print(f"Note cleared from {short_id(session.session_id)}")
    else:
        store.set_note(session.session_id, text)
        print(f"Note set on {short_id(session.session_id)}")


def cmd_history(args):
    """Show recent prompts from the global history file."""
    config = load_config(args.config)
    limit = args.limit if args.limit is not None else config.display.history_limit
    entries = get_history(config, limit=limit)
    if not entries:
        print("No history entries found.")
        return
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        display = str(entry.get("display", "")).replace("\n", " ")
        project = entry.get("project") or "-"
        print(f"{time_ago(entry.get('timestamp')):>10}  {truncate(project, 30):<30}  {truncate(display, 60)}")


def cmd_projects(args):
    """List discovered project directories."""
    config, catalog, store = _get_context(args)
    projects = catalog.get_projects()
    if not projects:
        print(f"No projects found under {config.paths.projects_dir}")
        return
    sessions = catalog.get_sessions()
    counts: dict[str, int] = {}
    for s in sessions:
        counts[s.project_path] = counts.get(s.project_path, 0) + 1
    print(f"{'Project':<50} {'Sessions':>8}")
    print("-" * 59)
    for p in projects:
        print(f"{truncate(p.project_path, 50):<50} {counts.get(p.project_path, 0):>8}")


def cmd_browse(args):
    """Launch the interactive session browser."""
    try:
        from ..tui.app import run_browser
    except ImportError:
        print(
            "TUI dependencies not installed. Run: pip install textual",
            file=sys.stderr,
        )
        sys.exit(1)

    run_browser(config_path=args.config)


def cmd_config_validate(args):
    """Validate config file."""
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        print("Config validation errors:")
        for err in errors:
            print(f"  - {err}")
        sys.exit(1)
    else:
        print("Config is valid.")
        print(f"  Source:       {config.source or '(defaults)'}")
        print(f"  Claude dir:   {config.paths.claude_dir}")
        print(f"  Data file:    {config.paths.data_file}")
        print(f"  Executable:   {config.launcher.executable}")
        print(f"  Search pool:  {config.search.workers} worker(s)")


COMMANDS = {
    "status": cmd_status,
    "list": cmd_list,
    "ls": cmd_list,
    "show": cmd_show,
    "inspect": cmd_show,
    "resume": cmd_resume,
    "search": cmd_search,
    "find": cmd_search,
    "snapshot": cmd_snapshot,
    "snap": cmd_snapshot,
    "tag": cmd_tag,
    "untag": cmd_untag,
    "tags": cmd_tags,
    "note": cmd_note,
    "history": cmd_history,
    "projects": cmd_projects,
    "browse": cmd_browse,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-manager",
        description="Inspect, tag, and resume local agent sessions",
    )
    parser.add_argument("--config", "-c", help="Path to config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # status
    subparsers.add_parser("status", help="Dashboard overview")

    # list
    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List sessions")
    list_parser.add_argument("--project", help="Filter by project path")
    list_parser.add_argument("--branch", help="Filter by git branch (substring)")
    list_parser.add_argument("--tag", help="Filter by tag")
    list_parser.add_argument("--sort", choices=["date", "messages"], default="date", help="Sort order")
    list_parser.add_argument("--limit", "-n", type=int, help="Max sessions to show")
    list_parser.add_argument("--all", action="store_true", help="Show all sessions")

    # show
    show_parser = subparsers.add_parser("show", aliases=["inspect"], help="Show session details")
    show_parser.add_argument("session_id", help="Session ID or unique prefix")
    show_parser.add_argument("--messages", "-m", type=int, help="Number of recent messages")

    # resume
    resume_parser = subparsers.add_parser("resume", help="Resume a session in the agent")
    resume_parser.add_argument("session_id", help="Session ID or unique prefix")
    resume_parser.add_argument("--message", "-m", help="Initial message to send")

    # search
    search_parser = subparsers.add_parser("search", aliases=["find"], help="Search across conversations")
    search_parser.add_argument("query", nargs="+", help="Text to search for")
    search_parser.add_argument("--limit", "-n", type=int, help="Max results")

    # snapshot
    snapshot_parser = subparsers.add_parser("snapshot", aliases=["snap"], help="Manage session snapshots")
    snapshot_sub = snapshot_parser.add_subparsers(dest="snapshot_action", required=True)

    snap_save = snapshot_sub.add_parser("save", help="Save sessions under a name")
    snap_save.add_argument("name", help="Snapshot name")
    snap_save.add_argument("--sessions", help="Comma-separated session IDs (default: all)")
    snap_save.add_argument("--description", "-d", help="Snapshot description")

    snapshot_sub.add_parser("list", help="List saved snapshots")

    snap_restore = snapshot_sub.add_parser("restore", help="Show or run resume commands")
    snap_restore.add_argument("name", help="Snapshot name")
    snap_restore.add_argument("--exec", action="store_true", help="Launch every session")

    snap_delete = snapshot_sub.add_parser("delete", help="Delete a snapshot")
    snap_delete.add_argument("name", help="Snapshot name")

    # tag / untag / tags
    tag_parser = subparsers.add_parser("tag", help="Add a tag to a session")
    tag_parser.add_argument("session_id", help="Session ID or unique prefix")
    tag_parser.add_argument("tag", help="Tag to add")

    untag_parser = subparsers.add_parser("untag", help="Remove a tag from a session")
    untag_parser.add_argument("session_id", help="Session ID or unique prefix")
    untag_parser.add_argument("tag", help="Tag to remove")

    subparsers.add_parser("tags", help="List all tags")

    # note
    note_parser = subparsers.add_parser("note", help="Set a note on a session (empty clears it)")
    note_parser.add_argument("session_id", help="Session ID or unique prefix")
    note_parser.add_argument("text", nargs="*", help="Note text")

    # history
    history_parser = subparsers.add_parser("history", help="Show recent prompt history")
    history_parser.add_argument("--limit", "-n", type=int, help="Number of entries")

    # projects
    subparsers.add_parser("projects", help="List discovered projects")

    # browse
    subparsers.add_parser("browse", help="Interactive session browser (TUI)")

    # config validate
    config_parser = subparsers.add_parser("config", help="Config operations")
    config_sub = config_parser.add_subparsers(dest="config_command")
    config_sub.add_parser("validate", help="Validate config file")

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "config":
        if args.config_command == "validate":
            cmd_config_validate(args)
        else:
            print("Usage: agent-manager config validate")
            sys.exit(1)
        return

    handler = COMMANDS[args.command]
    try:
        handler(args)
    except AgentManagerError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    except FileNotFoundError as e:
        # explicit --config path that does not exist
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
