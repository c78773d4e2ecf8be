"""Hand-off to the external agent executable to resume sessions."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from .types import LauncherConfig, LauncherError, SessionRecord

logger = logging.getLogger(__name__)


def build_resume_command(
    session_id: str,
    message: str | None = None,
    config: LauncherConfig | None = None,
) -> list[str]:
    config = config or LauncherConfig()
    cmd = [config.executable, config.resume_flag, session_id]
    if message:
        cmd.append(message)
    return cmd


def resolve_workdir(project_path: str | None) -> Path:
    """The session's project directory if it still exists, else the CWD."""
    if project_path:
        path = Path(project_path)
        if path.is_dir():
            return path
        logger.warning("Project path %s does not exist; using current directory", project_path)
    return Path.cwd()


def resume_session(
    session: SessionRecord,
    message: str | None = None,
    config: LauncherConfig | None = None,
) -> int:
    """Run the agent in the foreground with inherited stdio. Returns its exit code."""
    config = config or LauncherConfig()
    cmd = build_resume_command(session.session_id, message, config)
    cwd = resolve_workdir(session.project_path)
    logger.debug("Running %s in %s", cmd, cwd)
    try:
        completed = subprocess.run(cmd, cwd=cwd, check=False)
    except FileNotFoundError as e:
        raise LauncherError(
            f"Failed to start '{config.executable}': {e}. Make sure it is on your PATH.",
            executable=config.executable,
        ) from e
    return completed.returncode


def launch_detached(
    session_id: str,
    project_path: str | None,
    config: LauncherConfig | None = None,
) -> int:
    """Start a resumed session in the background, output discarded. Returns its pid."""
    config = config or LauncherConfig()
    cmd = build_resume_command(session_id, None, config)
    cwd = resolve_workdir(project_path)
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=(os.name == "posix"),
        )
    except FileNotFoundError as e:
        raise LauncherError(
            f"Failed to start '{config.executable}': {e}. Make sure it is on your PATH.",
            executable=config.executable,
        ) from e
    return proc.pid
