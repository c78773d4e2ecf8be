"""Project directory discovery under the agent runtime's projects root."""

from __future__ import annotations

import logging
import os

from ..types import AgentManagerConfig, Project

logger = logging.getLogger(__name__)

ENCODED_SEPARATOR = "-"


def decode_project_dir(dir_name: str) -> str:
    """Turn an encoded directory name back into a path.

    "-Users-me-work-app" -> "/Users/me/work/app". Lossy: a hyphen that was
    part of the original path comes back as a separator.
    """
    return dir_name.replace(ENCODED_SEPARATOR, os.sep)


def get_all_projects(config: AgentManagerConfig) -> list[Project]:
    """List project directories, sorted by name. Empty if the root is unreadable."""
    root = config.paths.projects_dir
    try:
        children = sorted(
            (p for p in root.iterdir() if p.is_dir()),
            key=lambda p: p.name,
        )
    except OSError as e:
        logger.debug("Projects root %s not readable: %s", root, e)
        return []

    return [
        Project(
            dir_name=child.name,
            project_path=decode_project_dir(child.name),
            full_path=child,
        )
        for child in children
    ]
