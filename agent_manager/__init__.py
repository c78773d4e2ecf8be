"""agent-manager: browse, search, tag, and resume local agent sessions."""

from .config import load_config
from .core.log_parser import SessionLogReader
from .core.search import search_all_sessions
from .core.sessions import SessionCatalog
from .storage.annotations import AnnotationStore
from .types import (
    AgentManagerConfig,
    AgentManagerError,
    Message,
    Project,
    SearchHit,
    SessionRecord,
    Snapshot,
)

__version__ = "0.1.0"

__all__ = [
    "AnnotationStore",
    "SessionCatalog",
    "SessionLogReader",
    "load_config",
    "search_all_sessions",
    "AgentManagerConfig",
    "AgentManagerError",
    "Message",
    "Project",
    "SearchHit",
    "SessionRecord",
    "Snapshot",
]
