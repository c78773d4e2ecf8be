from .log_parser import SessionLogReader
from .search import search_all_sessions
from .sessions import SessionCatalog, filter_sessions, sort_sessions

__all__ = [
    "SessionCatalog",
    "SessionLogReader",
    "filter_sessions",
    "search_all_sessions",
    "sort_sessions",
]
