"""Directory (LDAP) access: connection, search and the handler façade."""

from .models import DirectoryConfig, DirectoryEntry, SearchConfig, SearchResult, SubtreeIdentity
from .connection import DirectoryConnection
from .search import DirectorySearch
from .handler import DirectoryHandler, handler_from_settings
from .password import check_ssha, ssha

__all__ = [
    "DirectoryConfig",
    "DirectoryEntry",
    "SearchConfig",
    "SearchResult",
    "SubtreeIdentity",
    "DirectoryConnection",
    "DirectorySearch",
    "DirectoryHandler",
    "handler_from_settings",
    "check_ssha",
    "ssha",
]
