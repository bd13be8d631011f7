"""Cloud sync for posts."""

from .engine import SyncResult, SyncStatus, sync_posts
from .providers import FolderProvider, LocalOnlyProvider, SyncProvider, get_provider

__all__ = [
    "SyncResult",
    "SyncStatus",
    "sync_posts",
    "SyncProvider",
    "LocalOnlyProvider",
    "FolderProvider",
    "get_provider",
]
