"""Push unsynced posts to a cloud provider and record the outcome."""

import logging
from enum import Enum

from pydantic import BaseModel, Field

from ..store import PostStore
from .providers import SyncProvider

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    """Sync outcome shown to the user."""
    SYNCED = "synced"
    SYNCING = "syncing"
    ERROR = "error"
    OFFLINE = "offline"


class SyncResult(BaseModel):
    """Result of one sync run."""

    status: SyncStatus
    message: str | None = None
    synced_ids: list[str] = Field(default_factory=list)


def sync_posts(store: PostStore, provider: SyncProvider) -> SyncResult:
    """Push every unsynced post, then mark exactly those posts synced.

    A provider failure leaves all sync flags untouched. Store failures
    propagate as StoreError.
    """
    if provider.local_only:
        return SyncResult(status=SyncStatus.SYNCED)

    if not provider.is_available():
        return SyncResult(
            status=SyncStatus.OFFLINE,
            message=f"Sync target not reachable: {provider.describe()}",
        )

    pending = [post for post in store.list_posts() if not post.is_synced]
    if not pending:
        return SyncResult(status=SyncStatus.SYNCED, message="Nothing to sync")

    logger.info(f"Syncing {len(pending)} post(s) to {provider.describe()}")
    try:
        provider.push(pending)
    except OSError as e:
        logger.error(f"Sync to {provider.name} failed: {e}")
        return SyncResult(status=SyncStatus.ERROR, message=str(e))

    ids = [post.id for post in pending]
    store.update_sync_status(ids, True)
    return SyncResult(status=SyncStatus.SYNCED, synced_ids=ids)
