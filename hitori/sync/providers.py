"""Cloud sync providers.

Google Drive and iCloud Drive both keep a locally synced folder on disk;
pushing a post means writing it there as JSON and letting the desktop
client upload it.
"""

import logging
from pathlib import Path
from typing import Any, Sequence

from ..common.config import PROVIDERS, save_json
from ..store import Post

logger = logging.getLogger(__name__)


class SyncProvider:
    """Base provider. Subclasses implement ``push``."""

    name = "base"
    local_only = False

    def is_available(self) -> bool:
        return True

    def describe(self) -> str:
        return self.name

    def push(self, posts: Sequence[Post]) -> None:
        raise NotImplementedError


class LocalOnlyProvider(SyncProvider):
    """No cloud provider: posts stay on this machine."""

    name = "none"
    local_only = True

    def describe(self) -> str:
        return "local only"

    def push(self, posts: Sequence[Post]) -> None:
        return None


class FolderProvider(SyncProvider):
    """Mirrors posts into a cloud drive's local folder, one JSON file per post."""

    def __init__(self, name: str, folder: Path | str):
        self.name = name
        self.folder = Path(folder).expanduser()

    def is_available(self) -> bool:
        """The drive root (the folder's parent) must be mounted."""
        return self.folder.parent.is_dir()

    def describe(self) -> str:
        return f"{self.name} ({self.folder})"

    def path_for(self, post: Post) -> Path:
        return self.folder / f"{post.id}.json"

    def push(self, posts: Sequence[Post]) -> None:
        for post in posts:
            save_json(self.path_for(post), post.to_wire())
        logger.info(f"Pushed {len(posts)} post(s) to {self.folder}")


def get_provider(name: str, config: dict[str, Any]) -> SyncProvider:
    """Build the provider called ``name`` from configuration."""
    if name not in PROVIDERS:
        raise ValueError(f"Unknown cloud provider: {name}. Choose from: {', '.join(PROVIDERS)}")
    if name == "none":
        return LocalOnlyProvider()

    folder = config.get("sync_folders", {}).get(name)
    if not folder:
        raise ValueError(f"No sync folder configured for {name}")
    return FolderProvider(name, folder)
