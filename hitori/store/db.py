"""SQLite storage for posts."""

import contextlib
import logging
import sqlite3
from pathlib import Path
from typing import Iterator, Sequence

from .errors import ErrorKind, StoreError, translate_errors
from .models import Post

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS posts (
        id TEXT PRIMARY KEY,
        content TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        is_synced INTEGER NOT NULL
    )
"""

SAVEPOINT = "hitori_batch"


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the posts table if it is missing. Safe to call repeatedly."""
    conn.execute(SCHEMA)


class PostStore:
    """Post storage over a single SQLite file.

    Without an open handle every operation opens its own connection,
    bootstraps the schema and closes again. After ``open()`` (or inside a
    ``with`` block) one connection is reused until ``close()``.

    A store built with ``from_connection`` has no file of its own; once
    closed, every operation fails.
    """

    def __init__(self, db_path: Path | str):
        self.db_path: Path | None = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._owns_conn = False

    @classmethod
    def from_connection(cls, conn: sqlite3.Connection) -> "PostStore":
        """Wrap an already open connection. The caller keeps ownership of it."""
        with translate_errors("Schema bootstrap"):
            init_schema(conn)
        store = cls(":memory:")
        store.db_path = None
        store._conn = conn
        return store

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        target = str(self.db_path) if self.db_path is not None else "<connection>"
        return f"PostStore({target!r}, {state})"

    def __enter__(self) -> "PostStore":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> "PostStore":
        """Open a connection held for the lifetime of this store."""
        if self._conn is None:
            with translate_errors("Opening database"):
                self._conn = self._connect()
            self._owns_conn = True
        return self

    def close(self) -> None:
        """Close the held connection, if this store opened it."""
        if self._conn is not None and self._owns_conn:
            self._conn.close()
        self._conn = None
        self._owns_conn = False

    def _connect(self) -> sqlite3.Connection:
        if self.db_path is None:
            raise StoreError(
                "Store is closed: its wrapped connection was released",
                ErrorKind.IO_FAILURE,
            )
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        try:
            init_schema(conn)
        except sqlite3.Error:
            conn.close()
            raise
        logger.debug(f"Opened database {self.db_path}")
        return conn

    @contextlib.contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        if self._conn is not None:
            yield self._conn
            return
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextlib.contextmanager
    def _transaction(self, conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
        """Run a unit of work that is committed whole or rolled back whole.

        Inside a transaction the caller already has open, the unit runs in a
        savepoint so a failure undoes only this unit and leaves the caller's
        transaction open.
        """
        if not conn.in_transaction:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except Exception:
                conn.rollback()
                raise
            conn.commit()
            return

        conn.execute(f"SAVEPOINT {SAVEPOINT}")
        try:
            yield conn
        except Exception:
            conn.execute(f"ROLLBACK TO {SAVEPOINT}")
            conn.execute(f"RELEASE {SAVEPOINT}")
            raise
        conn.execute(f"RELEASE {SAVEPOINT}")

    def list_posts(self) -> list[Post]:
        """All posts, newest first."""
        with translate_errors("Listing posts"), self._connection() as conn:
            cursor = conn.execute(
                """
                SELECT id, content, created_at, updated_at, is_synced
                FROM posts
                ORDER BY created_at DESC, rowid DESC
                """
            )
            posts = [Post.from_row(row) for row in cursor.fetchall()]
        logger.debug(f"Listed {len(posts)} post(s)")
        return posts

    def add_post(self, content: str) -> Post:
        """Create and persist a new post. Returns the post as written."""
        post = Post.new(content)
        with translate_errors("Adding post"), self._connection() as conn:
            with self._transaction(conn):
                conn.execute(
                    """
                    INSERT INTO posts (id, content, created_at, updated_at, is_synced)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    post.to_row(),
                )
        logger.info(f"Added post {post.id}")
        return post

    def delete_post(self, post_id: str) -> None:
        """Delete a post. Unknown ids are ignored."""
        with translate_errors("Deleting post"), self._connection() as conn:
            with self._transaction(conn):
                cursor = conn.execute("DELETE FROM posts WHERE id = ?", (post_id,))
        if cursor.rowcount:
            logger.info(f"Deleted post {post_id}")
        else:
            logger.debug(f"Delete skipped, no post {post_id}")

    def update_sync_status(self, ids: Sequence[str], is_synced: bool) -> None:
        """Set the sync flag on every listed post in one transaction.

        Unknown ids are skipped. If any update fails nothing is changed.
        ``updated_at`` is left as is.
        """
        if isinstance(ids, str):
            raise TypeError("ids must be a sequence of post ids, not a single string")
        ids = list(ids)
        flag = 1 if is_synced else 0

        with translate_errors("Updating sync status"), self._connection() as conn:
            try:
                with self._transaction(conn):
                    conn.executemany(
                        "UPDATE posts SET is_synced = ? WHERE id = ?",
                        [(flag, post_id) for post_id in ids],
                    )
            except sqlite3.Error as e:
                logger.error(f"Sync status batch of {len(ids)} rolled back: {e}")
                raise
        logger.info(f"Marked {len(ids)} post(s) is_synced={bool(is_synced)}")
