"""Tests for the SQLite post store."""

import sqlite3
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from hitori.store import ErrorKind, PostStore, StoreError


T0 = datetime(2026, 10, 19, 8, 0, 0, tzinfo=timezone.utc)


def add_at(store, contents, times):
    """Add posts with controlled creation times."""
    with patch("hitori.store.models.utc_now", side_effect=list(times)):
        return [store.add_post(content) for content in contents]


class TestSchema:
    """Tests for schema bootstrap and file handling."""

    def test_creates_directory_and_file(self, tmp_path):
        """Missing parent directories are created on first use."""
        db_path = tmp_path / "a" / "b" / "hitori.db"
        PostStore(db_path).list_posts()
        assert db_path.exists()

    def test_bootstrap_is_idempotent(self, store):
        """Opening the same file repeatedly keeps existing rows."""
        post = store.add_post("keep me")
        for _ in range(3):
            assert [p.id for p in PostStore(store.db_path).list_posts()] == [post.id]

    def test_table_columns(self, store, db_path):
        """Schema matches the persisted layout."""
        store.list_posts()
        conn = sqlite3.connect(db_path)
        try:
            columns = [row[1] for row in conn.execute("PRAGMA table_info(posts)")]
        finally:
            conn.close()
        assert columns == ["id", "content", "created_at", "updated_at", "is_synced"]

    def test_unopenable_location_is_io_failure(self, tmp_path):
        """A data dir that cannot be created fails with io_failure."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = PostStore(blocker / "sub" / "hitori.db")

        with pytest.raises(StoreError) as exc_info:
            store.list_posts()
        assert exc_info.value.kind is ErrorKind.IO_FAILURE


class TestAddAndList:
    """Tests for add_post and list_posts."""

    def test_add_returns_new_post(self, store):
        """New posts echo content, start unsynced, share both timestamps."""
        post = store.add_post("テスト投稿です")
        assert post.content == "テスト投稿です"
        assert post.is_synced is False
        assert post.created_at == post.updated_at
        assert uuid.UUID(post.id)

    @pytest.mark.parametrize("content", ["", " ", "line one\nline two", "x" * 100_000, "emoji 🎉"])
    def test_add_then_list_round_trip(self, store, content):
        """Listing returns exactly the record that add returned."""
        post = store.add_post(content)
        assert store.list_posts() == [post]

    def test_list_empty(self, store):
        assert store.list_posts() == []

    def test_newest_first(self, store):
        """Posts added A, B, C list as C, B, A."""
        a, b, c = add_at(store, ["A", "B", "C"], [T0, T0 + timedelta(seconds=1), T0 + timedelta(seconds=2)])
        assert [p.id for p in store.list_posts()] == [c.id, b.id, a.id]

    def test_order_uses_time_not_insertion(self, store):
        """A post created later is listed first even if inserted earlier."""
        late, early = add_at(store, ["late", "early"], [T0 + timedelta(hours=1), T0])
        assert [p.content for p in store.list_posts()] == ["late", "early"]

    def test_ties_list_latest_insert_first(self, store):
        """Equal timestamps fall back to insertion order, newest first."""
        posts = add_at(store, ["1", "2", "3"], [T0, T0, T0])
        assert [p.id for p in store.list_posts()] == [p.id for p in reversed(posts)]

    def test_microsecond_order(self, store):
        """Whole-second and fractional timestamps still sort correctly."""
        add_at(store, ["whole", "fraction"], [T0, T0 + timedelta(microseconds=5)])
        assert [p.content for p in store.list_posts()] == ["fraction", "whole"]

    def test_duplicate_id_is_constraint_violation(self, store):
        """Reusing an id fails and leaves the first row alone."""
        fixed = uuid.UUID("12345678-1234-5678-1234-567812345678")
        with patch("hitori.store.models.uuid.uuid4", return_value=fixed):
            first = store.add_post("first")
            with pytest.raises(StoreError) as exc_info:
                store.add_post("second")

        assert exc_info.value.kind is ErrorKind.CONSTRAINT_VIOLATION
        assert store.list_posts() == [first]

    def test_bad_timestamp_aborts_read(self, store, db_path):
        """An unparseable stored timestamp fails the whole list."""
        store.add_post("good")
        conn = sqlite3.connect(db_path)
        with conn:
            conn.execute(
                "INSERT INTO posts VALUES (?, ?, ?, ?, ?)",
                ("bad", "broken row", "yesterday", "yesterday", 0),
            )
        conn.close()

        with pytest.raises(StoreError) as exc_info:
            store.list_posts()
        assert exc_info.value.kind is ErrorKind.DECODE_FAILURE

    def test_invalid_utf8_content_is_decode_failure(self, store, db_path):
        """Text that is not valid UTF-8 fails the read as a decode failure."""
        store.add_post("fine")
        conn = sqlite3.connect(db_path)
        with conn:
            conn.execute("UPDATE posts SET content = CAST(X'FFFE' AS TEXT)")
        conn.close()

        with pytest.raises(StoreError) as exc_info:
            store.list_posts()
        assert exc_info.value.kind is ErrorKind.DECODE_FAILURE

    def test_timestamps_stored_as_fixed_text(self, store, db_path):
        """Timestamps are UTC ISO-8601 text with microseconds."""
        add_at(store, ["x"], [T0])
        conn = sqlite3.connect(db_path)
        try:
            row = conn.execute("SELECT created_at, updated_at, is_synced FROM posts").fetchone()
        finally:
            conn.close()
        assert row == ("2026-10-19T08:00:00.000000+00:00", "2026-10-19T08:00:00.000000+00:00", 0)


class TestDelete:
    """Tests for delete_post."""

    def test_delete_existing(self, store):
        """Deleting removes exactly that post."""
        keep, gone = store.add_post("keep"), store.add_post("gone")
        store.delete_post(gone.id)

        posts = store.list_posts()
        assert len(posts) == 1
        assert posts[0].id == keep.id

    def test_delete_missing_is_noop(self, store):
        """Unknown ids are ignored without error."""
        post = store.add_post("still here")
        store.delete_post("no-such-id")
        assert store.list_posts() == [post]

    def test_delete_on_empty_store(self, store):
        store.delete_post("anything")
        assert store.list_posts() == []


class TestUpdateSyncStatus:
    """Tests for update_sync_status."""

    def test_updates_only_listed_ids(self, store):
        """Only the given ids change."""
        p1, p2, p3 = store.add_post("1"), store.add_post("2"), store.add_post("3")
        store.update_sync_status([p1.id, p3.id], True)

        synced = {p.id: p.is_synced for p in store.list_posts()}
        assert synced == {p1.id: True, p2.id: False, p3.id: True}

    def test_can_clear_flag(self, store):
        post = store.add_post("x")
        store.update_sync_status([post.id], True)
        store.update_sync_status([post.id], False)
        assert store.list_posts()[0].is_synced is False

    def test_unknown_ids_skipped(self, store):
        """Missing ids neither fail nor affect others."""
        post = store.add_post("x")
        store.update_sync_status(["missing", post.id, "also-missing"], True)
        assert store.list_posts()[0].is_synced is True

    def test_empty_batch_is_noop(self, store):
        post = store.add_post("x")
        store.update_sync_status([], True)
        assert store.list_posts() == [post]

    def test_updated_at_not_refreshed(self, store):
        """The sync flag is bookkeeping; updated_at keeps its creation value."""
        post = store.add_post("x")
        store.update_sync_status([post.id], True)
        stored = store.list_posts()[0]
        assert stored.updated_at == post.updated_at == post.created_at

    def test_failure_mid_batch_rolls_back(self, store, db_path):
        """If one update fails, no flag in the batch changes."""
        p1, p2, p3 = store.add_post("1"), store.add_post("2"), store.add_post("3")

        conn = sqlite3.connect(db_path)
        with conn:
            conn.execute(
                f"""
                CREATE TRIGGER fail_sync BEFORE UPDATE OF is_synced ON posts
                WHEN NEW.id = '{p3.id}'
                BEGIN SELECT RAISE(ABORT, 'simulated failure'); END
                """
            )
        conn.close()

        with pytest.raises(StoreError) as exc_info:
            store.update_sync_status([p1.id, p3.id], True)

        assert "simulated failure" in str(exc_info.value)
        assert all(not p.is_synced for p in store.list_posts())

    def test_rejects_single_string(self, store):
        """A bare string is not treated as a list of one-character ids."""
        with pytest.raises(TypeError):
            store.update_sync_status("abc", True)


class TestHandles:
    """Tests for per-call and held connection modes."""

    def test_context_manager_holds_connection(self, db_path):
        """A held handle reuses one connection and closes on exit."""
        with PostStore(db_path) as store:
            assert store.is_open
            post = store.add_post("held")
            assert store.list_posts() == [post]
        assert not store.is_open
        assert PostStore(db_path).list_posts() == [post]

    def test_open_is_reentrant(self, db_path):
        store = PostStore(db_path).open()
        conn = store._conn
        assert store.open()._conn is conn
        store.close()
        store.close()
        assert not store.is_open

    def test_from_connection_keeps_caller_ownership(self):
        """Closing a wrapping store leaves the caller's connection open."""
        conn = sqlite3.connect(":memory:")
        store = PostStore.from_connection(conn)
        post = store.add_post("in memory")
        store.close()

        assert conn.execute("SELECT id FROM posts").fetchone() == (post.id,)
        conn.close()

    def test_memory_store_full_cycle(self, memory_store):
        """Add, flag, delete on an in-memory database."""
        post = memory_store.add_post("Test post")
        assert len(memory_store.list_posts()) == 1

        memory_store.update_sync_status([post.id], True)
        assert memory_store.list_posts()[0].is_synced is True

        memory_store.delete_post(post.id)
        assert memory_store.list_posts() == []

    def test_memory_store_rollback(self):
        """Rollback works on a caller-owned connection too."""
        conn = sqlite3.connect(":memory:")
        store = PostStore.from_connection(conn)
        p1, p2 = store.add_post("1"), store.add_post("2")
        conn.execute(
            f"CREATE TRIGGER fail_sync BEFORE UPDATE ON posts WHEN NEW.id = '{p2.id}' "
            "BEGIN SELECT RAISE(ABORT, 'nope'); END"
        )

        with pytest.raises(StoreError):
            store.update_sync_status([p1.id, p2.id], True)
        assert not any(p.is_synced for p in store.list_posts())
        conn.close()

    def test_rollback_inside_caller_transaction(self):
        """A failed batch is undone even while the caller holds a transaction."""
        conn = sqlite3.connect(":memory:")
        conn.execute("CREATE TABLE other (x INTEGER)")
        store = PostStore.from_connection(conn)
        p1, p2 = store.add_post("1"), store.add_post("2")
        conn.execute(
            f"CREATE TRIGGER fail_sync BEFORE UPDATE ON posts WHEN NEW.id = '{p2.id}' "
            "BEGIN SELECT RAISE(ABORT, 'nope'); END"
        )
        conn.execute("INSERT INTO other VALUES (1)")
        assert conn.in_transaction

        with pytest.raises(StoreError):
            store.update_sync_status([p1.id, p2.id], True)

        assert {p.id: p.is_synced for p in store.list_posts()} == {p1.id: False, p2.id: False}
        assert conn.in_transaction
        assert conn.execute("SELECT x FROM other").fetchall() == [(1,)]
        conn.rollback()
        conn.close()

    def test_batch_inside_caller_transaction_stays_uncommitted(self):
        """A successful batch joins the caller's transaction rather than committing it."""
        conn = sqlite3.connect(":memory:")
        store = PostStore.from_connection(conn)
        post = store.add_post("x")
        conn.execute("UPDATE posts SET content = 'edited'")
        assert conn.in_transaction

        store.update_sync_status([post.id], True)
        assert conn.in_transaction

        conn.rollback()
        stored = store.list_posts()[0]
        assert (stored.content, stored.is_synced) == ("x", False)
        conn.close()

    def test_bootstrap_leaves_caller_transaction_open(self):
        """Wrapping a connection does not commit the caller's pending work."""
        conn = sqlite3.connect(":memory:")
        conn.execute("CREATE TABLE other (x INTEGER)")
        conn.execute("INSERT INTO other VALUES (1)")
        assert conn.in_transaction

        PostStore.from_connection(conn)
        assert conn.in_transaction

        conn.rollback()
        assert conn.execute("SELECT COUNT(*) FROM other").fetchone() == (0,)
        conn.close()

    def test_closed_wrapped_store_fails(self):
        """After close, a wrapped store refuses work instead of losing it."""
        conn = sqlite3.connect(":memory:")
        store = PostStore.from_connection(conn)
        store.close()

        with pytest.raises(StoreError) as exc_info:
            store.add_post("lost?")
        assert exc_info.value.kind is ErrorKind.IO_FAILURE
        with pytest.raises(StoreError):
            store.list_posts()
        with pytest.raises(StoreError):
            store.open()

        assert conn.execute("SELECT COUNT(*) FROM posts").fetchone() == (0,)
        conn.close()
