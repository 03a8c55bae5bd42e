"""Tests for the SQLite-backed submission store."""

import pytest
from sqlalchemy import text

from core.errors import PersistenceError
from utils.store import SubmissionStore, dump_list, load_list


class TestListSerialization:
    def test_load_list_malformed(self):
        assert load_list(None) == []
        assert load_list("") == []
        assert load_list("not json") == []
        assert load_list('{"a": 1}') == []
        assert load_list("[1, 2]") == []

    def test_dump_keeps_unicode(self):
        assert dump_list(["https://例え.jp/सूट"]) == '["https://例え.jp/सूट"]'


class TestSubmissionStore:
    def test_initialize_is_idempotent(self, store):
        store.initialize()
        store.initialize()
        assert store.list_all() == []

    def test_insert_returns_increasing_ids(self, store):
        first = store.insert("A", "1", "", [], [])
        second = store.insert("B", "2", "", [], [])
        assert second > first

    def test_defaults(self, store):
        store.insert("Asha", "98765", "", [], [])
        [row] = store.list_all()
        assert row["status"] == "pending"
        assert row["email"] == ""
        assert row["product_links"] == []
        assert row["image_urls"] == []
        assert row["created_at"]

    def test_newest_first(self, store):
        store.insert("A", "1", "", [], [])
        store.insert("B", "2", "", [], [])
        assert [r["name"] for r in store.list_all()] == ["B", "A"]

    def test_round_trip_preserves_order_and_values(self, store):
        links = ["http://z.com/2", "http://a.com/1", "http://a.com/1", "ftp://odd,value", 'quote"s']
        urls = ["https://res.cloudinary.com/x/3.jpg", "https://res.cloudinary.com/x/1.jpg"]
        store.insert("A", "1", "a@example.com", links, urls)
        [row] = store.list_all()
        assert row["product_links"] == links
        assert row["image_urls"] == urls

    def test_malformed_stored_json_yields_empty(self, store):
        with store.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO submissions (name, contact, email, product_links, image_urls) "
                    "VALUES ('Bad', '1', '', 'not-json', NULL)"
                )
            )
        [row] = store.list_all()
        assert row["product_links"] == []
        assert row["image_urls"] == []

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "subs.db"
        s = SubmissionStore(url=f"sqlite:///{db_path}")
        try:
            s.initialize()
            assert db_path.parent.is_dir()
        finally:
            s.dispose()

    def test_insert_without_table_raises_persistence_error(self, tmp_path):
        s = SubmissionStore(url=f"sqlite:///{tmp_path / 'empty.db'}")
        try:
            with pytest.raises(PersistenceError):
                s.insert("A", "1", "", [], [])
        finally:
            s.dispose()

    def test_created_at_is_utc(self, store):
        from datetime import datetime, timezone

        store.insert("A", "1", "", [], [])
        [row] = store.list_all()
        created = datetime.fromisoformat(row["created_at"])
        assert created.utcoffset() is not None
        assert created.utcoffset().total_seconds() == 0
        assert abs((datetime.now(timezone.utc) - created).total_seconds()) < 120
