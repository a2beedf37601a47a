import json
from datetime import datetime
from unittest.mock import patch

import pytest
from manga_reader.manga_reader.logging import StorageError
from manga_reader.manga_reader.store import SettingsStore
from manga_reader.manga_reader.models import Bookmark, ReadingMode, ReadingProgress


def test_defaults_on_empty_store(store):
    assert store.reading_mode == ReadingMode.VERTICAL
    assert store.auto_download is False
    assert store.download_quality == "high"
    assert store.last_read_manga_id is None
    assert store.library_manga_ids == set()
    assert store.favorite_manga_ids == set()
    assert store.torbox_downloads == []


def test_preferences_persist_across_instances(tmp_path):
    path = tmp_path / "settings.json"
    first = SettingsStore(path)
    first.reading_mode = ReadingMode.HORIZONTAL
    first.auto_download = True
    first.download_quality = "low"
    first.last_read_manga_id = "m1"

    second = SettingsStore(path)
    assert second.reading_mode == ReadingMode.HORIZONTAL
    assert second.auto_download is True
    assert second.download_quality == "low"
    assert second.last_read_manga_id == "m1"


def test_unknown_reading_mode_falls_back_to_vertical(store):
    store.set("readingMode", "diagonal")
    assert store.reading_mode == ReadingMode.VERTICAL


def test_favorite_adds_to_library(store):
    assert store.toggle_favorite("m1") is True
    assert store.is_favorite("m1")
    assert store.is_in_library("m1")

    # Unfavoriting keeps the title in the library
    assert store.toggle_favorite("m1") is False
    assert not store.is_favorite("m1")
    assert store.is_in_library("m1")


def test_remove_from_library_also_unfavorites(store):
    store.toggle_favorite("m1")
    store.remove_from_library("m1")
    assert not store.is_in_library("m1")
    assert not store.is_favorite("m1")


def test_torbox_downloads_dedupe_by_hash(store):
    assert store.save_torbox_download("m1", "abc", "One Piece v01") is True
    assert store.save_torbox_download("m2", "abc", "Duplicate") is False
    assert store.save_torbox_download("m1", "def", "One Piece v02") is True

    assert [d.torrent_hash for d in store.get_torbox_downloads("m1")] == ["abc", "def"]
    assert store.get_torbox_downloads("m2") == []

    store.remove_torbox_download("abc")
    assert [d.id for d in store.torbox_downloads] == ["def"]


def test_reading_progress_round_trip(tmp_path):
    path = tmp_path / "settings.json"
    progress = ReadingProgress(
        id="p1", manga_id="m1", chapter_id="c1",
        last_page_read=4, total_pages=20,
        last_read_date=datetime(2024, 5, 1, 12, 30), is_completed=False,
    )
    SettingsStore(path).save_reading_progress(progress)

    loaded = SettingsStore(path).get_reading_progress("m1", "c1")
    assert loaded == progress
    assert SettingsStore(path).get_reading_progress("m1", "c2") is None

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert "readingProgress_m1_c1" in raw


def test_bookmarks_round_trip(store):
    marks = [
        Bookmark(id="b1", manga_id="m1", chapter_id="c1", page_number=3, note="cliffhanger", created_at=datetime(2024, 1, 1)),
        Bookmark(id="b2", manga_id="m1", chapter_id="c2", page_number=0, created_at=datetime(2024, 1, 2)),
    ]
    store.save_bookmarks(marks, "m1")
    assert store.get_bookmarks("m1") == marks
    assert store.get_bookmarks("m2") == []


def test_unreadable_entries_read_as_absent(store):
    store.set("readingProgress_m1_c1", {"garbage": True})
    store.set("bookmarks_m1", "not a list of dicts")
    assert store.get_reading_progress("m1", "c1") is None
    assert store.get_bookmarks("m1") == []


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    store = SettingsStore(path)
    assert store.library_manga_ids == set()
    store.add_to_library("m1")
    assert SettingsStore(path).is_in_library("m1")


def test_subscribers_are_notified(store):
    events = []

    def on_change(key, value):
        events.append((key, value))

    store.subscribe(on_change)
    store.auto_download = True
    store.add_to_library("m1")
    store.unsubscribe(on_change)
    store.download_quality = "low"

    assert events == [("autoDownload", True), ("libraryManga", ["m1"])]


def test_subscribe_is_idempotent(store):
    calls = []
    callback = lambda key, value: calls.append(key)
    store.subscribe(callback)
    store.subscribe(callback)
    store.auto_download = True
    assert calls == ["autoDownload"]


def test_failed_write_leaves_store_unchanged(tmp_path):
    path = tmp_path / "settings.json"
    store = SettingsStore(path)
    store.set("a", 1)
    events = []
    store.subscribe(lambda key, value: events.append(key))

    with patch("manga_reader.manga_reader.store.json.dump", side_effect=OSError("disk full")):
        with pytest.raises(StorageError):
            store.set("b", 2)

    assert store.get("b") is None
    assert events == []
    assert [p.name for p in tmp_path.iterdir() if p.suffix == ".tmp"] == []
    assert SettingsStore(path).get("a") == 1

    # A later successful write must not carry the failed value
    store.set("c", 3)
    reloaded = SettingsStore(path)
    assert reloaded.get("c") == 3
    assert reloaded.get("b") is None
