import os
import stat
import sys

import pytest
from manga_reader.manga_reader.credentials import CredentialStore
from manga_reader.manga_reader.reader import ReadingSession


class TestCredentialStore:
    def test_missing_file_means_no_credential(self, tmp_path):
        creds = CredentialStore(tmp_path / "credentials.json")
        assert creds.get("torbox") is None
        assert not creds.has("torbox")

    def test_save_get_overwrite_delete(self, tmp_path):
        creds = CredentialStore(tmp_path / "credentials.json")
        creds.save("torbox", "first")
        assert creds.get("torbox") == "first"
        creds.save("torbox", "second")
        assert CredentialStore(tmp_path / "credentials.json").get("torbox") == "second"

        assert creds.delete("torbox") is True
        assert creds.get("torbox") is None
        assert creds.delete("torbox") is False

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_file_is_owner_only(self, tmp_path):
        path = tmp_path / "credentials.json"
        CredentialStore(path).save("torbox", "secret")
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_unreadable_file_means_no_credential(self, tmp_path):
        path = tmp_path / "credentials.json"
        path.write_text("][", encoding="utf-8")
        assert CredentialStore(path).get("torbox") is None

    def test_override_wins(self, tmp_path):
        path = tmp_path / "credentials.json"
        CredentialStore(path).save("torbox", "from-file")
        assert CredentialStore(path, overrides={"torbox": "from-env"}).get("torbox") == "from-env"
        # Empty overrides are ignored
        assert CredentialStore(path, overrides={"torbox": None}).get("torbox") == "from-file"

    def test_is_overridden(self, tmp_path):
        path = tmp_path / "credentials.json"
        assert CredentialStore(path, overrides={"torbox": "from-env"}).is_overridden("torbox")
        assert not CredentialStore(path, overrides={"torbox": ""}).is_overridden("torbox")
        assert not CredentialStore(path).is_overridden("torbox")


class TestReadingSession:
    PAGES = [f"https://cdn.example/data/h/{i}.png" for i in range(1, 6)]

    def test_starts_at_first_page_and_marks_last_read(self, store):
        session = ReadingSession(store, "m1", "c1", self.PAGES)
        assert session.current_index == 0
        assert session.current_page == self.PAGES[0]
        assert store.last_read_manga_id == "m1"

    def test_page_changes_save_progress(self, store):
        session = ReadingSession(store, "m1", "c1", self.PAGES)
        session.next_page()
        session.next_page()
        progress = store.get_reading_progress("m1", "c1")
        assert progress.last_page_read == 2
        assert progress.total_pages == 5
        assert progress.is_completed is False

    def test_last_page_completes_chapter(self, store):
        session = ReadingSession(store, "m1", "c1", self.PAGES)
        session.go_to(99)
        assert session.current_index == 4
        assert store.get_reading_progress("m1", "c1").is_completed is True

    def test_previous_page_is_clamped(self, store):
        session = ReadingSession(store, "m1", "c1", self.PAGES)
        assert session.previous_page() == 0

    def test_resumes_saved_page(self, store):
        ReadingSession(store, "m1", "c1", self.PAGES).go_to(3)
        resumed = ReadingSession(store, "m1", "c1", self.PAGES)
        assert resumed.current_index == 3

    def test_resume_is_clamped_to_shorter_chapter(self, store):
        ReadingSession(store, "m1", "c1", self.PAGES).go_to(4)
        resumed = ReadingSession(store, "m1", "c1", self.PAGES[:2])
        assert resumed.current_index == 1

    def test_empty_chapter(self, store):
        session = ReadingSession(store, "m1", "c1", [])
        assert session.current_page is None
        assert session.next_page() == 0
        assert store.get_reading_progress("m1", "c1") is None

    def test_add_bookmark_appends(self, store):
        session = ReadingSession(store, "m1", "c1", self.PAGES)
        session.go_to(2)
        session.add_bookmark("fight starts")
        session.add_bookmark()
        marks = store.get_bookmarks("m1")
        assert [(b.page_number, b.note) for b in marks] == [(2, "fight starts"), (2, None)]
