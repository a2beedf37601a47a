"""
Chapter reading sessions with progress tracking.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from .logging import get_logger
from .models import Bookmark, ReadingProgress
from .store import SettingsStore

logger = get_logger(__name__)


class ReadingSession:
    """
    Page cursor over one chapter's page list.

    Opening a session resumes at the saved page (clamped to the chapter) and
    marks the title as last read. Every page change saves progress; reaching
    the last page marks the chapter completed.
    """

    def __init__(self, store: SettingsStore, manga_id: str, chapter_id: str, pages: List[str]):
        self.store = store
        self.manga_id = manga_id
        self.chapter_id = chapter_id
        self.pages = list(pages)
        self.current_index = 0

        saved = store.get_reading_progress(manga_id, chapter_id)
        if saved and self.pages:
            self.current_index = max(0, min(saved.last_page_read, len(self.pages) - 1))
            logger.info(f"Resuming {manga_id}/{chapter_id} at page {self.current_index + 1}")

        store.last_read_manga_id = manga_id

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    @property
    def current_page(self) -> Optional[str]:
        if not self.pages:
            return None
        return self.pages[self.current_index]

    @property
    def is_last_page(self) -> bool:
        return bool(self.pages) and self.current_index == len(self.pages) - 1

    def go_to(self, index: int) -> int:
        """Moves to a 0-based page index (clamped) and saves progress."""
        if not self.pages:
            return 0
        self.current_index = max(0, min(index, len(self.pages) - 1))
        self.save_progress()
        return self.current_index

    def next_page(self) -> int:
        return self.go_to(self.current_index + 1)

    def previous_page(self) -> int:
        return self.go_to(self.current_index - 1)

    def save_progress(self) -> ReadingProgress:
        progress = ReadingProgress(
            id=str(uuid.uuid4()),
            manga_id=self.manga_id,
            chapter_id=self.chapter_id,
            last_page_read=self.current_index,
            total_pages=len(self.pages),
            last_read_date=datetime.now(),
            is_completed=self.is_last_page,
        )
        self.store.save_reading_progress(progress)
        return progress

    def add_bookmark(self, note: Optional[str] = None) -> Bookmark:
        bookmark = Bookmark(
            id=str(uuid.uuid4()),
            manga_id=self.manga_id,
            chapter_id=self.chapter_id,
            page_number=self.current_index,
            note=note or None,
        )
        bookmarks = self.store.get_bookmarks(self.manga_id)
        bookmarks.append(bookmark)
        self.store.save_bookmarks(bookmarks, self.manga_id)
        return bookmark
