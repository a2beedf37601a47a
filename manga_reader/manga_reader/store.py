"""
Local settings and reading-progress store.

A flat JSON key-value file. Preferences, library membership, tracked
downloads, per-chapter reading progress and per-title bookmarks all live
under string keys; every write is persisted immediately and announced to
subscribers as (key, value).
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Union

from . import constants as c
from .logging import StorageError, get_logger
from .models import Bookmark, ReadingMode, ReadingProgress, TorboxDownload

logger = get_logger(__name__)

ChangeCallback = Callable[[str, Any], None]


class SettingsStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self._data: Dict[str, Any] = self._load()
        self._subscribers: List[ChangeCallback] = []

    # --- persistence ---

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load settings from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Settings file {self.path} is not a JSON object; starting empty")
            return {}
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        """Writes data to a temp file and swaps it in; the old file survives a failure."""
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".settings-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise StorageError(f"Failed to save settings to {self.path}: {e}") from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                try:
                    os.unlink(tmp_name)
                except OSError as e:
                    logger.warning(f"Could not remove temp file {tmp_name}: {e}")

    def _commit(self, data: Dict[str, Any]) -> None:
        # In-memory state only changes once the file is written
        self._save(data)
        self._data = data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = dict(self._data)
        data[key] = value
        self._commit(data)
        self._notify(key, value)

    def remove(self, key: str) -> None:
        if key in self._data:
            data = dict(self._data)
            del data[key]
            self._commit(data)
            self._notify(key, None)

    # --- change notification ---

    def subscribe(self, callback: ChangeCallback) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: ChangeCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self, key: str, value: Any) -> None:
        for callback in list(self._subscribers):
            callback(key, value)

    # --- preferences ---

    @property
    def reading_mode(self) -> ReadingMode:
        raw = self.get(c.KEY_READING_MODE, ReadingMode.VERTICAL.value)
        try:
            return ReadingMode(raw)
        except ValueError:
            return ReadingMode.VERTICAL

    @reading_mode.setter
    def reading_mode(self, mode: ReadingMode) -> None:
        self.set(c.KEY_READING_MODE, ReadingMode(mode).value)

    @property
    def auto_download(self) -> bool:
        return bool(self.get(c.KEY_AUTO_DOWNLOAD, False))

    @auto_download.setter
    def auto_download(self, enabled: bool) -> None:
        self.set(c.KEY_AUTO_DOWNLOAD, bool(enabled))

    @property
    def download_quality(self) -> str:
        return self.get(c.KEY_DOWNLOAD_QUALITY, c.DEFAULT_DOWNLOAD_QUALITY)

    @download_quality.setter
    def download_quality(self, quality: str) -> None:
        self.set(c.KEY_DOWNLOAD_QUALITY, quality)

    @property
    def last_read_manga_id(self) -> Optional[str]:
        return self.get(c.KEY_LAST_READ_MANGA)

    @last_read_manga_id.setter
    def last_read_manga_id(self, manga_id: Optional[str]) -> None:
        if manga_id is None:
            self.remove(c.KEY_LAST_READ_MANGA)
        else:
            self.set(c.KEY_LAST_READ_MANGA, manga_id)

    # --- library & favorites ---

    @property
    def library_manga_ids(self) -> Set[str]:
        return set(self.get(c.KEY_LIBRARY_MANGA, []))

    @property
    def favorite_manga_ids(self) -> Set[str]:
        return set(self.get(c.KEY_FAVORITE_MANGA, []))

    def _set_ids(self, key: str, ids: Set[str]) -> None:
        self.set(key, sorted(ids))

    def add_to_library(self, manga_id: str) -> None:
        ids = self.library_manga_ids
        if manga_id not in ids:
            ids.add(manga_id)
            self._set_ids(c.KEY_LIBRARY_MANGA, ids)

    def remove_from_library(self, manga_id: str) -> None:
        """Removing a title from the library also drops it from favorites."""
        library = self.library_manga_ids
        if manga_id in library:
            library.discard(manga_id)
            self._set_ids(c.KEY_LIBRARY_MANGA, library)
        favorites = self.favorite_manga_ids
        if manga_id in favorites:
            favorites.discard(manga_id)
            self._set_ids(c.KEY_FAVORITE_MANGA, favorites)

    def is_in_library(self, manga_id: str) -> bool:
        return manga_id in self.library_manga_ids

    def toggle_favorite(self, manga_id: str) -> bool:
        """
        Flips the favorite flag and returns the new state. Favoriting a title
        also adds it to the library; unfavoriting leaves it there.
        """
        favorites = self.favorite_manga_ids
        if manga_id in favorites:
            favorites.discard(manga_id)
            self._set_ids(c.KEY_FAVORITE_MANGA, favorites)
            return False
        favorites.add(manga_id)
        self._set_ids(c.KEY_FAVORITE_MANGA, favorites)
        self.add_to_library(manga_id)
        return True

    def is_favorite(self, manga_id: str) -> bool:
        return manga_id in self.favorite_manga_ids

    # --- tracked downloads ---

    @property
    def torbox_downloads(self) -> List[TorboxDownload]:
        downloads = []
        for raw in self.get(c.KEY_TORBOX_DOWNLOADS, []):
            try:
                downloads.append(TorboxDownload.from_dict(raw))
            except (TypeError, AttributeError) as e:
                logger.warning(f"Skipping unreadable download record: {e}")
        return downloads

    def save_torbox_download(self, manga_id: str, torrent_hash: str, torrent_name: str) -> bool:
        """Records a download for a title. Returns False if the hash is already tracked."""
        downloads = self.torbox_downloads
        if any(d.torrent_hash == torrent_hash for d in downloads):
            return False
        downloads.append(TorboxDownload(manga_id=manga_id, torrent_hash=torrent_hash, torrent_name=torrent_name))
        self.set(c.KEY_TORBOX_DOWNLOADS, [d.to_dict() for d in downloads])
        return True

    def get_torbox_downloads(self, manga_id: str) -> List[TorboxDownload]:
        return [d for d in self.torbox_downloads if d.manga_id == manga_id]

    def remove_torbox_download(self, torrent_hash: str) -> None:
        downloads = [d for d in self.torbox_downloads if d.torrent_hash != torrent_hash]
        self.set(c.KEY_TORBOX_DOWNLOADS, [d.to_dict() for d in downloads])

    # --- reading progress ---

    @staticmethod
    def progress_key(manga_id: str, chapter_id: str) -> str:
        return c.PROGRESS_KEY_TEMPLATE.format(manga_id=manga_id, chapter_id=chapter_id)

    def save_reading_progress(self, progress: ReadingProgress) -> None:
        self.set(self.progress_key(progress.manga_id, progress.chapter_id), progress.to_dict())

    def get_reading_progress(self, manga_id: str, chapter_id: str) -> Optional[ReadingProgress]:
        raw = self.get(self.progress_key(manga_id, chapter_id))
        if raw is None:
            return None
        try:
            return ReadingProgress.from_dict(raw)
        except (TypeError, AttributeError) as e:
            logger.warning(f"Unreadable progress for {manga_id}/{chapter_id}: {e}")
            return None

    # --- bookmarks ---

    @staticmethod
    def bookmarks_key(manga_id: str) -> str:
        return c.BOOKMARKS_KEY_TEMPLATE.format(manga_id=manga_id)

    def save_bookmarks(self, bookmarks: List[Bookmark], manga_id: str) -> None:
        self.set(self.bookmarks_key(manga_id), [b.to_dict() for b in bookmarks])

    def get_bookmarks(self, manga_id: str) -> List[Bookmark]:
        raw = self.get(self.bookmarks_key(manga_id), [])
        try:
            return [Bookmark.from_dict(b) for b in raw]
        except (TypeError, AttributeError) as e:
            logger.warning(f"Unreadable bookmarks for {manga_id}: {e}")
            return []
