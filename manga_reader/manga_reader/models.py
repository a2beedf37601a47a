import uuid
from dataclasses import dataclass, field, asdict, fields
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, Any

from .constants import BYTES_PER_MB


def parse_datetime(value: Any) -> datetime:
    """Accepts a datetime or an ISO-8601 string; falls back to now."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now()


def _filter_known(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    # Filter unknown keys to prevent init errors if schema changes
    valid_keys = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_keys}


class ReadingMode(str, Enum):
    """Page layout used by the reader."""
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


@dataclass
class Chapter:
    """A single chapter from the catalog feed."""
    id: str
    number: Optional[float] = None
    title: Optional[str] = None
    pages: List[str] = field(default_factory=list)
    is_downloaded: bool = False
    publish_date: datetime = field(default_factory=datetime.now)
    language: str = "en"

    @property
    def label(self) -> str:
        """Human-readable chapter label, e.g. 'Ch. 12.5 - Title'."""
        if self.number is None:
            base = "Oneshot"
        elif float(self.number).is_integer():
            base = f"Ch. {int(self.number)}"
        else:
            base = f"Ch. {self.number}"
        return f"{base} - {self.title}" if self.title else base


@dataclass
class Manga:
    """A catalog title with its metadata and (optionally) its chapters."""
    id: str
    title: str
    description: str = ""
    cover_art: str = ""
    authors: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    status: str = "unknown"
    rating: Optional[float] = None
    chapters: List[Chapter] = field(default_factory=list)
    torbox_file_id: Optional[str] = None
    is_favorite: bool = False


@dataclass
class TorrentFile:
    """One file inside a tracked torrent."""
    id: str
    name: str
    size: int = 0
    path: str = ""


@dataclass
class Torrent:
    """A torrent tracked by the download service."""
    id: str
    name: str
    hash: str = ""
    size: int = 0
    progress: float = 0.0
    download_speed: int = 0
    upload_speed: int = 0
    status: str = "unknown"
    created_at: datetime = field(default_factory=datetime.now)
    files: List[TorrentFile] = field(default_factory=list)
    web_dav_link: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.progress >= 1.0

    @property
    def size_mb(self) -> float:
        return self.size / BYTES_PER_MB


@dataclass
class TorboxFile:
    """A tracked torrent that matched a catalog title."""
    id: str
    name: str
    size: int
    download_url: str
    torrent_hash: Optional[str]
    created_at: datetime
    status: str


@dataclass
class TorrentSearchResult:
    id: Optional[str]
    name: str
    size: Optional[int] = None
    seeders: Optional[int] = None
    leechers: Optional[int] = None
    magnet: Optional[str] = None
    hash: Optional[str] = None
    _fallback_id: str = field(default_factory=lambda: str(uuid.uuid4()), repr=False, compare=False)

    @property
    def display_id(self) -> str:
        return self.id or self.hash or self._fallback_id


@dataclass
class UserProfile:
    id: Optional[int] = None
    email: Optional[str] = None
    plan: Optional[int] = None


@dataclass
class AddTorrentResult:
    success: bool = False
    torrent_id: Optional[int] = None
    hash: Optional[str] = None


@dataclass
class ReadingProgress:
    """Last-read position within one chapter."""
    id: str
    manga_id: str
    chapter_id: str
    last_page_read: int
    total_pages: int
    last_read_date: datetime = field(default_factory=datetime.now)
    is_completed: bool = False

    @property
    def fraction(self) -> float:
        if self.total_pages <= 0:
            return 0.0
        return min(1.0, (self.last_page_read + 1) / self.total_pages)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["last_read_date"] = self.last_read_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReadingProgress':
        filtered = _filter_known(cls, data)
        filtered["last_read_date"] = parse_datetime(filtered.get("last_read_date"))
        return cls(**filtered)


@dataclass
class Bookmark:
    id: str
    manga_id: str
    chapter_id: str
    page_number: int
    note: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Bookmark':
        filtered = _filter_known(cls, data)
        filtered["created_at"] = parse_datetime(filtered.get("created_at"))
        return cls(**filtered)


@dataclass
class TorboxDownload:
    """Links a torrent added through the app to the manga it was added for."""
    manga_id: str
    torrent_hash: str
    torrent_name: str
    added_at: datetime = field(default_factory=datetime.now)

    @property
    def id(self) -> str:
        return self.torrent_hash

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["added_at"] = self.added_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TorboxDownload':
        filtered = _filter_known(cls, data)
        filtered["added_at"] = parse_datetime(filtered.get("added_at"))
        return cls(**filtered)
