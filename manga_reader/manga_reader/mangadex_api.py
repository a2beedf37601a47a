"""
MangaDex catalog client.

Read-only access to titles, chapter feeds and page image locations.
Every method is a single request; failures raise APIError / DecodeError.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from . import constants as c
from .api_common import DECODE_ERRORS, create_session, send
from .config import MangaDexConfig
from .logging import DecodeError, get_logger
from .models import Chapter, Manga, parse_datetime

logger = get_logger(__name__)

SERVICE = "MangaDex"

Params = List[Tuple[str, Any]]


def _localized(value: Any, language: str = "en") -> Optional[str]:
    """Picks a language entry from MangaDex's {lang: text} maps."""
    # Empty maps come back as [] rather than {}
    if not isinstance(value, dict) or not value:
        return None
    return value.get(language)


def _build_manga(item: Dict[str, Any], uploads_url: str) -> Manga:
    manga_id = item["id"]
    attributes = item["attributes"]

    title = _localized(attributes.get("title"))
    if not title:
        for alt in attributes.get("altTitles") or []:
            if isinstance(alt, dict) and alt:
                title = next(iter(alt.values()))
                break
    if not title and isinstance(attributes.get("title"), dict):
        # Some entries only carry a non-English primary title
        title = next(iter(attributes["title"].values()), "")

    authors = []
    cover_url = None
    for rel in item.get("relationships") or []:
        rel_attrs = rel.get("attributes") or {}
        if rel.get("type") == "author" and rel_attrs.get("name"):
            authors.append(rel_attrs["name"])
        elif rel.get("type") == "cover_art" and rel_attrs.get("fileName"):
            cover_url = f"{uploads_url}/covers/{manga_id}/{rel_attrs['fileName']}.512.jpg"

    tags = []
    for tag in attributes.get("tags") or []:
        name = _localized((tag.get("attributes") or {}).get("name"))
        if name:
            tags.append(name)

    return Manga(
        id=manga_id,
        title=title or "",
        description=_localized(attributes.get("description")) or "",
        cover_art=cover_url or c.MANGADEX_PLACEHOLDER_COVER,
        authors=authors,
        tags=tags,
        status=attributes.get("status") or "unknown",
    )


def parse_manga(item: Dict[str, Any], uploads_url: str = c.MANGADEX_UPLOADS_URL) -> Manga:
    """Converts one MangaDex manga object into a Manga."""
    try:
        return _build_manga(item, uploads_url)
    except DECODE_ERRORS as e:
        raise DecodeError(f"Malformed manga entry: {e!r}") from e


def parse_chapter(item: Dict[str, Any]) -> Chapter:
    """Converts one MangaDex feed entry into a Chapter."""
    try:
        chapter_id = item["id"]
        attributes = item["attributes"]
        raw_number = attributes.get("chapter")
        title = attributes.get("title") or None
        publish_at = attributes.get("publishAt")
        language = attributes.get("translatedLanguage") or c.MANGADEX_DEFAULT_LANGUAGE
    except DECODE_ERRORS as e:
        raise DecodeError(f"Malformed chapter entry: {e!r}") from e

    number = None
    if raw_number not in (None, ""):
        try:
            number = float(raw_number)
        except (TypeError, ValueError):
            logger.debug(f"Non-numeric chapter number '{raw_number}' for {chapter_id}")

    return Chapter(
        id=chapter_id,
        number=number,
        title=title,
        publish_date=parse_datetime(publish_at),
        language=language,
    )


class MangaDexAPI:
    def __init__(self, config: Optional[MangaDexConfig] = None):
        self.config = config or MangaDexConfig()
        self.base_url = self.config.base_url.rstrip("/")
        self.session = create_session(self.config.max_retries)

    def _get(self, path: str, params: Optional[Params] = None) -> Dict[str, Any]:
        return send(
            self.session, "GET", f"{self.base_url}{path}", SERVICE,
            timeout=self.config.timeout, params=params,
        )

    def _listing_params(self, limit: int, offset: int) -> Params:
        params: Params = [("limit", limit), ("offset", offset)]
        params += [("contentRating[]", rating) for rating in self.config.content_rating]
        params += [("includes[]", "cover_art"), ("includes[]", "author")]
        return params

    def _manga_list(self, params: Params) -> List[Manga]:
        data = self._get("/manga", params)
        items = data.get("data")
        if not isinstance(items, list):
            raise DecodeError(f"{SERVICE} manga listing has no data array")
        return [parse_manga(item, self.config.uploads_url) for item in items]

    def search_manga(self, query: str, limit: Optional[int] = None, offset: int = 0) -> List[Manga]:
        """Free-text title search."""
        params: Params = [("title", query)] + self._listing_params(limit or self.config.page_limit, offset)
        logger.info(f"Searching {SERVICE} for '{query}'")
        return self._manga_list(params)

    def get_popular_manga(self, limit: Optional[int] = None, offset: int = 0) -> List[Manga]:
        """Titles ordered by follower count."""
        params = self._listing_params(limit or self.config.page_limit, offset)
        params.append(("order[followedCount]", "desc"))
        return self._manga_list(params)

    def get_seasonal_manga(self, now: Optional[datetime] = None) -> List[Manga]:
        """Recently updated titles (last MANGADEX_SEASONAL_DAYS days)."""
        since = (now or datetime.now(timezone.utc)) - timedelta(days=c.MANGADEX_SEASONAL_DAYS)
        params = self._listing_params(c.MANGADEX_DEFAULT_LIMIT, 0)
        params.append(("updatedAtSince", since.strftime("%Y-%m-%dT%H:%M:%S")))
        params.append(("order[updatedAt]", "desc"))
        return self._manga_list(params)

    def get_manga_details(self, manga_id: str) -> Manga:
        """A single title with authors, artists, cover and its chapter list."""
        params: Params = [
            ("includes[]", "cover_art"),
            ("includes[]", "author"),
            ("includes[]", "artist"),
        ]
        data = self._get(f"/manga/{manga_id}", params)
        if not isinstance(data.get("data"), dict):
            raise DecodeError(f"{SERVICE} manga detail has no data object")
        manga = parse_manga(data["data"], self.config.uploads_url)
        manga.chapters = self.get_chapters(manga_id)
        return manga

    def get_chapters(self, manga_id: str, language: Optional[str] = None) -> List[Chapter]:
        """Chapter feed in ascending chapter order."""
        params: Params = [
            ("translatedLanguage[]", language or self.config.language),
            ("order[chapter]", "asc"),
            ("limit", self.config.feed_limit),
        ]
        data = self._get(f"/manga/{manga_id}/feed", params)
        items = data.get("data")
        if not isinstance(items, list):
            raise DecodeError(f"{SERVICE} chapter feed has no data array")
        return [parse_chapter(item) for item in items]

    def get_chapter_pages(self, chapter_id: str, quality: str = c.DEFAULT_DOWNLOAD_QUALITY) -> List[str]:
        """
        Page image URLs for a chapter, sorted by file name.

        quality="low" selects the data-saver (compressed) images.
        """
        data = self._get(f"/at-home/server/{chapter_id}")
        try:
            base_url = data["baseUrl"]
            chapter = data["chapter"]
            chapter_hash = chapter["hash"]
            if quality == "low":
                files, folder = chapter["dataSaver"], "data-saver"
            else:
                files, folder = chapter["data"], "data"
            names = sorted(files)
        except DECODE_ERRORS as e:
            raise DecodeError(f"{SERVICE} at-home response is malformed: {e!r}") from e

        return [f"{base_url}/{folder}/{chapter_hash}/{name}" for name in names]
