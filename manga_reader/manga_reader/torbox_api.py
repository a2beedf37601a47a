"""
Torbox download-service client.

Lists the user's tracked torrents, adds magnets and requests download links.
All calls are bearer-token authenticated; nothing is retried by default.
"""
from typing import Any, Dict, List, Optional

from . import constants as c
from .api_common import DECODE_ERRORS, create_session, send
from .config import TorboxConfig
from .logging import APIError, CredentialError, DecodeError, get_logger
from .matcher import filter_matches
from .models import (
    AddTorrentResult,
    Torrent,
    TorrentFile,
    TorboxFile,
    TorrentSearchResult,
    UserProfile,
    parse_datetime,
)

logger = get_logger(__name__)

SERVICE = "Torbox"


def parse_torrent(item: Dict[str, Any]) -> Torrent:
    """Converts one /torrents/mylist entry into a Torrent."""
    try:
        files = [
            TorrentFile(
                id=str(f.get("id")),
                name=f.get("name") or "",
                size=f.get("size") or 0,
                path=f.get("name") or "",
            )
            for f in item.get("files") or []
        ]

        return Torrent(
            id=str(item["id"]),
            name=item["name"],
            hash=item.get("hash") or "",
            size=item.get("size") or 0,
            progress=float(item.get("progress") or 0),
            download_speed=item.get("download_speed") or 0,
            upload_speed=item.get("upload_speed") or 0,
            status=item.get("download_state") or "unknown",
            created_at=parse_datetime(item.get("created_at")),
            files=files,
        )
    except DECODE_ERRORS as e:
        raise DecodeError(f"Malformed torrent entry: {e!r}") from e


class TorboxAPI:
    def __init__(self, config: Optional[TorboxConfig] = None, api_key: Optional[str] = None):
        self.config = config or TorboxConfig()
        self.base_url = self.config.base_url.rstrip("/")
        self.api_key = api_key
        self.session = create_session(self.config.max_retries)

    def set_api_key(self, key: str) -> None:
        self.api_key = key

    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def _require_key(self) -> str:
        if not self.api_key:
            raise CredentialError("Torbox API key not set. Add it with 'manga-reader settings set-key'.")
        return self.api_key

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        api_key = self._require_key()
        headers = {"Authorization": f"Bearer {api_key}"}
        try:
            return send(
                self.session, method, f"{self.base_url}{path}", SERVICE,
                timeout=self.config.timeout, headers=headers, **kwargs
            )
        except APIError as e:
            if e.status_code in (401, 403):
                raise CredentialError(f"Torbox rejected the API key: {e}") from e
            raise

    def get_user_profile(self) -> UserProfile:
        data = self._request("GET", "/user/me").get("data") or {}
        if not isinstance(data, dict):
            raise DecodeError(f"{SERVICE} profile response has no data object")
        return UserProfile(id=data.get("id"), email=data.get("email"), plan=data.get("plan"))

    def get_torrents(self) -> List[Torrent]:
        """All torrents tracked by the account. A null data field means none."""
        items = self._request("GET", "/torrents/mylist").get("data") or []
        if not isinstance(items, list):
            raise DecodeError(f"{SERVICE} torrent list has no data array")
        return [parse_torrent(item) for item in items]

    def search_torrents(self, query: str) -> List[TorrentSearchResult]:
        items = self._request("GET", "/torrents/search", params={"query": query}).get("data") or []
        if not isinstance(items, list):
            raise DecodeError(f"{SERVICE} search response has no data array")
        results = []
        for item in items:
            if not isinstance(item, dict) or not item.get("name"):
                raise DecodeError(f"{SERVICE} search result without a name")
            results.append(TorrentSearchResult(
                id=str(item["id"]) if item.get("id") is not None else None,
                name=item["name"],
                size=item.get("size"),
                seeders=item.get("seeders"),
                leechers=item.get("leechers"),
                magnet=item.get("magnet"),
                hash=item.get("hash"),
            ))
        return results

    def add_magnet(self, magnet: str) -> AddTorrentResult:
        """Starts tracking a magnet link (multipart/form-data upload)."""
        files = {"magnet": (None, magnet)}
        body = self._request("POST", "/torrents/createtorrent", files=files)
        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise DecodeError(f"{SERVICE} createtorrent response has no data object")
        result = AddTorrentResult(
            success=bool(body.get("success")),
            torrent_id=data.get("torrent_id"),
            hash=data.get("hash"),
        )
        logger.info(f"Added magnet to {SERVICE} (torrent_id={result.torrent_id}, hash={result.hash})")
        return result

    def get_download_link(self, torrent_id: int, file_id: Optional[int] = None) -> str:
        """Retrievable link for a completed torrent, or one file inside it."""
        params: Dict[str, Any] = {"token": self._require_key(), "torrent_id": torrent_id}
        if file_id is not None:
            params["file_id"] = file_id
        link = self._request("GET", "/torrents/requestdl", params=params).get("data")
        return link or ""

    def search_manga_files(self, manga_title: str, threshold: float = c.MATCH_WORD_THRESHOLD) -> List[TorboxFile]:
        """Tracked torrents whose name matches the catalog title."""
        torrents = self.get_torrents()
        matched = filter_matches(manga_title, torrents, threshold=threshold)
        logger.info(f"{len(matched)} of {len(torrents)} tracked torrents match '{manga_title}'")
        return [
            TorboxFile(
                id=t.id,
                name=t.name,
                size=t.size,
                download_url=f"{c.TORBOX_FILE_SCHEME}://{t.id}",
                torrent_hash=t.hash or None,
                created_at=t.created_at,
                status=t.status,
            )
            for t in matched
        ]

    def close(self) -> None:
        self.session.close()
