"""
Constants used throughout the MangaReader application.
"""

# Title Matching
MATCH_WORD_THRESHOLD = 0.6  # Fraction of title words that must appear in a candidate
# Tags: innermost [...] or (...) or {...} groups
TAG_PATTERN = r"\[[^\[\]]*\]|\([^()]*\)|\{[^{}]*\}"
# Volume / chapter markers, with or without the trailing dot
MARKER_PATTERN = r"\b(?:vol(?:ume)?s?|ch(?:apter)?s?)\b\.?"

# MangaDex (catalog) Configuration
MANGADEX_BASE_URL = "https://api.mangadex.org"
MANGADEX_UPLOADS_URL = "https://uploads.mangadex.org"
MANGADEX_PLACEHOLDER_COVER = "https://via.placeholder.com/512"
MANGADEX_DEFAULT_LIMIT = 20
MANGADEX_FEED_LIMIT = 500
MANGADEX_SEASONAL_DAYS = 90
MANGADEX_DEFAULT_LANGUAGE = "en"
MANGADEX_CONTENT_RATING = ["safe"]

# Torbox (download service) Configuration
TORBOX_BASE_URL = "https://api.torbox.app/v1/api"
TORBOX_FILE_SCHEME = "torbox"
TORBOX_SERVICE_NAME = "torbox"

# HTTP
API_TIMEOUT_SECONDS = 15
API_RETRY_BACKOFF_FACTOR = 0.5

# Local Storage
DEFAULT_DATA_DIR = "~/.manga_reader"
SETTINGS_FILENAME = "settings.json"
CREDENTIALS_FILENAME = "credentials.json"
LOG_FILENAME = "manga_reader.log"

# Store keys
KEY_READING_MODE = "readingMode"
KEY_AUTO_DOWNLOAD = "autoDownload"
KEY_DOWNLOAD_QUALITY = "downloadQuality"
KEY_LAST_READ_MANGA = "lastReadManga"
KEY_LIBRARY_MANGA = "libraryManga"
KEY_FAVORITE_MANGA = "favoriteManga"
KEY_TORBOX_DOWNLOADS = "torboxDownloads"
PROGRESS_KEY_TEMPLATE = "readingProgress_{manga_id}_{chapter_id}"
BOOKMARKS_KEY_TEMPLATE = "bookmarks_{manga_id}"

# Preferences
DEFAULT_DOWNLOAD_QUALITY = "high"
VALID_DOWNLOAD_QUALITIES = {"high", "low"}

# Display Configuration
BYTES_PER_KB = 1024
BYTES_PER_MB = 1024 * 1024
BYTES_PER_GB = 1024 * 1024 * 1024
DESCRIPTION_PREVIEW_CHARS = 400
