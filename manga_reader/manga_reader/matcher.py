"""
Torrent-name to catalog-title matching.

A candidate name (as tracked by the download service) is considered to
reference a catalog title when, after normalization, it contains the whole
title, or enough of the title's words. Words are tested as substrings, not
tokens, so "one" also hits "someone"; that looseness is accepted.
"""
import re
from typing import Callable, Iterable, List, TypeVar

from . import constants as c
from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_TAG_RE = re.compile(c.TAG_PATTERN)
_MARKER_RE = re.compile(c.MARKER_PATTERN)
_SPACE_RE = re.compile(r"\s+")


def normalize_title(text: str) -> str:
    """
    Casefolds, drops [..] (..) {..} groups and vol/ch markers, collapses
    whitespace. Applied identically to titles and candidate names.

    Groups are removed innermost first until none remain, so nested groups
    go entirely and an unmatched opening bracket is left as plain text.
    """
    if not text:
        return ""
    s = text.casefold()
    removed = 1
    while removed:
        s, removed = _TAG_RE.subn("", s)
    s = _MARKER_RE.sub(" ", s)
    return _SPACE_RE.sub(" ", s).strip()


def title_words(text: str) -> List[str]:
    """Whitespace-delimited words of the normalized text."""
    return [w for w in normalize_title(text).split(" ") if w]


def required_matches(word_count: int, threshold: float = c.MATCH_WORD_THRESHOLD) -> int:
    """
    Number of title words a candidate must contain: ceil(word_count * threshold).

    Rounds up, so a one-word title needs its word and a two-word title needs
    both. The threshold is scaled to an integer percentage so that 0.6 * 10
    yields exactly 6 instead of rounding 6.000000000000001 up to 7. A title
    with words always needs at least one of them.
    """
    if word_count <= 0:
        return 0
    percent = round(threshold * 100)
    return max(1, -(-word_count * percent // 100))


def match_score(title: str, candidate: str) -> float:
    """
    Fraction of the title's words found in the candidate, in [0, 1].

    Returns 1.0 when the candidate contains the whole normalized title and
    0.0 for titles with no words.
    """
    norm_candidate = normalize_title(candidate)
    words = title_words(title)
    if not words or not norm_candidate:
        return 0.0

    if " ".join(words) in norm_candidate:
        return 1.0

    found = sum(1 for w in words if w in norm_candidate)
    return found / len(words)


def is_manga_match(title: str, candidate: str, threshold: float = c.MATCH_WORD_THRESHOLD) -> bool:
    """
    True if the candidate name plausibly refers to the catalog title.

    Accepts when the normalized candidate contains the normalized title as a
    contiguous substring, or contains at least ceil(threshold * n) of the
    title's n words. Titles that normalize to nothing never match.
    """
    norm_candidate = normalize_title(candidate)
    words = title_words(title)
    if not words or not norm_candidate:
        return False

    if " ".join(words) in norm_candidate:
        return True

    found = sum(1 for w in words if w in norm_candidate)
    return found >= required_matches(len(words), threshold)


def filter_matches(
    title: str,
    items: Iterable[T],
    key: Callable[[T], str] = lambda item: item.name,
    threshold: float = c.MATCH_WORD_THRESHOLD,
) -> List[T]:
    """Keeps the items whose name matches the title, preserving order."""
    matched = [item for item in items if is_manga_match(title, key(item), threshold)]
    logger.debug(f"Matched {len(matched)} candidate(s) for '{title}'")
    return matched
