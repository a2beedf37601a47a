import pytest
from manga_reader.manga_reader.matcher import (
    normalize_title,
    title_words,
    required_matches,
    match_score,
    is_manga_match,
    filter_matches,
)
from manga_reader.manga_reader.models import Torrent


@pytest.mark.parametrize("title, candidate, expected", [
    ("One Piece", "[Group] One Piece - Vol 05 (2020).cbz", True),
    ("Attack on Titan", "Some Unrelated Manga Vol 1", False),
    ("Fullmetal Alchemist", "fullmetal.alchemist.ch.050", True),
    ("A", "B C D", False),
    ("The Quick Brown Fox", "quick fox brown extra", True),
])
def test_reference_scenarios(title, candidate, expected):
    assert is_manga_match(title, candidate) is expected


def test_normalize_strips_tags_and_markers():
    assert normalize_title("[Group] One Piece - Vol. 05 (2020) {HQ}") == "one piece - 05"
    assert normalize_title("Berserk Ch.12 Chapter 13 Volume 2 vols") == "berserk 12 13 2"


def test_normalize_keeps_marker_letters_inside_words():
    # 'ch' inside 'alchemist' and 'vol' inside 'revolution' are not markers
    assert normalize_title("Alchemist Revolution") == "alchemist revolution"


def test_normalize_removes_nested_groups():
    assert normalize_title("[Grp [Sub]] Berserk {HQ (Scan)} v01") == "berserk v01"


def test_unmatched_bracket_is_kept_as_text():
    assert normalize_title("One (Piece v01") == "one (piece v01"
    assert normalize_title("One (Pi(2024)ece v01") == "one (piece v01"


@pytest.mark.parametrize("candidate", [
    "One (Piece v01",
    "One [Piece v01",
    "One Piece} v01",
])
def test_annotation_next_to_unbalanced_bracket(candidate):
    base = is_manga_match("One Piece", candidate)
    middle = len(candidate) // 2
    assert is_manga_match("One Piece", candidate[:middle] + "(2024)" + candidate[middle:]) == base
    assert is_manga_match("One Piece", candidate[:middle] + "[Group]" + candidate[middle:]) == base


def test_title_words_drop_empty_tokens():
    assert title_words("  One   Piece  ") == ["one", "piece"]
    assert title_words("[Only Tags] (2020)") == []


@pytest.mark.parametrize("word_count, required", [
    (0, 0), (1, 1), (2, 2), (3, 2), (4, 3), (5, 3), (10, 6),
])
def test_required_matches_rounds_up(word_count, required):
    assert required_matches(word_count) == required


def test_tiny_threshold_still_needs_one_word():
    assert required_matches(3, threshold=0.001) == 1
    assert not is_manga_match("Attack on Titan", "Berserk v01", threshold=0.001)
    assert is_manga_match("Attack on Titan", "titan.v01", threshold=0.001)


def test_two_word_title_needs_both_words():
    assert not is_manga_match("Blue Lock", "Blue Exorcist v01")
    assert is_manga_match("Blue Lock", "lock.blue.v01")


def test_contiguous_title_always_matches():
    title = "Chainsaw Man"
    for candidate in ["Chainsaw Man", "[Grp] chainsaw man v01-v11 (Digital)", "xxCHAINSAW MANxx"]:
        assert is_manga_match(title, candidate)


def test_no_shared_words_never_matches():
    assert not is_manga_match("Vinland Saga", "Berserk Deluxe Edition")


@pytest.mark.parametrize("title, candidate", [
    ("Kaiju No. 8", "kaiju no. 8 v01"),
    ("Straße", "straße v01"),
    ("Ōoku", "[Grp] ŌOKU v03"),
])
def test_case_insensitive(title, candidate):
    assert is_manga_match(title, candidate)
    assert is_manga_match(title.upper(), candidate.lower()) == is_manga_match(title, candidate)
    assert is_manga_match(title.lower(), candidate.upper()) == is_manga_match(title, candidate)


@pytest.mark.parametrize("candidate", [
    "Dandadan v05",
    "Dan Da Dan v05",
    "Dandadan - Volume 5.cbz",
    "something else entirely",
])
def test_bracketed_annotations_do_not_change_result(candidate):
    title = "Dandadan"
    base = is_manga_match(title, candidate)
    assert is_manga_match(title, "[Group] " + candidate) == base
    assert is_manga_match(title, candidate + " (2024)") == base
    middle = len(candidate) // 2
    assert is_manga_match(title, candidate[:middle] + "[Group]" + candidate[middle:]) == base


def test_empty_inputs_never_match():
    assert not is_manga_match("", "One Piece")
    assert not is_manga_match("One Piece", "")
    assert not is_manga_match("(2020)", "anything (2020)")


def test_substring_false_positive_is_accepted():
    # 'one' is found inside 'someone'; substring matching is intentional
    assert is_manga_match("One", "Someone Else's Story")


def test_match_score():
    assert match_score("One Piece", "One Piece v01") == 1.0
    assert match_score("The Quick Brown Fox", "quick fox brown extra") == 0.75
    assert match_score("Attack on Titan", "unrelated") == 0.0
    assert match_score("", "whatever") == 0.0


def test_custom_threshold():
    assert not is_manga_match("The Quick Brown Fox", "quick fox brown", threshold=1.0)
    assert is_manga_match("The Quick Brown Fox", "quick fox", threshold=0.5)


def test_filter_matches_preserves_order():
    torrents = [
        Torrent(id="1", name="One Piece v100"),
        Torrent(id="2", name="Naruto v01"),
        Torrent(id="3", name="[X] One Piece v101"),
    ]
    matched = filter_matches("One Piece", torrents)
    assert [t.id for t in matched] == ["1", "3"]


def test_filter_matches_with_key():
    names = ["Bleach v01", "Bleach v02", "Berserk v01"]
    assert filter_matches("Bleach", names, key=lambda n: n) == ["Bleach v01", "Bleach v02"]
