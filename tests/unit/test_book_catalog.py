"""Unit tests for the curated catalog, rating parser and offline estimator."""

from __future__ import annotations

import json
import re

import pytest

from shelfscan.models.books import KnownBookEntry
from shelfscan.services.book_catalog import (
    KNOWN_BOOKS,
    estimate_rating,
    format_rating,
    lookup_known_rating,
    parse_rating,
    rolling_hash,
)

_RATING_SHAPE = re.compile(r"^\d\.\d$")


def _reference_hash(text: str) -> int:
    """Independent int32 wrap: let the value grow, fold it once per step."""
    h = 0
    data = text.encode("utf-16-le", "surrogatepass")
    for unit in (int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)):
        h = ((h * 31 + unit + 2**31) % 2**32) - 2**31
    return h


# ======================================================================
# Known-book catalog
# ======================================================================


class TestLookupKnownRating:
    def test_exact_match(self) -> None:
        assert lookup_known_rating("Dune", "Frank Herbert") == "4.7"
        assert lookup_known_rating("Atomic Habits", "James Clear") == "4.8"

    def test_case_and_whitespace_insensitive(self) -> None:
        assert lookup_known_rating("  ATOMIC habits ", "james CLEAR") == "4.8"

    def test_partial_match_on_edition_suffix(self) -> None:
        assert lookup_known_rating("Dune (Deluxe Edition)", "Frank Herbert") == "4.7"

    def test_partial_match_on_shortened_author(self) -> None:
        assert lookup_known_rating("The Martian", "Weir") == "4.7"

    def test_exact_match_wins_over_earlier_partial(self) -> None:
        catalog = (
            KnownBookEntry(normalized_title="dune messiah", normalized_author="frank herbert", rating="4.2"),
            KnownBookEntry(normalized_title="dune", normalized_author="frank herbert", rating="4.7"),
        )
        assert lookup_known_rating("Dune", "Frank Herbert", catalog=catalog) == "4.7"
        assert lookup_known_rating("Dune Messiah", "Frank Herbert", catalog=catalog) == "4.2"

    def test_blank_fields_never_match(self) -> None:
        assert lookup_known_rating("", "Frank Herbert") is None
        assert lookup_known_rating("Dune", "") is None
        assert lookup_known_rating("   ", "   ") is None

    def test_unknown_book(self) -> None:
        assert lookup_known_rating("An Obscure Pamphlet", "Nobody In Particular") is None

    def test_every_catalog_rating_is_well_formed(self) -> None:
        for entry in KNOWN_BOOKS:
            assert _RATING_SHAPE.match(entry.rating)
            assert entry.normalized_title == entry.normalized_title.strip().lower()


# ======================================================================
# Reply parsing and formatting
# ======================================================================


class TestParseRating:
    @pytest.mark.parametrize(
        ("reply", "expected"),
        [
            ("4.3", "4.3"),
            ("Rating: 4", "4.0"),
            ("4.25/5", "4.3"),
            ("  3.9\n", "3.9"),
            ("5.0", "5.0"),
            ("1", "1.0"),
        ],
    )
    def test_valid_replies(self, reply: str, expected: str) -> None:
        assert parse_rating(reply) == expected

    @pytest.mark.parametrize("reply", ["", "no idea", "7.5", "0.5", "10/10"])
    def test_invalid_replies(self, reply: str) -> None:
        assert parse_rating(reply) is None

    def test_format_rounds_half_up(self) -> None:
        assert format_rating(3.25) == "3.3"
        assert format_rating(4.75) == "4.8"
        assert format_rating(3.0) == "3.0"


# ======================================================================
# Offline estimator
# ======================================================================


class TestEstimator:
    def test_hash_small_values(self) -> None:
        assert rolling_hash("") == 0
        assert rolling_hash("a") == 97
        assert rolling_hash("ab") == 97 * 31 + 98

    @pytest.mark.parametrize(
        "text",
        [
            "the name of the windpatrick rothfuss",
            "a very long title that will overflow thirty-two bits many times over",
            "cien años de soledadgabriel garcía márquez",
            "emoji 📚 on the spine",
        ],
    )
    def test_hash_wraps_as_int32(self, text: str) -> None:
        h = rolling_hash(text)
        assert -(2**31) <= h < 2**31
        assert h == _reference_hash(text)

    def test_hash_lone_surrogate(self) -> None:
        lone = json.loads('"\\ud83d"')
        assert rolling_hash(lone) == 0xD83D
        assert rolling_hash(lone + "a") == 0xD83D * 31 + 97

    def test_hash_surrogate_pair_matches_astral_character(self) -> None:
        # Two separate surrogate code points produce the same UTF-16 units
        # as the character they encode.
        assert rolling_hash("\ud83d\udcda") == rolling_hash("\U0001f4da")

    def test_estimate_with_lone_surrogate(self) -> None:
        rating = estimate_rating(json.loads('"\\ud83d Broken Emoji"'), "Someone")
        assert _RATING_SHAPE.match(rating)
        assert 3.0 <= float(rating) <= 4.9

    def test_empty_input_maps_to_minimum(self) -> None:
        assert estimate_rating("", "") == "3.0"

    def test_deterministic(self) -> None:
        first = estimate_rating("The Name of the Wind", "Patrick Rothfuss")
        second = estimate_rating("The Name of the Wind", "Patrick Rothfuss")
        assert first == second

    def test_case_and_outer_whitespace_do_not_matter(self) -> None:
        assert estimate_rating("  The Hobbit", "J.R.R. Tolkien ") == estimate_rating(
            "the hobbit", "j.r.r. tolkien"
        )

    @pytest.mark.parametrize(
        ("title", "author"),
        [
            ("The Name of the Wind", "Patrick Rothfuss"),
            ("Gödel, Escher, Bach", "Douglas Hofstadter"),
            ("x", "y"),
            ("A" * 300, "B" * 300),
            ("Infinite Jest", "David Foster Wallace"),
        ],
    )
    def test_range_and_shape(self, title: str, author: str) -> None:
        rating = estimate_rating(title, author)
        assert _RATING_SHAPE.match(rating)
        assert 3.0 <= float(rating) <= 4.9
