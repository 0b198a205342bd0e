"""Curated ratings and the offline rating estimator.

Two cost-free sources of a rating that never touch the network:

* :func:`lookup_known_rating` - a small hand-curated table of well-known
  books.  It is consulted before any live provider so those titles always
  get the same answer.
* :func:`estimate_rating` - a deterministic hash of title and author
  mapped into ``[3.0, 4.9]``.  Identical input gives an identical rating on
  every run and every machine, which makes the value safe to cache.

The estimator's arithmetic is fixed: a 32-bit signed rolling hash with
multiplier 31 over UTF-16 code units, ``abs(hash) / 2**31`` as the
normalised position, and half-up rounding to one decimal.  Ratings that
were already shown to users for unknown titles depend on every one of
those details.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

from shelfscan.models.books import KnownBookEntry

_MIN_ESTIMATE = 3.0
_MAX_ESTIMATE = 4.9
_INT32_MODULUS = 1 << 32
_INT32_SIGN_BIT = 1 << 31

# First number in a provider reply: "4.3", "Rating: 4", "4.25/5".
_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")

KNOWN_BOOKS: tuple[KnownBookEntry, ...] = tuple(
    KnownBookEntry(normalized_title=title, normalized_author=author, rating=rating)
    for title, author, rating in (
        ("atomic habits", "james clear", "4.8"),
        ("the creative act", "rick rubin", "4.8"),
        ("american gods", "neil gaiman", "4.6"),
        ("the psychology of money", "morgan housel", "4.7"),
        ("stumbling on happiness", "daniel gilbert", "4.3"),
        ("this is how you lose the time war", "amal el-mohtar", "4.5"),
        ("this is how you lose the time war", "max gladstone", "4.5"),
        ("the book of five rings", "miyamoto musashi", "4.7"),
        ("economics for everyone", "jim stanford", "4.5"),
        ("apocalypse never", "michael shellenberger", "4.7"),
        ("economic facts and fallacies", "thomas sowell", "4.8"),
        ("thinking, fast and slow", "daniel kahneman", "4.6"),
        ("sapiens", "yuval noah harari", "4.7"),
        ("educated", "tara westover", "4.7"),
        ("becoming", "michelle obama", "4.8"),
        ("the silent patient", "alex michaelides", "4.5"),
        ("where the crawdads sing", "delia owens", "4.8"),
        ("dune", "frank herbert", "4.7"),
        ("project hail mary", "andy weir", "4.8"),
        ("the martian", "andy weir", "4.7"),
        ("the midnight library", "matt haig", "4.3"),
        ("1984", "george orwell", "4.7"),
        ("to kill a mockingbird", "harper lee", "4.8"),
        ("the great gatsby", "f. scott fitzgerald", "4.5"),
        ("pride and prejudice", "jane austen", "4.7"),
        ("the alchemist", "paulo coelho", "4.7"),
        ("the four agreements", "don miguel ruiz", "4.7"),
        ("the power of now", "eckhart tolle", "4.7"),
        ("man's search for meaning", "viktor e. frankl", "4.7"),
        ("a brief history of time", "stephen hawking", "4.7"),
        ("the 7 habits of highly effective people", "stephen r. covey", "4.7"),
        ("the immortal life of henrietta lacks", "rebecca skloot", "4.7"),
        ("thinking in systems", "donella h. meadows", "4.6"),
        ("meditations", "marcus aurelius", "4.7"),
    )
)


def normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def lookup_known_rating(
    title: str, author: str, catalog: tuple[KnownBookEntry, ...] = KNOWN_BOOKS
) -> str | None:
    """Return the curated rating for *title*/*author*, or ``None``.

    Exact matches (both fields equal after normalisation) win over partial
    ones.  A partial match needs each field to contain the other's value in
    one direction or the other, e.g. "Dune (Deluxe Edition)" by
    "Frank Herbert" matches "dune"/"frank herbert".  Blank titles or authors
    never match: an empty string is contained in everything.
    """
    norm_title = normalize(title)
    norm_author = normalize(author)
    if not norm_title or not norm_author:
        return None

    for entry in catalog:
        if norm_title == entry.normalized_title and norm_author == entry.normalized_author:
            return entry.rating

    for entry in catalog:
        title_match = entry.normalized_title in norm_title or norm_title in entry.normalized_title
        author_match = (
            entry.normalized_author in norm_author or norm_author in entry.normalized_author
        )
        if title_match and author_match:
            return entry.rating

    return None


def format_rating(value: float) -> str:
    """Format *value* with one decimal, rounding halves away from zero."""
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def parse_rating(text: str, minimum: float = 1.0, maximum: float = 5.0) -> str | None:
    """Pull the first number out of a provider reply and range-check it.

    Returns the one-decimal string, or ``None`` when there is no number or
    it falls outside ``[minimum, maximum]``.
    """
    match = _NUMBER_PATTERN.search(text or "")
    if match is None:
        return None
    value = float(match.group(0))
    if not minimum <= value <= maximum:
        return None
    return format_rating(value)


def rolling_hash(text: str) -> int:
    """``h = h * 31 + unit`` over UTF-16 code units, wrapped to int32 each step."""
    h = 0
    # Lone surrogates hash as their own code unit, as they would in UTF-16.
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) % _INT32_MODULUS
        if h >= _INT32_SIGN_BIT:
            h -= _INT32_MODULUS
    return h


def estimate_rating(title: str, author: str) -> str:
    """Deterministic rating in ``[3.0, 4.9]`` for a title/author pair."""
    combined = f"{title}{author}".strip().lower()
    normalized = abs(rolling_hash(combined)) / _INT32_SIGN_BIT
    rating = _MIN_ESTIMATE + normalized * (_MAX_ESTIMATE - _MIN_ESTIMATE)
    return format_rating(rating)
