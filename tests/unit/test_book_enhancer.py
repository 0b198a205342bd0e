"""Unit tests for BookEnhancer batch enrichment."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from shelfscan.models.books import BookRecord
from shelfscan.services.book_enhancer import BookEnhancer
from shelfscan.services.text_chain import TextFallbackChain


def _text_chain(rating: str = "4.1", summary: str = "A summary long enough to keep.") -> MagicMock:
    chain = MagicMock(spec=TextFallbackChain)
    chain.get_rating = AsyncMock(return_value=rating)
    chain.get_summary = AsyncMock(return_value=summary)
    return chain


class TestBookEnhancer:
    @pytest.mark.asyncio
    async def test_fills_missing_fields(self) -> None:
        chain = _text_chain()
        enhancer = BookEnhancer(chain)

        [book] = await enhancer.enhance_books([BookRecord(title="Dune", author="Frank Herbert")])

        assert book.rating == "4.1"
        assert book.summary == "A summary long enough to keep."
        assert book.enhanced is True

    @pytest.mark.asyncio
    async def test_existing_fields_are_kept(self) -> None:
        chain = _text_chain()
        enhancer = BookEnhancer(chain)
        original = BookRecord(title="Emma", author="Jane Austen", rating="4.0", summary="Already here.")

        [book] = await enhancer.enhance_books([original])

        assert book == original
        chain.get_rating.assert_not_awaited()
        chain.get_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_only_missing_summary_requested(self) -> None:
        chain = _text_chain()
        enhancer = BookEnhancer(chain)

        book = await enhancer.enhance_book(BookRecord(title="Emma", author="Jane Austen", rating="4.0"))

        assert book.rating == "4.0"
        assert book.enhanced is True
        chain.get_rating.assert_not_awaited()
        chain.get_summary.assert_awaited_once_with("Emma", "Jane Austen")

    @pytest.mark.asyncio
    async def test_failure_isolated_to_one_record(self) -> None:
        chain = _text_chain()

        async def rating(title: str, author: str) -> str:
            if title == "Broken":
                raise RuntimeError("unexpected")
            return "3.9"

        chain.get_rating = AsyncMock(side_effect=rating)
        enhancer = BookEnhancer(chain)

        books = await enhancer.enhance_books([
            BookRecord(title="Fine", author="A"),
            BookRecord(title="Broken", author="B"),
            BookRecord(title="Also Fine", author="C"),
        ])

        assert [b.title for b in books] == ["Fine", "Broken", "Also Fine"]
        assert [b.enhanced for b in books] == [True, False, True]
        assert books[1].rating is None

    @pytest.mark.asyncio
    async def test_empty_batch(self) -> None:
        assert await BookEnhancer(_text_chain()).enhance_books([]) == []

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self) -> None:
        in_flight = 0
        peak = 0

        async def rating(title: str, author: str) -> str:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return "4.0"

        chain = _text_chain()
        chain.get_rating = AsyncMock(side_effect=rating)
        enhancer = BookEnhancer(chain, concurrency=2)

        await enhancer.enhance_books(
            [BookRecord(title=f"Book {i}", author="X", summary="s") for i in range(8)]
        )
        assert peak == 2
