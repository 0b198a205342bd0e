"""Fill in missing ratings and summaries for a batch of books.

Books already carrying a rating or summary keep it; only the missing
fields are requested from the text chain.  Records are processed
concurrently, bounded by a semaphore, and a failure on one record never
affects the others: that record comes back unchanged with
``enhanced=False``.
"""

from __future__ import annotations

import asyncio

from shelfscan.models.books import BookRecord
from shelfscan.services.text_chain import TextFallbackChain
from shelfscan.utils.concurrency import DEFAULT_CONCURRENCY, throttled_gather
from shelfscan.utils.logging import get_logger


class BookEnhancer:
    def __init__(self, text_chain: TextFallbackChain, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        self._text_chain = text_chain
        self._concurrency = concurrency
        self._logger = get_logger(__name__)

    async def enhance_books(self, books: list[BookRecord]) -> list[BookRecord]:
        """Return one record per input, in input order."""
        if not books:
            return []

        semaphore = asyncio.Semaphore(self._concurrency)
        results = await throttled_gather(
            [self._enhance_one(book) for book in books],
            semaphore=semaphore,
            return_exceptions=True,
        )

        enhanced: list[BookRecord] = []
        for book, result in zip(books, results):
            if isinstance(result, BaseException):
                self._logger.warning("book_enhance_failed", title=book.title, error=str(result))
                enhanced.append(book.model_copy(update={"enhanced": False}))
            else:
                enhanced.append(result)

        self._logger.info(
            "books_enhanced",
            total=len(books),
            enhanced=sum(1 for b in enhanced if b.enhanced),
        )
        return enhanced

    async def enhance_book(self, book: BookRecord) -> BookRecord:
        [result] = await self.enhance_books([book])
        return result

    async def _enhance_one(self, book: BookRecord) -> BookRecord:
        update: dict = {}
        if not book.rating:
            update["rating"] = await self._text_chain.get_rating(book.title, book.author)
        if not book.summary:
            update["summary"] = await self._text_chain.get_summary(book.title, book.author)
        if not update:
            return book
        update["enhanced"] = True
        return book.model_copy(update=update)
