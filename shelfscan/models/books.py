"""Book-domain models: shelf analysis results, annotations, catalog rows.

All models use frozen config; a result handed to a caller is never
mutated afterwards.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AnalysisResult(BaseModel):
    """Titles read from a bookshelf photo.

    ``book_titles`` keeps the provider's order.  Serialises with the
    camelCase keys clients expect (``bookTitles`` / ``isBookshelf``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    book_titles: list[str] = Field(default_factory=list, alias="bookTitles")
    is_bookshelf: bool = Field(default=False, alias="isBookshelf")

    @classmethod
    def empty(cls) -> AnalysisResult:
        return cls(book_titles=[], is_bookshelf=False)


class VisionTitlesPayload(BaseModel):
    """The JSON object the primary vision model is asked to return.

    Both keys are optional; a missing or null value falls back to an empty
    list / ``False`` when converted to an :class:`AnalysisResult`.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    bookTitles: list[str] | None = None  # noqa: N815 - provider wire format
    isBookshelf: bool | None = None  # noqa: N815 - provider wire format

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            book_titles=list(self.bookTitles or []),
            is_bookshelf=bool(self.isBookshelf or False),
        )


class ImageLabel(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    score: float = 0.0


class ImageAnnotation(BaseModel):
    """Raw OCR text and labels returned by the secondary vision provider."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    labels: list[ImageLabel] = Field(default_factory=list)


class KnownBookEntry(BaseModel):
    """One curated ``(title, author) -> rating`` row, stored normalised."""

    model_config = ConfigDict(frozen=True)

    normalized_title: str
    normalized_author: str
    rating: str


class BookRecord(BaseModel):
    """A book as seen by the enhancer: rating and summary may be missing."""

    model_config = ConfigDict(frozen=True)

    title: str
    author: str
    isbn: str | None = None
    rating: str | None = None
    summary: str | None = None
    enhanced: bool = False
