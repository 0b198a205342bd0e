"""Bookshelf photo analysis with provider fallback.

Provider order:

    1. OpenAI vision model (quota key ``primary-vision``), asked for a JSON
       object listing only the titles it can read with full certainty.
    2. Google Cloud Vision OCR + labels (quota key ``secondary-vision``);
       candidate titles are picked out of the raw text by shape.
    3. Empty result: no titles, not a bookshelf.

A photo payload that is shorter than 100 characters once any data-URI
prefix is removed is rejected up front: no provider is called and no quota
is spent.  :meth:`VisionFallbackChain.analyze_bookshelf_image` never
raises.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import ValidationError

from shelfscan.config.settings import Settings
from shelfscan.models.attempt import Advance, AttemptResult, ChainOutcome, Classification, Resolved
from shelfscan.models.books import AnalysisResult, ImageAnnotation, VisionTitlesPayload
from shelfscan.models.quota import ProviderKey
from shelfscan.providers.registry import ProviderRegistry
from shelfscan.services.fallback_chain import FallbackChain, ProviderLink
from shelfscan.services.quota_tracker import QuotaTracker
from shelfscan.utils.image_payload import detect_media_type, is_viable_payload, strip_data_uri
from shelfscan.utils.logging import get_logger

# Line-shape filter for OCR text: a plausible spine title.
_MIN_TITLE_WORDS = 2
_MAX_TITLE_WORDS = 10
_MAX_TITLE_CHARS = 50

_BOOKSHELF_LABEL_TERMS = ("book", "shelf", "library")

_VISION_SYSTEM_PROMPT = (
    "You are a precise book identification expert specializing in reading book "
    "spines on bookshelves. Your ONLY task is to identify the exact titles of books "
    "visible in the image. Never invent or guess titles. Only include titles where "
    "you can clearly read the complete title from the spine or cover. If you're "
    "uncertain about any title, exclude it completely."
)

_VISION_PROMPT = """\
This is a photo of a bookshelf. I need you to identify ONLY the books that are \
clearly visible and legible in this image. Read the text directly from the book \
spines or covers.

Your response should be a JSON object with these fields:

1. 'bookTitles': An array containing ONLY the exact titles of books you can read \
with 100% certainty from the image. Do not include partial or guessed titles.

2. 'isBookshelf': A boolean (true) if this shows multiple books on a shelf.

IMPORTANT: Do not try to be helpful by guessing titles! Only include titles that \
you can read directly and completely from the image. Read each spine carefully - \
do not include books where you can only make out a few letters. For books with \
series names, include the complete title as shown on the spine."""


@dataclass(frozen=True)
class ShelfImage:
    """Bare base64 image content plus its MIME type."""

    content: str
    media_type: str


def extract_candidate_titles(text: str) -> list[str]:
    """Pick lines out of OCR text that are shaped like book titles.

    A candidate has 2 to 10 words and at most 50 characters once trimmed.
    Order follows the OCR text.
    """
    candidates: list[str] = []
    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue
        words = line.split()
        if _MIN_TITLE_WORDS <= len(words) <= _MAX_TITLE_WORDS and len(line) <= _MAX_TITLE_CHARS:
            candidates.append(line)
    return candidates


def labels_indicate_bookshelf(annotation: ImageAnnotation) -> bool:
    return any(
        term in label.description.lower()
        for label in annotation.labels
        for term in _BOOKSHELF_LABEL_TERMS
    )


class PrimaryVisionLink(ProviderLink[ShelfImage, AnalysisResult]):
    """Vision LLM reading titles directly off the spines."""

    def __init__(self, registry: ProviderRegistry, quota: QuotaTracker, settings: Settings) -> None:
        super().__init__("primary-vision", ProviderKey.PRIMARY_VISION, quota)
        self._registry = registry
        self._settings = settings

    def unavailable_reason(self) -> Classification | None:
        if not self._settings.enable_openai:
            return Classification.DISABLED
        provider = self._registry.primary_llm()
        if not provider.is_available() or not provider.supports_vision():
            return Classification.UNCONFIGURED
        return None

    async def invoke(self, request: ShelfImage) -> AttemptResult[AnalysisResult]:
        reply = await self._registry.primary_llm().vision_extract(
            image_base64=request.content,
            media_type=request.media_type,
            system_prompt=_VISION_SYSTEM_PROMPT,
            prompt=_VISION_PROMPT,
            json_response=True,
        )
        try:
            payload = VisionTitlesPayload.model_validate_json(reply)
        except ValidationError as exc:
            return Advance(Classification.MALFORMED, f"{exc.error_count()} validation error(s)")
        return Resolved(payload.to_result())


class SecondaryVisionLink(ProviderLink[ShelfImage, AnalysisResult]):
    """OCR + label detection, with titles derived from line shape."""

    def __init__(self, registry: ProviderRegistry, quota: QuotaTracker) -> None:
        super().__init__("secondary-vision", ProviderKey.SECONDARY_VISION, quota)
        self._registry = registry

    def unavailable_reason(self) -> Classification | None:
        if not self._registry.image_annotator().is_available():
            return Classification.UNCONFIGURED
        return None

    async def attempt(self, request: ShelfImage) -> AttemptResult[AnalysisResult]:
        # Nothing worth sending: answer "empty" without touching quota.
        if not is_viable_payload(request.content):
            return Resolved(AnalysisResult.empty())
        return await super().attempt(request)

    async def invoke(self, request: ShelfImage) -> AttemptResult[AnalysisResult]:
        annotation = await self._registry.image_annotator().annotate(request.content)
        return Resolved(
            AnalysisResult(
                book_titles=extract_candidate_titles(annotation.text),
                is_bookshelf=labels_indicate_bookshelf(annotation),
            )
        )


class VisionFallbackChain:
    """Public entry point for bookshelf photo analysis."""

    def __init__(self, registry: ProviderRegistry, quota: QuotaTracker) -> None:
        self._logger = get_logger(__name__)
        self._chain: FallbackChain[ShelfImage, AnalysisResult] = FallbackChain(
            "vision",
            links=[
                PrimaryVisionLink(registry, quota, registry.settings),
                SecondaryVisionLink(registry, quota),
            ],
            terminal=lambda _image: AnalysisResult.empty(),
            terminal_name="empty",
        )

    async def analyze_bookshelf_image(self, image: str | None) -> AnalysisResult:
        """Titles read from *image* (base64, optionally a data URI).  Never raises."""
        return (await self.resolve(image)).value

    async def resolve(self, image: str | None) -> ChainOutcome[AnalysisResult]:
        """Like :meth:`analyze_bookshelf_image`, but also reports the source."""
        content = strip_data_uri(image)
        if not is_viable_payload(content):
            self._logger.info("image_payload_too_short", length=len(content))
            return ChainOutcome(value=AnalysisResult.empty(), source="guard")

        request = ShelfImage(content=content, media_type=detect_media_type(image or ""))
        return await self._chain.run(request)
