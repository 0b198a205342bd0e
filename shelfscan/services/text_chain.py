"""Rating and summary generation with provider fallback.

Each operation walks the same ladder:

    known catalog (ratings only)
      -> primary LLM   (OpenAI, quota key ``primary-text``)
      -> secondary LLM (Anthropic, quota key ``secondary-text``)
      -> offline default (hash estimator / fixed template)

A provider is skipped when it has no credential, when the quota tracker
refuses the call, when the call fails, or when the reply does not pass the
parse contract (a number in ``[1.0, 5.0]`` for ratings, at least 20
characters for summaries).  Both public operations always return a string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from shelfscan.interfaces.llm_provider import ILLMProvider
from shelfscan.models.attempt import Advance, AttemptResult, ChainOutcome, Classification, Resolved
from shelfscan.models.quota import ProviderKey
from shelfscan.providers.registry import ProviderRegistry
from shelfscan.services.book_catalog import estimate_rating, lookup_known_rating, parse_rating
from shelfscan.services.fallback_chain import FallbackChain, ProviderLink
from shelfscan.services.quota_tracker import QuotaTracker
from shelfscan.utils.logging import get_logger

MIN_SUMMARY_LENGTH = 20

_RATING_SYSTEM_PROMPT = (
    "You are a literary expert with comprehensive knowledge of books. When asked "
    "about a book, provide only a numeric rating between 1.0 and 5.0 with one "
    "decimal place. Do not include any other text."
)

_SUMMARY_SYSTEM_PROMPT = (
    "You are a literary expert with comprehensive knowledge of books. Provide "
    "concise, engaging, and accurate summaries of books without revealing major "
    "spoilers."
)


@dataclass(frozen=True)
class BookQuery:
    title: str
    author: str


def _rating_prompt(query: BookQuery) -> str:
    return (
        f'Based on critical reception and reader reviews, what would be an accurate '
        f'rating for "{query.title}" by {query.author}? Respond with just a number '
        f"between 1.0 and 5.0 with one decimal place."
    )


def _summary_prompt(query: BookQuery) -> str:
    return (
        f'Please provide a concise summary (about 100-150 words) of the book '
        f'"{query.title}" by {query.author}. Focus on the main themes and premise '
        f"without spoiling major plot points."
    )


def _parse_summary(reply: str) -> str | None:
    summary = (reply or "").strip()
    return summary if len(summary) >= MIN_SUMMARY_LENGTH else None


def summary_template(title: str, author: str) -> str:
    return f'"{title}" by {author} is a noteworthy book in its genre.'


class LLMTextLink(ProviderLink[BookQuery, str]):
    """Ask one LLM a constrained question and validate the reply."""

    def __init__(
        self,
        name: str,
        quota_key: ProviderKey,
        quota: QuotaTracker,
        provider: Callable[[], ILLMProvider],
        system_prompt: str,
        user_prompt: Callable[[BookQuery], str],
        parse: Callable[[str], str | None],
        temperature: float,
        max_tokens: int,
    ) -> None:
        super().__init__(name, quota_key, quota)
        self._provider = provider
        self._system_prompt = system_prompt
        self._user_prompt = user_prompt
        self._parse = parse
        self._temperature = temperature
        self._max_tokens = max_tokens

    def unavailable_reason(self) -> Classification | None:
        if not self._provider().is_available():
            return Classification.UNCONFIGURED
        return None

    async def invoke(self, request: BookQuery) -> AttemptResult[str]:
        reply = await self._provider().complete(
            self._system_prompt,
            self._user_prompt(request),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        parsed = self._parse(reply)
        if parsed is None:
            return Advance(Classification.MALFORMED, (reply or "")[:80])
        return Resolved(parsed)


class TextFallbackChain:
    """Public entry point for ratings and summaries.

    Parameters
    ----------
    registry:
        Source of the primary and secondary LLM adapters (built lazily).
    quota:
        Shared quota tracker; the same instance the vision chain uses.
    """

    def __init__(self, registry: ProviderRegistry, quota: QuotaTracker) -> None:
        self._logger = get_logger(__name__)
        self._rating_chain: FallbackChain[BookQuery, str] = FallbackChain(
            "rating",
            links=self._provider_links(
                registry, quota, _RATING_SYSTEM_PROMPT, _rating_prompt, parse_rating,
                temperature=0.5, max_tokens=10,
            ),
            terminal=lambda q: estimate_rating(q.title, q.author),
            terminal_name="estimator",
        )
        self._summary_chain: FallbackChain[BookQuery, str] = FallbackChain(
            "summary",
            links=self._provider_links(
                registry, quota, _SUMMARY_SYSTEM_PROMPT, _summary_prompt, _parse_summary,
                temperature=0.7, max_tokens=250,
            ),
            terminal=lambda q: summary_template(q.title, q.author),
            terminal_name="template",
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_rating(self, title: str, author: str) -> str:
        """Rating string in ``d.d`` form.  Never raises."""
        return (await self.resolve_rating(title, author)).value

    async def get_summary(self, title: str, author: str) -> str:
        """Non-empty summary text.  Never raises."""
        return (await self.resolve_summary(title, author)).value

    async def resolve_rating(self, title: str, author: str) -> ChainOutcome[str]:
        """Like :meth:`get_rating`, but also reports which source answered."""
        known = lookup_known_rating(title, author)
        if known is not None:
            self._logger.info("rating_from_catalog", title=title, author=author, rating=known)
            return ChainOutcome(value=known, source="catalog")
        return await self._rating_chain.run(BookQuery(title, author))

    async def resolve_summary(self, title: str, author: str) -> ChainOutcome[str]:
        return await self._summary_chain.run(BookQuery(title, author))

    @staticmethod
    def _provider_links(
        registry: ProviderRegistry,
        quota: QuotaTracker,
        system_prompt: str,
        user_prompt: Callable[[BookQuery], str],
        parse: Callable[[str], str | None],
        temperature: float,
        max_tokens: int,
    ) -> list[LLMTextLink]:
        """Primary then secondary LLM, both under the same prompt/parse contract."""
        return [
            LLMTextLink(
                name=name,
                quota_key=quota_key,
                quota=quota,
                provider=provider,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                parse=parse,
                temperature=temperature,
                max_tokens=max_tokens,
            )
            for name, quota_key, provider in (
                ("primary-text", ProviderKey.PRIMARY_TEXT, registry.primary_llm),
                ("secondary-text", ProviderKey.SECONDARY_TEXT, registry.secondary_llm),
            )
        ]
