"""Integration tests for TextFallbackChain with fake providers."""

from __future__ import annotations

import json
import re

import pytest

from shelfscan.models.attempt import Classification
from shelfscan.services.book_catalog import estimate_rating
from shelfscan.services.quota_tracker import QuotaTracker
from shelfscan.services.text_chain import TextFallbackChain, summary_template
from shelfscan.utils.errors import LLMError, ProviderUnavailableError, RateLimitError
from tests.fakes import make_llm, make_quota, make_registry

_SUMMARY = "A sweeping tale of politics, ecology and prophecy on a desert planet."


def _chain(primary=None, secondary=None, quota: QuotaTracker | None = None) -> TextFallbackChain:
    registry = make_registry(primary=primary, secondary=secondary)
    return TextFallbackChain(registry, quota or make_quota())


# ======================================================================
# Ratings
# ======================================================================


class TestRating:
    @pytest.mark.asyncio
    async def test_catalog_beats_providers(self) -> None:
        primary = make_llm("primary", reply="2.0")
        chain = _chain(primary)

        outcome = await chain.resolve_rating("Dune", "Frank Herbert")

        assert outcome.value == "4.7"
        assert outcome.source == "catalog"
        primary.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_primary_reply_is_normalised(self) -> None:
        primary = make_llm("primary", reply="Rating: 4.25")
        outcome = await _chain(primary).resolve_rating("Infinite Jest", "David Foster Wallace")
        assert outcome.value == "4.3"
        assert outcome.source == "primary-text"

    @pytest.mark.asyncio
    async def test_rating_prompt_parameters(self) -> None:
        primary = make_llm("primary", reply="4.0")
        await _chain(primary).get_rating("Infinite Jest", "David Foster Wallace")
        args, kwargs = primary.complete.call_args
        assert "Infinite Jest" in args[1]
        assert kwargs == {"temperature": 0.5, "max_tokens": 10}

    @pytest.mark.asyncio
    async def test_out_of_range_primary_falls_to_secondary(self) -> None:
        primary = make_llm("primary", reply="7.5")
        secondary = make_llm("secondary", vision=False, reply="3.8")

        outcome = await _chain(primary, secondary).resolve_rating("Infinite Jest", "DFW")

        assert outcome.value == "3.8"
        assert outcome.source == "secondary-text"
        assert outcome.trail[0].classification is Classification.MALFORMED

    @pytest.mark.asyncio
    async def test_all_fail_gives_estimator(self) -> None:
        primary = make_llm("primary", raises=LLMError("timeout"))
        secondary = make_llm("secondary", raises=RateLimitError())

        outcome = await _chain(primary, secondary).resolve_rating("Infinite Jest", "DFW")

        assert outcome.value == estimate_rating("Infinite Jest", "DFW")
        assert outcome.source == "estimator"
        assert [s.classification for s in outcome.trail] == [
            Classification.PROVIDER_ERROR,
            Classification.RATE_LIMITED,
        ]

    @pytest.mark.asyncio
    async def test_unreachable_primary_falls_to_secondary(self) -> None:
        primary = make_llm("primary", raises=ProviderUnavailableError("OpenAI unreachable"))
        secondary = make_llm("secondary", vision=False, reply="3.8")

        outcome = await _chain(primary, secondary).resolve_rating("Infinite Jest", "DFW")

        assert outcome.value == "3.8"
        assert outcome.source == "secondary-text"
        assert outcome.trail[0].classification is Classification.PROVIDER_ERROR

    @pytest.mark.asyncio
    async def test_lone_surrogate_title_still_resolves(self) -> None:
        title = json.loads('"\\ud83d Broken Emoji"')
        chain = _chain()

        outcome = await chain.resolve_rating(title, "Someone")

        assert outcome.source == "estimator"
        assert outcome.value == estimate_rating(title, "Someone")
        assert re.fullmatch(r"\d\.\d", outcome.value)
        assert (await chain.get_summary(title, "Someone")) == summary_template(title, "Someone")

    @pytest.mark.asyncio
    async def test_nothing_configured_is_deterministic(self) -> None:
        chain = _chain()
        first = await chain.get_rating("The Name of the Wind", "Patrick Rothfuss")
        second = await chain.get_rating("The Name of the Wind", "Patrick Rothfuss")
        assert first == second
        assert re.fullmatch(r"\d\.\d", first)
        assert 3.0 <= float(first) <= 4.9

    @pytest.mark.asyncio
    async def test_primary_quota_exhausted_goes_to_secondary(self) -> None:
        primary = make_llm("primary", reply="4.0")
        secondary = make_llm("secondary", vision=False, reply="3.5")
        quota = make_quota(primary_text=0)

        outcome = await _chain(primary, secondary, quota).resolve_rating("Infinite Jest", "DFW")

        primary.complete.assert_not_awaited()
        secondary.complete.assert_awaited_once()
        assert outcome.value == "3.5"
        assert outcome.trail[0].classification is Classification.QUOTA_EXCEEDED

    @pytest.mark.asyncio
    async def test_unconfigured_primary_spends_no_quota(self) -> None:
        secondary = make_llm("secondary", vision=False, reply="3.5")
        quota = make_quota()

        await _chain(secondary=secondary, quota=quota).get_rating("Infinite Jest", "DFW")

        stats = await quota.get_usage_stats()
        assert stats["primary-text"].count == 0
        assert stats["secondary-text"].count == 1

    @pytest.mark.asyncio
    async def test_secondary_budget_is_enforced(self) -> None:
        secondary = make_llm("secondary", vision=False, reply="3.5")
        chain = _chain(secondary=secondary, quota=make_quota(secondary_text=2))

        sources = [
            (await chain.resolve_rating(f"Unlisted {i}", "Author")).source for i in range(4)
        ]

        assert sources == ["secondary-text", "secondary-text", "estimator", "estimator"]
        assert secondary.complete.await_count == 2


# ======================================================================
# Summaries
# ======================================================================


class TestSummary:
    @pytest.mark.asyncio
    async def test_primary_summary(self) -> None:
        primary = make_llm("primary", reply=f"  {_SUMMARY}\n")
        outcome = await _chain(primary).resolve_summary("Dune", "Frank Herbert")
        assert outcome.value == _SUMMARY
        assert outcome.source == "primary-text"

    @pytest.mark.asyncio
    async def test_catalog_does_not_apply_to_summaries(self) -> None:
        primary = make_llm("primary", reply=_SUMMARY)
        await _chain(primary).get_summary("Dune", "Frank Herbert")
        primary.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_short_reply_falls_to_secondary(self) -> None:
        primary = make_llm("primary", reply="Too short.")
        secondary = make_llm("secondary", vision=False, reply=_SUMMARY)

        outcome = await _chain(primary, secondary).resolve_summary("Dune", "Frank Herbert")

        assert outcome.value == _SUMMARY
        assert outcome.source == "secondary-text"
        assert outcome.trail[0].classification is Classification.MALFORMED

    @pytest.mark.asyncio
    async def test_summary_boundary_length(self) -> None:
        primary = make_llm("primary", reply="x" * 20)
        outcome = await _chain(primary).resolve_summary("Dune", "Frank Herbert")
        assert outcome.source == "primary-text"

    @pytest.mark.asyncio
    async def test_template_when_all_fail(self) -> None:
        primary = make_llm("primary", reply="")
        secondary = make_llm("secondary", raises=LLMError("503"))

        summary = await _chain(primary, secondary).get_summary("Emma", "Jane Austen")

        assert summary == summary_template("Emma", "Jane Austen")
        assert summary == '"Emma" by Jane Austen is a noteworthy book in its genre.'

    @pytest.mark.asyncio
    async def test_summary_prompt_parameters(self) -> None:
        primary = make_llm("primary", reply=_SUMMARY)
        await _chain(primary).get_summary("Emma", "Jane Austen")
        _, kwargs = primary.complete.call_args
        assert kwargs == {"temperature": 0.7, "max_tokens": 250}
