"""Generic ordered fallback chain.

Architecture: Fallback Chain Pattern
------------------------------------
A chain is a list of capability-uniform links plus a terminal default.
Each link's :meth:`ChainLink.attempt` returns either
:class:`~shelfscan.models.attempt.Resolved` (stop, this is the answer) or
:class:`~shelfscan.models.attempt.Advance` (try the next link, and here is
why).  When every link advances, the terminal default computes a value
offline.  Adding, removing or reordering providers is a change to the list
passed in, not to any control flow.

The runner is total: an exception that escapes a link is classified and
treated as an advance.  Cancellation (``asyncio.CancelledError``) is not
an ``Exception`` and still propagates to the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, Sequence, TypeVar

from shelfscan.models.attempt import (
    Advance,
    AttemptResult,
    ChainOutcome,
    Classification,
    Resolved,
    SkippedLink,
)
from shelfscan.models.quota import ProviderKey
from shelfscan.services.quota_tracker import QuotaTracker
from shelfscan.utils.error_classifier import classify_provider_error
from shelfscan.utils.errors import ShelfScanError
from shelfscan.utils.logging import get_logger

_Req = TypeVar("_Req")
_V = TypeVar("_V")


class ChainLink(ABC, Generic[_Req, _V]):
    """One step of a fallback chain."""

    name: str = "link"

    @abstractmethod
    async def attempt(self, request: _Req) -> AttemptResult[_V]:
        """Try to resolve *request*.  Should not raise, but may."""


class ProviderLink(ChainLink[_Req, _V]):
    """A link that calls one external provider behind the quota gate.

    Subclasses implement :meth:`unavailable_reason` (configuration check,
    no network) and :meth:`invoke` (the provider call plus parsing).  The
    order is always: configured? -> quota admitted? -> call.  An
    unconfigured provider therefore never consumes quota.
    """

    def __init__(self, name: str, quota_key: ProviderKey, quota: QuotaTracker) -> None:
        self.name = name
        self._quota_key = quota_key
        self._quota = quota

    @abstractmethod
    def unavailable_reason(self) -> Classification | None:
        """``None`` when the provider may be called, else why it may not."""

    @abstractmethod
    async def invoke(self, request: _Req) -> AttemptResult[_V]:
        """Call the provider and parse its answer."""

    async def attempt(self, request: _Req) -> AttemptResult[_V]:
        reason = self.unavailable_reason()
        if reason is not None:
            return Advance(reason)
        if not await self._quota.check_and_increment(self._quota_key):
            return Advance(Classification.QUOTA_EXCEEDED, self._quota_key.value)
        try:
            return await self.invoke(request)
        except ShelfScanError as exc:
            return Advance(classify_provider_error(exc), str(exc))


class FallbackChain(Generic[_Req, _V]):
    """Runs links in order until one resolves, else the terminal default.

    Parameters
    ----------
    name:
        Chain name used in log events (e.g. ``"rating"``).
    links:
        Links in priority order.
    terminal:
        Offline function producing the default value.  Must not raise.
    terminal_name:
        Reported as ``ChainOutcome.source`` when the terminal default is used.
    """

    def __init__(
        self,
        name: str,
        links: Sequence[ChainLink[_Req, _V]],
        terminal: Callable[[_Req], _V],
        terminal_name: str = "default",
    ) -> None:
        self._name = name
        self._links = list(links)
        self._terminal = terminal
        self._terminal_name = terminal_name
        self._logger = get_logger(__name__)

    @property
    def link_names(self) -> list[str]:
        return [link.name for link in self._links]

    async def run(self, request: _Req) -> ChainOutcome[_V]:
        trail: list[SkippedLink] = []
        for link in self._links:
            try:
                result = await link.attempt(request)
            except Exception as exc:
                result = Advance(classify_provider_error(exc), f"{type(exc).__name__}: {exc}")

            if isinstance(result, Resolved):
                return self._resolve(result.value, link.name, trail)

            trail.append(SkippedLink(link.name, result.classification, result.detail))
            self._logger.info(
                "chain_link_skipped",
                chain=self._name,
                link=link.name,
                classification=result.classification.value,
                detail=result.detail or None,
            )

        return self._resolve(self._terminal(request), self._terminal_name, trail)

    def _resolve(self, value: _V, source: str, trail: list[SkippedLink]) -> ChainOutcome[_V]:
        self._logger.info(
            "chain_resolved",
            chain=self._name,
            source=source,
            skipped=[s.link for s in trail],
        )
        return ChainOutcome(value=value, source=source, trail=tuple(trail))
