"""Per-provider quota admission gate.

Every provider call in the fallback chains is preceded by
:meth:`QuotaTracker.check_and_increment`.  The tracker keeps one
fixed-length window per :class:`ProviderKey`, plus an optional daily cap:

    * no window yet, or the window has elapsed -> start a new window at
      ``now`` with ``count = 0`` (likewise for the 24-hour day);
    * ``count < limit`` and, when capped, ``day_count < daily_limit``
      -> increment both counters and admit;
    * otherwise -> reject and leave both counters alone.

The daily cap guards against sustained spend that stays just under the
per-window limit all day long.

Concurrency model
-----------------
Each key has its own ``asyncio.Lock``.  The checks and the increments happen
inside one critical section, so two callers racing at ``count == limit - 1``
cannot both be admitted.  Different keys use different locks and never
wait on each other.

State is in-memory only.  It is created on first reference and lives for
the process; a restart resets every window and every daily count.  An
admitted call that is later cancelled keeps its increment.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Mapping

from shelfscan.models.quota import ProviderKey, QuotaLimit, QuotaState, QuotaUsage
from shelfscan.utils.logging import get_logger

# Usage thresholds (fraction of a limit) that trigger log alerts.
_WARN_USAGE_RATIO = 0.8
_CRITICAL_USAGE_RATIO = 0.9


class QuotaTracker:
    """Window-based admission counter, atomic per provider key.

    Parameters
    ----------
    limits:
        The budget for each key.  Every key passed to
        :meth:`check_and_increment` must appear here.
    clock:
        Monotonic time source in seconds.  Tests inject a fake clock to
        step across window and day boundaries.
    """

    def __init__(
        self,
        limits: Mapping[ProviderKey, QuotaLimit],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limits = dict(limits)
        self._clock = clock
        self._states: dict[ProviderKey, QuotaState] = {}
        self._locks: dict[ProviderKey, asyncio.Lock] = {}
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def check_and_increment(self, key: ProviderKey) -> bool:
        """Admit one call for *key* if its window and its day have room.

        Returns
        -------
        bool
            ``True`` if the call was admitted (both counts were incremented),
            ``False`` if either limit is reached (the counts are unchanged).
        """
        limit = self._limit_for(key)
        async with self._lock_for(key):
            state = self._current_state(key, limit, self._clock())

            if state.count >= state.limit:
                self._logger.warning(
                    "quota_exceeded",
                    key=key.value,
                    scope="window",
                    limit=state.limit,
                    window_seconds=state.window_seconds,
                )
                return False

            if state.daily_limit is not None and state.day_count >= state.daily_limit:
                self._logger.warning(
                    "quota_exceeded",
                    key=key.value,
                    scope="daily",
                    limit=state.daily_limit,
                )
                return False

            state.count += 1
            state.day_count += 1
            count, day_count = state.count, state.day_count

        self._check_for_alerts(key, "window", count, limit.limit)
        if limit.daily_limit is not None:
            self._check_for_alerts(key, "daily", day_count, limit.daily_limit)
        return True

    async def get_usage_stats(self) -> dict[str, QuotaUsage]:
        """Snapshot of every configured key's current window and day."""
        stats: dict[str, QuotaUsage] = {}
        for key, limit in self._limits.items():
            async with self._lock_for(key):
                now = self._clock()
                state = self._states.get(key)
                count, remaining, day_count = 0, limit.window_seconds, 0
                if state is not None:
                    if not state.is_expired(now):
                        count = state.count
                        remaining = max(0.0, state.window_start + state.window_seconds - now)
                    if not state.is_day_expired(now):
                        day_count = state.day_count
            within_daily = limit.daily_limit is None or day_count < limit.daily_limit
            stats[key.value] = QuotaUsage(
                key=key,
                count=count,
                limit=limit.limit,
                window_seconds=limit.window_seconds,
                window_remaining_seconds=round(remaining, 3),
                daily_count=day_count,
                daily_limit=limit.daily_limit,
                within_limit=count < limit.limit and within_daily,
            )
        return stats

    async def reset(self, key: ProviderKey | None = None) -> None:
        """Drop the window and day for *key*, or for every key when ``None``."""
        keys = [key] if key is not None else list(self._states)
        for k in keys:
            async with self._lock_for(k):
                self._states.pop(k, None)
            self._logger.info("quota_reset", key=k.value)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _limit_for(self, key: ProviderKey) -> QuotaLimit:
        try:
            return self._limits[key]
        except KeyError:
            raise KeyError(f"No quota limit configured for {key.value!r}") from None

    def _lock_for(self, key: ProviderKey) -> asyncio.Lock:
        # dict.setdefault runs without an await, so two coroutines on the
        # same loop always end up sharing the same lock object.
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks.setdefault(key, asyncio.Lock())
        return lock

    def _current_state(self, key: ProviderKey, limit: QuotaLimit, now: float) -> QuotaState:
        """Return *key*'s state with any elapsed window or day restarted at *now*.

        Caller must hold the key's lock.
        """
        state = self._states.get(key)
        if state is None:
            state = QuotaState(
                window_start=now,
                count=0,
                limit=limit.limit,
                window_seconds=limit.window_seconds,
                day_start=now,
                daily_limit=limit.daily_limit,
            )
            self._states[key] = state
            return state
        if state.is_expired(now):
            state.start_window(now)
        if state.is_day_expired(now):
            state.start_day(now)
        return state

    def _check_for_alerts(self, key: ProviderKey, scope: str, count: int, limit: int) -> None:
        if limit <= 0:
            return
        ratio = count / limit
        if ratio >= _CRITICAL_USAGE_RATIO:
            self._logger.error(
                "quota_nearly_exhausted",
                key=key.value,
                scope=scope,
                count=count,
                limit=limit,
                usage_percent=round(ratio * 100, 1),
            )
        elif ratio >= _WARN_USAGE_RATIO:
            self._logger.warning(
                "quota_high_usage",
                key=key.value,
                scope=scope,
                count=count,
                limit=limit,
                usage_percent=round(ratio * 100, 1),
            )
