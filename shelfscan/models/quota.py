"""Quota bookkeeping models.

Every external provider call is admitted (or refused) by the quota
tracker before it is made.  Each :class:`ProviderKey` owns one fixed-length
window and, optionally, a 24-hour daily cap on top of it; keys never share
counters, so exhausting the primary vision budget leaves the text budgets
untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Length of the daily cap's window, measured on the tracker's clock.
DAY_SECONDS = 24 * 60 * 60


class ProviderKey(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Identifier of a provider's quota bucket."""

    PRIMARY_VISION = "primary-vision"        # OpenAI vision model
    SECONDARY_VISION = "secondary-vision"    # Google Cloud Vision OCR + labels
    PRIMARY_TEXT = "primary-text"            # OpenAI text model
    SECONDARY_TEXT = "secondary-text"        # Anthropic text model


class QuotaLimit(BaseModel):
    """Admission budget for one key.

    ``limit`` calls per ``window_seconds``, and at most ``daily_limit``
    calls per day when a daily cap is set (``None`` means no cap).
    """

    model_config = ConfigDict(frozen=True)

    limit: int = Field(ge=0)
    window_seconds: float = Field(gt=0)
    daily_limit: int | None = Field(default=None, ge=0)


@dataclass
class QuotaState:
    """Mutable window state for one key.

    Only the quota tracker touches instances of this class, and only while
    holding that key's lock.  ``0 <= count <= limit`` always holds, and so
    does ``day_count <= daily_limit`` when a daily cap is set.
    """

    window_start: float
    count: int
    limit: int
    window_seconds: float
    day_start: float
    day_count: int = 0
    daily_limit: int | None = None

    def is_expired(self, now: float) -> bool:
        return now >= self.window_start + self.window_seconds

    def is_day_expired(self, now: float) -> bool:
        return now >= self.day_start + DAY_SECONDS

    def start_window(self, now: float) -> None:
        self.window_start = now
        self.count = 0

    def start_day(self, now: float) -> None:
        self.day_start = now
        self.day_count = 0


class QuotaUsage(BaseModel):
    """Read-only snapshot of one key's current window, for stats output."""

    model_config = ConfigDict(frozen=True)

    key: ProviderKey
    count: int
    limit: int
    window_seconds: float
    window_remaining_seconds: float
    daily_count: int
    daily_limit: int | None
    within_limit: bool
