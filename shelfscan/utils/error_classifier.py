"""Map provider exceptions onto a :class:`Classification`.

Adapters already raise typed errors (:class:`RateLimitError` for a 429,
:class:`MalformedResponseError` for an unusable body).  Anything else that
reaches a chain is inspected by message as a last resort, because some
SDK errors only say "quota exceeded" in their text.
"""

from __future__ import annotations

import re

from shelfscan.models.attempt import Classification
from shelfscan.utils.errors import ConfigurationError, MalformedResponseError, RateLimitError

_RATE_LIMIT_PATTERN = re.compile(
    r"rate[ _-]?limit|\b429\b|too many requests|quota exceeded",
    re.IGNORECASE,
)


def looks_rate_limited(message: str) -> bool:
    """``True`` if *message* reads like a provider-side rate limit."""
    return bool(_RATE_LIMIT_PATTERN.search(message or ""))


def classify_provider_error(exc: BaseException) -> Classification:
    """Return the classification for an exception raised by a provider call."""
    if isinstance(exc, RateLimitError):
        return Classification.RATE_LIMITED
    if isinstance(exc, MalformedResponseError):
        return Classification.MALFORMED
    if isinstance(exc, ConfigurationError):
        return Classification.UNCONFIGURED
    if looks_rate_limited(str(exc)):
        return Classification.RATE_LIMITED
    # Timeouts, connection failures and every other API error.
    return Classification.PROVIDER_ERROR
