"""Outcome types for a single link of a fallback chain.

A link either *resolves* the request with a concrete value or tells the
chain to *advance* to the next link, naming why.  The chain runner turns
the sequence of attempts into a :class:`ChainOutcome`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar, Union

_V = TypeVar("_V")


class Classification(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Why a link did not resolve.  Every member means "try the next link"."""

    UNCONFIGURED = "unconfigured"        # credential absent or invalid
    DISABLED = "disabled"                # explicit off-switch in config
    QUOTA_EXCEEDED = "quota_exceeded"    # local admission gate refused
    MALFORMED = "malformed"              # unparsable or out-of-range response
    RATE_LIMITED = "rate_limited"        # provider itself reported a rate limit
    PROVIDER_ERROR = "provider_error"    # network, timeout or API failure


@dataclass(frozen=True)
class Resolved(Generic[_V]):
    value: _V


@dataclass(frozen=True)
class Advance:
    classification: Classification
    detail: str = ""


AttemptResult = Union[Resolved[_V], Advance]


@dataclass(frozen=True)
class SkippedLink:
    link: str
    classification: Classification
    detail: str = ""


@dataclass(frozen=True)
class ChainOutcome(Generic[_V]):
    """Terminal result of a chain run.

    Attributes
    ----------
    value:
        The resolved value.  Never ``None``.
    source:
        Name of the link that produced ``value``, or the terminal default's
        name when every link advanced.
    trail:
        Links that advanced before resolution, in the order they ran.
    """

    value: _V
    source: str
    trail: tuple[SkippedLink, ...] = field(default_factory=tuple)
