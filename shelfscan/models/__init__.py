"""shelfscan domain models - re-exports all public model classes.

    - attempt.py - fallback-chain link outcomes and classifications
    - books.py   - shelf analysis results, annotations, catalog rows
    - quota.py   - provider keys and quota window state
"""

from __future__ import annotations

from shelfscan.models.attempt import (
    Advance,
    AttemptResult,
    ChainOutcome,
    Classification,
    Resolved,
    SkippedLink,
)
from shelfscan.models.books import (
    AnalysisResult,
    BookRecord,
    ImageAnnotation,
    ImageLabel,
    KnownBookEntry,
    VisionTitlesPayload,
)
from shelfscan.models.quota import (
    DAY_SECONDS,
    ProviderKey,
    QuotaLimit,
    QuotaState,
    QuotaUsage,
)

__all__ = [
    "Advance",
    "AnalysisResult",
    "AttemptResult",
    "BookRecord",
    "ChainOutcome",
    "DAY_SECONDS",
    "Classification",
    "ImageAnnotation",
    "ImageLabel",
    "KnownBookEntry",
    "ProviderKey",
    "QuotaLimit",
    "QuotaState",
    "QuotaUsage",
    "Resolved",
    "SkippedLink",
    "VisionTitlesPayload",
]
