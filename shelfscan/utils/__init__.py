"""Utility modules for shelfscan.

Available utility modules (re-exported here for convenience):

- **errors** -- Exception hierarchy rooted at ShelfScanError; adapters raise
  a specific subclass so the fallback chains can classify failures without
  string matching.
- **concurrency** -- asyncio semaphore throttling for batch enrichment.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **image_payload** -- Data-URI stripping, the minimum-length guard and
  MIME sniffing for base64 shelf photos.
- **error_classifier** (not re-exported here) -- Maps provider exceptions
  onto a chain Classification.
"""

# -- Exception hierarchy ---------------------------------------------------
from shelfscan.utils.errors import (
    ConfigurationError,
    LLMError,
    MalformedResponseError,
    ProviderUnavailableError,
    RateLimitError,
    ShelfScanError,
    VisionAnalysisError,
)

# -- Async concurrency helpers ---------------------------------------------
from shelfscan.utils.concurrency import throttled_gather

# -- Structured logging setup ----------------------------------------------
from shelfscan.utils.logging import configure_logging, get_logger

# -- Image payload helpers -------------------------------------------------
from shelfscan.utils.image_payload import detect_media_type, is_viable_payload, strip_data_uri

__all__ = [
    "ConfigurationError",
    "LLMError",
    "MalformedResponseError",
    "ProviderUnavailableError",
    "RateLimitError",
    "ShelfScanError",
    "VisionAnalysisError",
    "configure_logging",
    "detect_media_type",
    "get_logger",
    "is_viable_payload",
    "strip_data_uri",
    "throttled_gather",
]
