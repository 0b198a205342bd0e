"""Custom exception hierarchy for shelfscan.

All application exceptions inherit from :class:`ShelfScanError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "google-vision", "anthropic") caused the
failure.

    ShelfScanError  (base -- catch-all for any shelfscan error)
    +-- LLMError                 (any LLM API call failure)
    +-- VisionAnalysisError      (image annotation / OCR failure)
    +-- RateLimitError           (provider-reported rate limit)
    +-- ProviderUnavailableError (external service down / unreachable)
    +-- MalformedResponseError   (response could not be parsed or validated)
    +-- ConfigurationError       (startup / invalid config)

Adapters raise these; the fallback chains catch them locally and turn them
into a :class:`~shelfscan.models.attempt.Classification`.  None of them is
allowed to escape a chain's public operation.
"""


class ShelfScanError(Exception):
    """Base exception for all shelfscan errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class LLMError(ShelfScanError):
    """Raised when an LLM API call fails or returns an empty response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class VisionAnalysisError(ShelfScanError):
    """Raised when an image annotation call fails (Google Vision, etc.)."""

    def __init__(
        self,
        message: str = "Image analysis failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(ShelfScanError):
    """Raised when a provider reports that its own rate limit was hit.

    This is distinct from a local quota rejection: the request reached the
    provider and the provider refused it.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(ShelfScanError):
    """Raised when an external service is unreachable or not configured."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedResponseError(ShelfScanError):
    """Raised when a provider answered but the body is unusable."""

    def __init__(
        self,
        message: str = "Provider returned a malformed response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(ShelfScanError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
