"""Anthropic LLM provider adapter.

Wraps the ``anthropic`` async client to implement :class:`ILLMProvider`.
Used as the secondary text provider: when the primary is unconfigured,
out of quota or failing, ratings and summaries are asked of Claude.

Key differences from the OpenAI adapter:
    - System prompt is a separate parameter, not a message in the list
    - Response content is a list of blocks; text blocks are joined
    - Model name is overridable (``ANTHROPIC_TEXT_MODEL``)
"""

from __future__ import annotations

import anthropic
import structlog

from shelfscan.config.settings import Settings, is_usable_key
from shelfscan.interfaces.llm_provider import ILLMProvider
from shelfscan.utils.errors import (
    ConfigurationError,
    LLMError,
    ProviderUnavailableError,
    RateLimitError,
)

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "claude-3-5-haiku-latest"


class AnthropicLLMProvider(ILLMProvider):
    """LLM provider backed by the Anthropic Claude API (text only here)."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.anthropic_api_key
        self._model = settings.anthropic_text_model or _DEFAULT_MODEL
        self._client: anthropic.AsyncAnthropic | None = None
        if is_usable_key(self._api_key):
            self._client = anthropic.AsyncAnthropic(
                api_key=self._api_key,
                timeout=settings.provider_timeout_seconds,
                max_retries=settings.provider_max_retries,
            )

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 250,
    ) -> str:
        """Generate a text completion via the Anthropic Messages API."""
        if self._client is None:
            raise ConfigurationError(
                message="ANTHROPIC_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
                temperature=temperature,
            )
        except anthropic.RateLimitError as exc:
            raise RateLimitError(
                message=f"Anthropic rate limit: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.APIConnectionError as exc:
            raise ProviderUnavailableError(
                message=f"Anthropic unreachable: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.APIError as exc:
            raise LLMError(
                message=f"Anthropic API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text_blocks = [block.text for block in response.content if block.type == "text"]
        if not text_blocks:
            raise LLMError(
                message="Anthropic returned no text content",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "anthropic_completion",
            model=self._model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return "\n".join(text_blocks)

    async def vision_extract(
        self,
        image_base64: str,
        media_type: str,
        system_prompt: str,
        prompt: str,
        json_response: bool = False,
    ) -> str:
        """Not supported: this adapter is text-only."""
        raise LLMError(
            message="Vision is not used for this provider",
            provider_name=self.get_provider_name(),
        )

    def supports_vision(self) -> bool:
        return False

    def is_available(self) -> bool:
        """Return ``True`` if a usable Anthropic API key is configured."""
        return self._client is not None

    def get_provider_name(self) -> str:
        return "anthropic"
