"""OpenAI LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
This is the primary provider for both chains: ``gpt-4o`` reads book spines
in the vision chain and answers the rating/summary prompts in the text
chain.

Calls are bounded: a short client-side timeout and a small fixed retry
count (both from :class:`Settings`).  A provider that is still failing
after that is the chain's problem, not ours; we translate the SDK error
into the shelfscan error hierarchy and let the chain advance.
"""

from __future__ import annotations

import openai
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

_DEFAULT_MODEL = "gpt-4o"


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by the OpenAI API.

    The SDK client is only created when a usable key is configured;
    ``openai.AsyncOpenAI`` refuses to construct without one.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key
        self._text_model = settings.openai_text_model or _DEFAULT_MODEL
        self._vision_model = settings.openai_vision_model or _DEFAULT_MODEL
        self._client: openai.AsyncOpenAI | None = None
        if is_usable_key(self._api_key):
            self._client = openai.AsyncOpenAI(
                api_key=self._api_key,
                timeout=openai.Timeout(settings.provider_timeout_seconds, connect=5.0),
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
        """Generate a text completion via the chat completions API."""
        client = self._require_client()
        try:
            response = await client.chat.completions.create(
                model=self._text_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.RateLimitError as exc:
            raise RateLimitError(
                message=f"OpenAI rate limit: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"OpenAI timed out after {self._settings.provider_timeout_seconds}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIConnectionError as exc:
            raise ProviderUnavailableError(
                message=f"OpenAI unreachable: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"OpenAI API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content
        if content is None:
            raise LLMError(
                message="OpenAI returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._text_model,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    async def vision_extract(
        self,
        image_base64: str,
        media_type: str,
        system_prompt: str,
        prompt: str,
        json_response: bool = False,
    ) -> str:
        """Analyse an image with the vision model.

        The image goes in as a data URI next to the text prompt.  With
        ``json_response`` the model is put in JSON-object mode so the reply
        is a single object the caller can validate.
        """
        client = self._require_client()
        request: dict = {
            "model": self._vision_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{media_type};base64,{image_base64}"},
                        },
                    ],
                },
            ],
            "max_tokens": 800,
        }
        if json_response:
            request["response_format"] = {"type": "json_object"}

        try:
            response = await client.chat.completions.create(**request)
        except openai.RateLimitError as exc:
            raise RateLimitError(
                message=f"OpenAI vision rate limit: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIConnectionError as exc:
            raise ProviderUnavailableError(
                message=f"OpenAI vision unreachable: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"OpenAI vision API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content
        if content is None:
            raise LLMError(
                message="OpenAI vision returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_vision_extract",
            model=self._vision_model,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    def supports_vision(self) -> bool:
        return True

    def is_available(self) -> bool:
        """Return ``True`` if a usable API key is configured (doesn't verify it works)."""
        return self._client is not None

    def get_provider_name(self) -> str:
        return "openai"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            raise ConfigurationError(
                message="OPENAI_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )
        return self._client
