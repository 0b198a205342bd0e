"""Abstract base class for LLM service providers.

Defines the contract for any large-language-model backend used for text
completion (ratings, summaries) and vision-based image analysis (reading
book spines).  Implementations wrap OpenAI or Anthropic.  The fallback
chains only ever talk to this interface, so swapping a vendor is a change
in ``shelfscan/providers/registry.py`` and nowhere else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: OpenAILLMProvider, AnthropicLLMProvider
# Located in: shelfscan/providers/llm/
class ILLMProvider(ABC):
    """Contract for LLM services used by the shelfscan fallback chains.

    Providers must support plain text completion; vision (image analysis) is
    optional and declared via :meth:`supports_vision`.
    """

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 250,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system/instruction message that sets the model's behaviour.
        user_prompt:
            The user-facing prompt containing the actual request.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        shelfscan.utils.errors.RateLimitError
            If the provider reported a rate limit (HTTP 429).
        shelfscan.utils.errors.LLMError
            If the API call fails or returns an empty response.
        """

    @abstractmethod
    async def vision_extract(
        self,
        image_base64: str,
        media_type: str,
        system_prompt: str,
        prompt: str,
        json_response: bool = False,
    ) -> str:
        """Analyse a base64-encoded image using the model's vision capability.

        Parameters
        ----------
        image_base64:
            Bare base64 image content (no data-URI prefix).
        media_type:
            MIME type of the image, e.g. ``"image/jpeg"``.
        system_prompt:
            Instruction message that constrains the model's behaviour.
        prompt:
            A natural-language instruction describing what to extract.
        json_response:
            Ask the provider to return a single JSON object.

        Raises
        ------
        shelfscan.utils.errors.LLMError
            If vision is unsupported or the API call fails.
        """

    @abstractmethod
    def supports_vision(self) -> bool:
        """Return ``True`` if this provider can process image inputs."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations check that a usable credential is present without
        making any network call.
        """
