"""Lazy provider registry.

Each provider adapter is built once, on first use, from :class:`Settings`.
Nothing is constructed at import time, so a process with no credentials
never creates an SDK client, and tests can :meth:`ProviderRegistry.reset`
between cases or swap in fakes through ``factories``.

All access happens on one event loop thread; a build never awaits, so the
check-then-construct in :meth:`_get` cannot interleave.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

import httpx

from shelfscan.config.settings import Settings
from shelfscan.interfaces.image_annotation_provider import IImageAnnotationProvider
from shelfscan.interfaces.llm_provider import ILLMProvider
from shelfscan.providers.llm.anthropic_provider import AnthropicLLMProvider
from shelfscan.providers.llm.openai_provider import OpenAILLMProvider
from shelfscan.providers.vision.google_vision_provider import (
    GoogleVisionProvider,
    build_http_client,
)
from shelfscan.utils.logging import get_logger

PRIMARY_LLM = "primary-llm"
SECONDARY_LLM = "secondary-llm"
IMAGE_ANNOTATOR = "image-annotator"


class ProviderRegistry:
    """Builds and caches provider adapters.

    Parameters
    ----------
    settings:
        Credentials and call limits for every adapter.
    factories:
        Optional replacements for the default builders, keyed by
        :data:`PRIMARY_LLM`, :data:`SECONDARY_LLM` or :data:`IMAGE_ANNOTATOR`.
    """

    def __init__(
        self,
        settings: Settings,
        factories: Mapping[str, Callable[[], Any]] | None = None,
    ) -> None:
        self._settings = settings
        self._http_client: httpx.AsyncClient | None = None
        self._instances: dict[str, Any] = {}
        self._factories: dict[str, Callable[[], Any]] = {
            PRIMARY_LLM: lambda: OpenAILLMProvider(self._settings),
            SECONDARY_LLM: lambda: AnthropicLLMProvider(self._settings),
            IMAGE_ANNOTATOR: lambda: GoogleVisionProvider(
                self._settings, http_client=self._shared_http_client()
            ),
        }
        if factories:
            self._factories.update(factories)
        self._logger = get_logger(__name__)

    @property
    def settings(self) -> Settings:
        return self._settings

    def primary_llm(self) -> ILLMProvider:
        return self._get(PRIMARY_LLM)

    def secondary_llm(self) -> ILLMProvider:
        return self._get(SECONDARY_LLM)

    def image_annotator(self) -> IImageAnnotationProvider:
        return self._get(IMAGE_ANNOTATOR)

    def reset(self) -> None:
        """Forget every built adapter; the next access rebuilds it."""
        self._instances.clear()

    async def aclose(self) -> None:
        """Close the shared HTTP client (if one was created) and reset."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
        self.reset()

    def _get(self, name: str) -> Any:
        instance = self._instances.get(name)
        if instance is None:
            instance = self._factories[name]()
            self._instances[name] = instance
            self._logger.debug("provider_initialised", provider=name, type=type(instance).__name__)
        return instance

    def _shared_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = build_http_client(self._settings)
        return self._http_client
