"""Service assembly for shelfscan.

Wires settings, the quota tracker, the lazy provider registry, both
fallback chains and the batch enhancer into one object.  A route layer (or
the CLI) builds this once per process and shares it across requests; the
quota tracker inside it is the only shared mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from shelfscan.config.loader import build_quota_limits, load_config
from shelfscan.config.settings import Settings
from shelfscan.providers.registry import ProviderRegistry
from shelfscan.services.book_enhancer import BookEnhancer
from shelfscan.services.quota_tracker import QuotaTracker
from shelfscan.services.text_chain import TextFallbackChain
from shelfscan.services.vision_chain import VisionFallbackChain
from shelfscan.utils.logging import get_logger


@dataclass
class ShelfScanServices:
    settings: Settings
    quota: QuotaTracker
    registry: ProviderRegistry
    vision: VisionFallbackChain
    text: TextFallbackChain
    enhancer: BookEnhancer

    async def aclose(self) -> None:
        await self.registry.aclose()


def build_services(
    settings: Settings | None = None,
    config: dict[str, Any] | None = None,
    registry: ProviderRegistry | None = None,
    clock: Callable[[], float] | None = None,
) -> ShelfScanServices:
    """Construct every service with injected dependencies.

    Parameters
    ----------
    settings:
        Application settings.  Read from the environment when omitted.
    config:
        Merged config dict (see :func:`load_config`).  Loaded from
        ``settings.quota_config_path`` when omitted.
    registry:
        Pre-built provider registry, e.g. one with fake factories in tests.
    clock:
        Monotonic clock for the quota tracker.
    """
    settings = settings or Settings()
    config = config if config is not None else load_config(settings=settings)
    limits = build_quota_limits(config)

    quota = QuotaTracker(limits, clock=clock) if clock else QuotaTracker(limits)
    registry = registry or ProviderRegistry(settings)
    text = TextFallbackChain(registry, quota)

    get_logger(__name__).info(
        "services_built",
        providers=settings.get_available_providers(),
        primary_vision_enabled=settings.enable_openai,
        quota={key.value: limit.limit for key, limit in limits.items()},
    )

    return ShelfScanServices(
        settings=settings,
        quota=quota,
        registry=registry,
        vision=VisionFallbackChain(registry, quota),
        text=text,
        enhancer=BookEnhancer(text),
    )
