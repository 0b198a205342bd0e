"""Concrete provider adapters and the lazy registry that builds them."""

from shelfscan.providers.registry import (
    IMAGE_ANNOTATOR,
    PRIMARY_LLM,
    SECONDARY_LLM,
    ProviderRegistry,
)

__all__ = ["IMAGE_ANNOTATOR", "PRIMARY_LLM", "SECONDARY_LLM", "ProviderRegistry"]
