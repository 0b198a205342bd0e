"""Public interface definitions for all external inference providers.

Every external API in shelfscan is reached exclusively through the abstract
base classes defined here.  Concrete adapters live in
``shelfscan/providers/`` and are built lazily by the provider registry.

    Interface                  ->  Concrete implementations
    ------------------------------------------------------------
    ILLMProvider               ->  OpenAILLMProvider, AnthropicLLMProvider
    IImageAnnotationProvider   ->  GoogleVisionProvider
"""

from shelfscan.interfaces.image_annotation_provider import IImageAnnotationProvider
from shelfscan.interfaces.llm_provider import ILLMProvider

__all__ = ["IImageAnnotationProvider", "ILLMProvider"]
