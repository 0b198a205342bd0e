"""Abstract base class for image annotation (OCR + labelling) providers.

The secondary vision path does not ask a model to *understand* the shelf;
it asks a general-purpose OCR/label API for raw text and scene labels and
derives candidate titles from those locally.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from shelfscan.models.books import ImageAnnotation


# Concrete implementation: GoogleVisionProvider (shelfscan/providers/vision/)
class IImageAnnotationProvider(ABC):
    """Contract for OCR + label detection services."""

    @abstractmethod
    async def annotate(self, image_base64: str) -> ImageAnnotation:
        """Run text and label detection on a bare base64 image.

        Raises
        ------
        shelfscan.utils.errors.VisionAnalysisError
            If the service fails or reports an error for the image.
        shelfscan.utils.errors.RateLimitError
            If the service answered HTTP 429.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"google-vision"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""
