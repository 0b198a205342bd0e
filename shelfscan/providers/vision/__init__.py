"""Image annotation provider adapters."""

from shelfscan.providers.vision.google_vision_provider import GoogleVisionProvider

__all__ = ["GoogleVisionProvider"]
