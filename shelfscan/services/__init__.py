"""Orchestration services: quota gate, fallback chains, batch enhancer."""

from shelfscan.services.book_enhancer import BookEnhancer
from shelfscan.services.fallback_chain import ChainLink, FallbackChain, ProviderLink
from shelfscan.services.quota_tracker import QuotaTracker
from shelfscan.services.text_chain import TextFallbackChain
from shelfscan.services.vision_chain import VisionFallbackChain

__all__ = [
    "BookEnhancer",
    "ChainLink",
    "FallbackChain",
    "ProviderLink",
    "QuotaTracker",
    "TextFallbackChain",
    "VisionFallbackChain",
]
