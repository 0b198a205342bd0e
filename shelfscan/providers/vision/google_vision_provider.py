"""Google Cloud Vision annotation provider.

Calls the ``images:annotate`` REST endpoint with TEXT_DETECTION and
LABEL_DETECTION features over ``httpx``.  This is the secondary vision
path: cheaper than the vision LLM and far more generous on quota, but it
only returns raw text and scene labels, not book titles.
"""

from __future__ import annotations

from typing import Any

import httpx

from shelfscan.config.settings import Settings, is_usable_key
from shelfscan.interfaces.image_annotation_provider import IImageAnnotationProvider
from shelfscan.models.books import ImageAnnotation, ImageLabel
from shelfscan.utils.errors import (
    ConfigurationError,
    MalformedResponseError,
    ProviderUnavailableError,
    RateLimitError,
    VisionAnalysisError,
)
from shelfscan.utils.logging import get_logger

_ANNOTATE_URL = "https://vision.googleapis.com/v1/images:annotate"
_MAX_RESULTS = 5


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Shared HTTP client with the provider timeout and a small retry budget.

    ``AsyncHTTPTransport(retries=...)`` only retries failed connections;
    a request that reached the server is never replayed.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.provider_timeout_seconds, connect=5.0),
        transport=httpx.AsyncHTTPTransport(retries=settings.provider_max_retries),
    )


class GoogleVisionProvider(IImageAnnotationProvider):
    """Image annotation via the Google Cloud Vision REST API."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self._api_key = settings.google_vision_api_key
        self._http_client = http_client or build_http_client(settings)
        self._logger = get_logger(__name__)

    async def annotate(self, image_base64: str) -> ImageAnnotation:
        if not self.is_available():
            raise ConfigurationError(
                "GOOGLE_VISION_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )

        body = {
            "requests": [
                {
                    "image": {"content": image_base64},
                    "features": [
                        {"type": "TEXT_DETECTION", "maxResults": _MAX_RESULTS},
                        {"type": "LABEL_DETECTION", "maxResults": _MAX_RESULTS},
                    ],
                }
            ]
        }

        self._logger.debug("google_vision_request", content_length=len(image_base64))
        try:
            response = await self._http_client.post(
                _ANNOTATE_URL, params={"key": self._api_key}, json=body
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 429:
                raise RateLimitError(
                    "Google Vision returned 429",
                    provider_name=self.get_provider_name(),
                ) from exc
            raise VisionAnalysisError(
                f"Google Vision HTTP {exc.response.status_code}",
                provider_name=self.get_provider_name(),
            ) from exc
        except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
            raise ProviderUnavailableError(
                f"Google Vision unreachable: {exc!r}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise VisionAnalysisError(
                f"Google Vision request failed: {exc!r}",
                provider_name=self.get_provider_name(),
            ) from exc

        try:
            payload = response.json()
            first: dict[str, Any] = payload["responses"][0]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise MalformedResponseError(
                "Google Vision response has no annotation entry",
                provider_name=self.get_provider_name(),
            ) from exc

        if first.get("error"):
            raise VisionAnalysisError(
                f"Vision API error: {first['error'].get('message', 'unknown')}",
                provider_name=self.get_provider_name(),
            )

        annotation = ImageAnnotation(
            text=self._extract_text(first),
            labels=[
                ImageLabel(description=label.get("description", ""), score=label.get("score", 0.0))
                for label in first.get("labelAnnotations") or []
            ],
        )
        self._logger.info(
            "google_vision_annotated",
            text_length=len(annotation.text),
            num_labels=len(annotation.labels),
        )
        return annotation

    def get_provider_name(self) -> str:
        return "google-vision"

    def is_available(self) -> bool:
        return is_usable_key(self._api_key)

    @staticmethod
    def _extract_text(entry: dict[str, Any]) -> str:
        """Full-text annotation first, then the first text annotation."""
        full_text = entry.get("fullTextAnnotation") or {}
        if full_text.get("text"):
            return full_text["text"]
        text_annotations = entry.get("textAnnotations") or []
        if text_annotations:
            return text_annotations[0].get("description", "")
        return ""
