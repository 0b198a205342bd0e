"""Unit tests for the Google Cloud Vision adapter using httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from shelfscan.providers.vision.google_vision_provider import GoogleVisionProvider
from shelfscan.utils.errors import (
    ConfigurationError,
    MalformedResponseError,
    ProviderUnavailableError,
    RateLimitError,
    VisionAnalysisError,
)
from tests.fakes import make_settings

_KEY = "AIza-test-vision-key"


def _provider(handler: Callable[[httpx.Request], httpx.Response]) -> GoogleVisionProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleVisionProvider(make_settings(google_vision_api_key=_KEY), http_client=client)


def _ok(payload: Any) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(200, json=payload)


class TestGoogleVisionProvider:
    def test_availability_follows_key(self) -> None:
        assert not GoogleVisionProvider(make_settings()).is_available()
        assert GoogleVisionProvider(make_settings(google_vision_api_key=_KEY)).is_available()

    @pytest.mark.asyncio
    async def test_unconfigured_raises_without_request(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        provider = GoogleVisionProvider(make_settings(), http_client=client)
        with pytest.raises(ConfigurationError):
            await provider.annotate("QUJD")
        assert calls == []

    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"responses": [{}]})

        await _provider(handler).annotate("QUJD")

        assert seen["url"].params["key"] == _KEY
        entry = seen["body"]["requests"][0]
        assert entry["image"] == {"content": "QUJD"}
        assert {f["type"] for f in entry["features"]} == {"TEXT_DETECTION", "LABEL_DETECTION"}

    @pytest.mark.asyncio
    async def test_full_text_and_labels(self) -> None:
        payload = {
            "responses": [
                {
                    "fullTextAnnotation": {"text": "The Hobbit\nDune"},
                    "textAnnotations": [{"description": "ignored"}],
                    "labelAnnotations": [
                        {"description": "Bookcase", "score": 0.97},
                        {"description": "Shelf", "score": 0.91},
                    ],
                }
            ]
        }
        annotation = await _provider(_ok(payload)).annotate("QUJD")
        assert annotation.text == "The Hobbit\nDune"
        assert [label.description for label in annotation.labels] == ["Bookcase", "Shelf"]

    @pytest.mark.asyncio
    async def test_falls_back_to_first_text_annotation(self) -> None:
        payload = {"responses": [{"textAnnotations": [{"description": "Dune\nEmma"}]}]}
        annotation = await _provider(_ok(payload)).annotate("QUJD")
        assert annotation.text == "Dune\nEmma"
        assert annotation.labels == []

    @pytest.mark.asyncio
    async def test_429_is_rate_limit(self) -> None:
        provider = _provider(lambda request: httpx.Response(429, json={}))
        with pytest.raises(RateLimitError):
            await provider.annotate("QUJD")

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        provider = _provider(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(VisionAnalysisError, match="503"):
            await provider.annotate("QUJD")

    @pytest.mark.asyncio
    async def test_connection_refused_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderUnavailableError) as excinfo:
            await _provider(handler).annotate("QUJD")
        assert excinfo.value.provider_name == "google-vision"

    @pytest.mark.asyncio
    async def test_read_timeout_is_a_request_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(VisionAnalysisError, match="request failed"):
            await _provider(handler).annotate("QUJD")

    @pytest.mark.asyncio
    async def test_per_image_error(self) -> None:
        payload = {"responses": [{"error": {"code": 3, "message": "Bad image data."}}]}
        with pytest.raises(VisionAnalysisError, match="Bad image data"):
            await _provider(_ok(payload)).annotate("QUJD")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"responses": []}, ["not", "a", "dict"]])
    async def test_malformed_body(self, payload: Any) -> None:
        with pytest.raises(MalformedResponseError):
            await _provider(_ok(payload)).annotate("QUJD")

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        provider = _provider(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(MalformedResponseError):
            await provider.annotate("QUJD")
