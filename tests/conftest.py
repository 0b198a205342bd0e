"""Shared pytest fixtures for the shelfscan test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from shelfscan.config.settings import Settings
from tests.fakes import FakeClock, make_settings


@pytest.fixture
def settings() -> Settings:
    """Settings with no credentials configured."""
    return make_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials in the developer's shell out of every test."""
    for var in (
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "GOOGLE_VISION_API_KEY",
        "ENABLE_OPENAI",
        "OPENAI_TEXT_MODEL",
        "OPENAI_VISION_MODEL",
        "ANTHROPIC_TEXT_MODEL",
        "APP_ENV",
        "LOG_LEVEL",
        "QUOTA_CONFIG_PATH",
        "PROVIDER_TIMEOUT_SECONDS",
        "PROVIDER_MAX_RETRIES",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _restore_structlog() -> Iterator[None]:
    """Tests that reconfigure logging onto a captured stream must not leak it."""
    yield
    structlog.reset_defaults()
