"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  - static defaults checked into the repo
  2. .env file           - local developer overrides (not committed)
  3. Environment vars    - set at deploy time

The quota section of the merged config is turned into one
:class:`~shelfscan.models.quota.QuotaLimit` per provider key by
:func:`build_quota_limits`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from shelfscan.config.settings import Settings
from shelfscan.models.quota import ProviderKey, QuotaLimit
from shelfscan.utils.errors import ConfigurationError

# Per-key defaults used when config.yaml omits a key.  The vision OCR
# fallback is cheap and generous; the secondary text model has a small
# free-tier budget, so it stays below its hard per-minute cap.  Both
# primary keys bill the same OpenAI account; their daily caps add up to
# 12000 calls a day.
DEFAULT_QUOTA_LIMITS: dict[ProviderKey, QuotaLimit] = {
    ProviderKey.PRIMARY_VISION: QuotaLimit(limit=60, window_seconds=60, daily_limit=6000),
    ProviderKey.SECONDARY_VISION: QuotaLimit(limit=100, window_seconds=60, daily_limit=5000),
    ProviderKey.PRIMARY_TEXT: QuotaLimit(limit=60, window_seconds=60, daily_limit=6000),
    ProviderKey.SECONDARY_TEXT: QuotaLimit(limit=12, window_seconds=60, daily_limit=1500),
}


def load_config(path: str | None = None, settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  Defaults to
            ``settings.quota_config_path``.
        settings: Settings instance to merge; a fresh one is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    settings = settings or Settings()
    config_path = Path(path or settings.quota_config_path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    if not isinstance(yaml_config, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")

    env_overrides = {
        "app": {
            "env": settings.app_env,
        },
        "providers": {
            "available": settings.get_available_providers(),
            "enable_openai": settings.enable_openai,
            "timeout_seconds": settings.provider_timeout_seconds,
            "max_retries": settings.provider_max_retries,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def build_quota_limits(config: dict[str, Any] | None = None) -> dict[ProviderKey, QuotaLimit]:
    """Resolve a :class:`QuotaLimit` for every provider key.

    Keys missing from ``config["quota"]`` get :data:`DEFAULT_QUOTA_LIMITS`.
    Unknown keys or invalid numbers raise :class:`ConfigurationError`.
    """
    limits = dict(DEFAULT_QUOTA_LIMITS)
    quota_section = (config or {}).get("quota") or {}
    if not isinstance(quota_section, dict):
        raise ConfigurationError("'quota' config section must be a mapping")

    for raw_key, raw_limit in quota_section.items():
        try:
            key = ProviderKey(raw_key)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown quota key: {raw_key!r}") from exc
        if not isinstance(raw_limit, dict):
            raise ConfigurationError(f"Quota entry for {raw_key!r} must be a mapping")
        merged = {**limits[key].model_dump(), **raw_limit}
        try:
            limits[key] = QuotaLimit(**merged)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid quota for {raw_key!r}: {exc}") from exc

    return limits


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
