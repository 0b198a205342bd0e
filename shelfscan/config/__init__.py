"""Configuration module - exports Settings and the config loaders."""

from shelfscan.config.loader import DEFAULT_QUOTA_LIMITS, build_quota_limits, load_config
from shelfscan.config.settings import Settings, is_usable_key

__all__ = ["DEFAULT_QUOTA_LIMITS", "Settings", "build_quota_limits", "is_usable_key", "load_config"]
