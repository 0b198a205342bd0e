"""Application settings loaded from environment variables via pydantic-settings.

Two sources, in priority order:

  1. **Environment variables** - e.g. ``OPENAI_API_KEY=sk-abc123``
  2. **.env file** - key=value lines in the project root ``.env`` file

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY`` and so on.
An empty credential means "not configured"; the fallback chains treat that
exactly like an explicit disable and move on to the next provider.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Value shipped in .env.example; never a real key.
PLACEHOLDER_API_KEY = "your-api-key-here"


def is_usable_key(key: str) -> bool:
    """Basic credential sanity check: present, longer than 5 chars, not the placeholder."""
    return bool(key) and len(key) > 5 and key != PLACEHOLDER_API_KEY


class Settings(BaseSettings):
    """shelfscan settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Primary provider (vision + text) ===
    openai_api_key: str = ""
    openai_text_model: str = ""  # default gpt-4o
    openai_vision_model: str = ""  # default gpt-4o
    # ENABLE_OPENAI=false force-disables the primary vision provider.
    enable_openai: bool = True

    # === Secondary text provider ===
    anthropic_api_key: str = ""
    anthropic_text_model: str = ""  # override the secondary text model name

    # === Secondary vision provider ===
    google_vision_api_key: str = ""

    # === Provider call discipline ===
    provider_timeout_seconds: float = 15.0
    provider_max_retries: int = 2

    # === Quota configuration ===
    quota_config_path: str = "config/config.yaml"

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_providers(self) -> list[str]:
        """Return the names of providers that have a usable credential configured."""
        providers: list[str] = []
        if is_usable_key(self.openai_api_key):
            providers.append("openai")
        if is_usable_key(self.anthropic_api_key):
            providers.append("anthropic")
        if is_usable_key(self.google_vision_api_key):
            providers.append("google-vision")
        return providers
