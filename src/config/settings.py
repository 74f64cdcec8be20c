"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# pydantic-settings reads configuration from TWO sources (in priority order):
#
#   1. **Environment variables**: e.g., RAWG_API_KEY=abc123
#      (highest priority, always wins)
#   2. **.env file**: key=value lines in the project root .env file
#      (lower priority, used for local development)
#
# Field name `rawg_api_key` maps to env var `RAWG_API_KEY`.
#
# Secrets and deployment-specific values live here.  Tuning knobs
# (recommendation count, sampling temperature, enrichment timeout, page
# sizes) live in config/config.yaml and are read by src/config/loader.py.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """gameScout application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Generative model providers ===
    # Empty string = "not configured" → main.py skips providers with empty
    # keys and falls through to the next one.
    openai_api_key: str = ""
    openai_base_url: str = ""  # Custom base URL for OpenAI-compatible APIs
    openai_text_model: str = ""  # Defaults to gpt-4o-mini when empty
    anthropic_api_key: str = ""
    anthropic_model: str = ""  # Defaults to a Claude Sonnet model when empty
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = ""  # Defaults to llama3.1 when empty

    # === Game catalog (RAWG) ===
    rawg_api_key: str = ""
    rawg_base_url: str = "https://api.rawg.io/api"

    # === Storage ===
    # One SQLite file holds saved games, profiles and recommendation snapshots.
    database_path: str = "data/gamescout.db"

    # === Auth ===
    # Shared HS256 secret of the external auth provider.  Empty = development
    # mode, where the X-User-Id header is trusted instead of a bearer token.
    auth_jwt_secret: str = ""

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names in selection order (Ollama needs no key)."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers

    def is_dev_auth(self) -> bool:
        """Return ``True`` when no auth secret is configured."""
        return not self.auth_jwt_secret
