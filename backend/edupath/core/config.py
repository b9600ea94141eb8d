"""Application configuration loaded from environment variables.

Settings for the API surface, the AI search collaborator, and the onboarding
orchestration knobs (debounce, query length, result caps). Uses
pydantic-settings for validation and .env file support.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Upper bound on how many scored matches the API will ever return
_MAX_MATCH_RESULT_LIMIT = 100


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000

    # CORS
    # Default allows localhost:3000 for Next.js development
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Application
    environment: Literal["development", "test", "production"] = "development"
    log_level: str = "INFO"

    # AI search collaborator (OpenAI-compatible chat completions endpoint)
    llm_provider: str = "openai"
    llm_api_key: SecretStr = SecretStr("")
    llm_base_url: str = ""
    llm_model: str = "llama-3.3-70b-versatile"

    # Onboarding orchestration
    search_debounce_ms: int = 400
    search_min_query_length: int = 3
    search_pool_limit: int = 30
    match_result_limit: int = 40
    synthetic_pool_size: int = 12
    live_search_local_limit: int = 8

    # In-memory session store
    session_ttl_minutes: int = 120
    session_sweep_interval_seconds: int = 300

    @model_validator(mode="after")
    def check_orchestration_bounds(self) -> "Settings":
        """Validate orchestration knobs.

        Checks:
        - Debounce delay must be non-negative
        - Minimum live-search query length must be at least 1
        - Result caps must be positive and bounded
        - Synthetic fallback must produce at least one candidate
        - Session TTL and sweep interval must be positive
        - CORS must not use wildcard origin (incompatible with credentials)
        """
        if self.search_debounce_ms < 0:
            msg = f"SEARCH_DEBOUNCE_MS cannot be negative. Got: {self.search_debounce_ms}"
            raise ValueError(msg)

        if self.search_min_query_length < 1:
            msg = (
                "SEARCH_MIN_QUERY_LENGTH must be at least 1. "
                f"Got: {self.search_min_query_length}"
            )
            raise ValueError(msg)

        for name in ("search_pool_limit", "match_result_limit"):
            value = getattr(self, name)
            if value <= 0 or value > _MAX_MATCH_RESULT_LIMIT:
                msg = (
                    f"{name.upper()} must be between 1 and "
                    f"{_MAX_MATCH_RESULT_LIMIT}. Got: {value}"
                )
                raise ValueError(msg)

        if self.synthetic_pool_size < 1:
            msg = (
                "SYNTHETIC_POOL_SIZE must be at least 1 so the match step "
                f"always has candidates. Got: {self.synthetic_pool_size}"
            )
            raise ValueError(msg)

        if self.session_ttl_minutes <= 0:
            msg = f"SESSION_TTL_MINUTES must be positive. Got: {self.session_ttl_minutes}"
            raise ValueError(msg)

        if self.session_sweep_interval_seconds <= 0:
            msg = (
                "SESSION_SWEEP_INTERVAL_SECONDS must be positive. "
                f"Got: {self.session_sweep_interval_seconds}"
            )
            raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "This application uses credentials (cookies) which are "
                "incompatible with wildcard CORS origins."
            )
            raise ValueError(msg)

        return self

    @property
    def search_debounce_seconds(self) -> float:
        """Debounce delay in seconds for asyncio.sleep()."""
        return self.search_debounce_ms / 1000


settings = Settings()
