"""Settings for the LLM provider behind university search.

Built from the application Settings by ``ProviderConfig.from_settings``;
tests construct it directly to tune retries and routing.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from edupath.core.config import Settings


@dataclass
class ProviderConfig:
    """LLM connection, generation defaults and retry policy.

    ``base_url`` points the OpenAI SDK at any compatible endpoint (Groq by
    default in deployment); None keeps the SDK default. ``model_routing``
    maps a TaskType value ("course_query", ...) to a different model.
    Retry delays are in milliseconds and double per attempt up to
    ``retry_max_delay_ms``.
    """

    llm_provider: str = "openai"
    api_key: str | None = None
    base_url: str | None = None
    model: str = "llama-3.3-70b-versatile"
    model_routing: dict[str, str] | None = None

    # generation
    default_max_tokens: int = 4096
    default_temperature: float = 0.3
    request_timeout_s: float = 20.0

    # retries (transient and rate-limit errors only)
    max_retries: int = 2
    retry_base_delay_ms: int = 500
    retry_max_delay_ms: int = 5000

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ProviderConfig":
        # empty strings in the environment mean "unset"
        return cls(
            llm_provider=settings.llm_provider,
            api_key=settings.llm_api_key.get_secret_value() or None,
            base_url=settings.llm_base_url or None,
            model=settings.llm_model,
        )
