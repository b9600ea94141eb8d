"""LLM provider singleton.

One provider instance per process, so the OpenAI client's connection pool
is shared by every search. Tests swap it by assigning ``_llm_provider``
(see the ``mock_llm`` fixture) and clear it with ``reset_providers()``.
"""

from collections.abc import Callable

from edupath.core.config import settings
from edupath.providers.config import ProviderConfig
from edupath.providers.llm.base import LLMProvider
from edupath.providers.llm.mock_adapter import MockLLMProvider
from edupath.providers.llm.openai_adapter import OpenAIAdapter

_BUILDERS: dict[str, Callable[[ProviderConfig], LLMProvider]] = {
    "openai": OpenAIAdapter,
    "mock": lambda _config: MockLLMProvider(),
}

_llm_provider: LLMProvider | None = None


def get_llm_provider(config: ProviderConfig | None = None) -> LLMProvider:
    """Return the process-wide LLM provider, building it on first use.

    Args:
        config: Used only when no provider exists yet; defaults to
            ``ProviderConfig.from_settings(settings)``.

    Raises:
        ValueError: If ``llm_provider`` names no known provider.
    """
    global _llm_provider

    if _llm_provider is None:
        config = config or ProviderConfig.from_settings(settings)
        builder = _BUILDERS.get(config.llm_provider)
        if builder is None:
            raise ValueError(f"Unknown LLM provider: {config.llm_provider}")
        _llm_provider = builder(config)

    return _llm_provider


def reset_providers() -> None:
    """Drop the singleton (test isolation)."""
    global _llm_provider
    _llm_provider = None
