"""University search collaborators.

This module provides:
- UniversitySearchAdapter base class and request/response types
- LLMUniversitySearch, the LLM-backed implementation
- Factory function returning the configured collaborator
"""

from edupath.adapters.search.base import (
    SearchRequest,
    SearchResponse,
    UniversitySearchAdapter,
)
from edupath.adapters.search.llm_search import LLMUniversitySearch
from edupath.core.config import settings
from edupath.providers.config import ProviderConfig
from edupath.providers.factory import get_llm_provider


def get_search_adapter() -> UniversitySearchAdapter:
    """Return a search collaborator wired to the current LLM provider.

    Returns:
        LLMUniversitySearch using the provider singleton.
    """
    return LLMUniversitySearch(
        get_llm_provider(), retry_config=ProviderConfig.from_settings(settings)
    )


__all__ = [
    "LLMUniversitySearch",
    "SearchRequest",
    "SearchResponse",
    "UniversitySearchAdapter",
    "get_search_adapter",
]
