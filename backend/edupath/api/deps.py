"""Shared dependencies for API endpoints.

Onboarding endpoints resolve their session and orchestrator through these
dependencies so tests can swap either one via ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from edupath.adapters.search import get_search_adapter
from edupath.core.config import settings
from edupath.core.errors import NotFoundError
from edupath.services.onboarding_session import OnboardingSession
from edupath.services.search_orchestrator import SearchOrchestrator
from edupath.services.session_store import SessionStore, get_session_store


def get_store() -> SessionStore:
    """Get the process-wide onboarding session store."""
    return get_session_store()


def get_orchestrator() -> SearchOrchestrator:
    """Build a search orchestrator over the configured search adapter.

    The adapter wraps the provider singleton, so building one per request
    is cheap and picks up provider overrides made in tests.
    """
    return SearchOrchestrator(get_search_adapter(), config=settings)


Store = Annotated[SessionStore, Depends(get_store)]
Orchestrator = Annotated[SearchOrchestrator, Depends(get_orchestrator)]


def get_session_or_404(session_id: str, store: Store) -> OnboardingSession:
    """Look up an onboarding session by path id.

    Raises:
        NotFoundError: If the session is unknown or expired.
    """
    session = store.get(session_id)
    if session is None:
        raise NotFoundError("Onboarding session", session_id)
    return session


CurrentSession = Annotated[OnboardingSession, Depends(get_session_or_404)]
