"""In-memory onboarding session store with idle expiry.

Sessions live only in process memory and expire after a period of
inactivity. Safe for a single-threaded event loop; a multi-instance
deployment would need a shared store.
"""

from datetime import UTC, datetime, timedelta

import structlog

from edupath.core.config import settings
from edupath.services.onboarding_session import OnboardingSession

logger = structlog.get_logger()

DEFAULT_SESSION_TTL_MINUTES = 120


class SessionStore:
    """Keeps onboarding sessions by id."""

    def __init__(self, ttl_minutes: int = DEFAULT_SESSION_TTL_MINUTES) -> None:
        """Initialize the store.

        Args:
            ttl_minutes: Idle time after which a session expires.
        """
        self._sessions: dict[str, OnboardingSession] = {}
        self._ttl = timedelta(minutes=ttl_minutes)

    def create(self) -> OnboardingSession:
        """Create and store a new session.

        Expired sessions are left to SessionSweeper and to lazy expiry in get().
        """
        session = OnboardingSession()
        self._sessions[session.id] = session
        logger.info("onboarding_session_created", session_id=session.id)
        return session

    def add(self, session: OnboardingSession) -> None:
        """Store an existing session (replaces one with the same id)."""
        self._sessions[session.id] = session

    def get(self, session_id: str) -> OnboardingSession | None:
        """Get a live session.

        Returns:
            The session, or None if unknown or expired.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if datetime.now(UTC) - session.updated_at > self._ttl:
            del self._sessions[session_id]
            logger.info("onboarding_session_expired", session_id=session_id)
            return None
        return session

    def cleanup_expired(self) -> int:
        """Remove all expired sessions.

        Returns:
            Number of sessions removed.
        """
        cutoff = datetime.now(UTC) - self._ttl
        expired = [sid for sid, s in self._sessions.items() if s.updated_at < cutoff]
        for session_id in expired:
            del self._sessions[session_id]
        return len(expired)

    def clear(self) -> None:
        """Remove every session (for testing)."""
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get the singleton session store, sized from settings on first use."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore(ttl_minutes=settings.session_ttl_minutes)
    return _session_store


def reset_session_store() -> None:
    """Reset the session store singleton (for testing)."""
    global _session_store
    if _session_store is not None:
        _session_store.clear()
    _session_store = None
