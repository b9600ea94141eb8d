"""Tests for the in-memory onboarding session store."""

from datetime import UTC, datetime, timedelta

from edupath.services.onboarding_session import OnboardingSession
from edupath.services.session_store import (
    SessionStore,
    get_session_store,
    reset_session_store,
)


def _age(session: OnboardingSession, minutes: int) -> None:
    session.updated_at = datetime.now(UTC) - timedelta(minutes=minutes)


class TestSessionStore:
    """Create, get and expire."""

    def test_create_then_get(self):
        store = SessionStore()
        session = store.create()
        assert store.get(session.id) is session
        assert session.current_step.id == "goal"
        assert len(store) == 1

    def test_unknown_id(self):
        assert SessionStore().get("missing") is None

    def test_idle_session_expires(self):
        store = SessionStore(ttl_minutes=30)
        session = store.create()
        _age(session, 31)

        assert store.get(session.id) is None
        assert len(store) == 0

    def test_recent_activity_keeps_session_alive(self):
        store = SessionStore(ttl_minutes=30)
        session = store.create()
        _age(session, 29)
        assert store.get(session.id) is session

    def test_cleanup_expired(self):
        store = SessionStore(ttl_minutes=30)
        old = store.create()
        fresh = store.create()
        _age(old, 60)

        assert store.cleanup_expired() == 1
        assert store.get(fresh.id) is fresh

    def test_create_leaves_expired_sessions_to_the_sweeper(self):
        store = SessionStore(ttl_minutes=30)
        _age(store.create(), 60)
        store.create()

        assert len(store) == 2
        assert store.cleanup_expired() == 1
        assert len(store) == 1

    def test_add_existing_session(self):
        store = SessionStore()
        session = OnboardingSession(session_id="abc")
        store.add(session)
        assert store.get("abc") is session


class TestSessionStoreSingleton:
    """get_session_store / reset_session_store."""

    def test_singleton(self):
        assert get_session_store() is get_session_store()

    def test_reset_drops_sessions(self):
        session = get_session_store().create()
        reset_session_store()
        assert get_session_store().get(session.id) is None
