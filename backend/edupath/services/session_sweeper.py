"""Background sweep of expired onboarding sessions.

Expired sessions are already dropped lazily on lookup; the sweeper bounds
memory for sessions that are simply abandoned. Started and stopped by the
FastAPI lifespan in edupath.main.
"""

import asyncio
import contextlib

import structlog

from edupath.services.session_store import SessionStore

logger = structlog.get_logger()

DEFAULT_SWEEP_INTERVAL_SECONDS = 300


class SessionSweeper:
    """Periodically removes expired sessions from a store.

    Lifecycle:
    - start() creates the asyncio task running the sweep loop.
    - stop() cancels it and waits for it to finish.
    - run_once() performs a single sweep (for testing).

    Args:
        store: Session store to sweep.
        interval_seconds: Seconds between sweeps.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._store = store
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop; no-op if already running.

        Must be called with a running event loop.
        """
        if self.is_running:
            logger.warning("session_sweeper_already_running")
            return
        self._task = asyncio.create_task(self._run_loop())
        logger.info("session_sweeper_started", interval_s=self._interval_seconds)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to exit."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        logger.info("session_sweeper_stopped")

    def run_once(self) -> int:
        """Sweep once.

        Returns:
            Number of sessions removed.
        """
        removed = self._store.cleanup_expired()
        if removed:
            logger.info("expired_sessions_removed", count=removed, remaining=len(self._store))
        return removed

    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval_seconds)
            self.run_once()
