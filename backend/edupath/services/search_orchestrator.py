"""Async orchestration of collaborator-backed onboarding steps.

Three kinds of work:
- Auto steps (auto-search, auto-match): issue exactly one collaborator
  request while current, store the result, advance the session.
- Preview: load a program-count preview for country + course once; the user
  acknowledges it, so it never advances on its own.
- Live search: debounced suggestions for the step being typed into. Short
  queries are answered from local catalogs only.

Every request goes through the session's RequestSupervisor. When a result
resolves, it is applied only if its ticket is still current (not
superseded, no rewind since, requesting step still current); otherwise it is
discarded with a debug log. Empty collaborator results fall back to a
synthetic pool so scoring always has candidates.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

import structlog

from edupath.adapters.search.base import (
    SearchRequest,
    SearchResponse,
    UniversitySearchAdapter,
)
from edupath.core.config import Settings, settings
from edupath.prompts.university_search import ProfileContext
from edupath.services.candidate_pool import (
    merge_pools,
    normalize_pool,
    pre_rank_pool,
    synthesize_pool,
)
from edupath.services.match_profile import MatchProfile, build_profile
from edupath.services.onboarding_catalog import CATALOGS, filter_catalog
from edupath.services.onboarding_errors import StepTransitionError
from edupath.services.onboarding_session import OnboardingSession, UniversityPreview
from edupath.services.onboarding_steps import (
    ChoiceGridStep,
    FreeTextSearchStep,
    StepDefinition,
    StepKind,
)
from edupath.services.request_supervisor import RequestTicket
from edupath.services.university_match import rank_matches, summarize_matches

logger = structlog.get_logger()

PREVIEW_SAMPLE_SIZE = 12
"""Names kept in a preview."""

PREVIEW_NAMES_MULTIPLIER = 18
PREVIEW_MIN_PROGRAM_COUNT = 120

_PREVIEW_KEY = "preview"


def _auto_key(step_id: str) -> str:
    return f"auto:{step_id}"


def _live_key(step_id: str) -> str:
    return f"live:{step_id}"


def estimate_program_count(sample_size: int) -> int:
    """Display estimate of matching programs for a preview sample."""
    return max(sample_size * PREVIEW_NAMES_MULTIPLIER, PREVIEW_MIN_PROGRAM_COUNT)


@dataclass(frozen=True)
class LiveSearchResult:
    """Suggestions for a live-search query.

    Attributes:
        step_id: Step the query was typed into.
        query: The query as received.
        suggestions: Suggested values, local matches first.
        source: "local" when only catalogs were used, else "collaborator".
        stale: True when a newer query, a rewind or a step change superseded
            this one; suggestions are then empty.
    """

    step_id: str
    query: str
    suggestions: tuple[str, ...] = ()
    source: Literal["local", "collaborator"] = "local"
    stale: bool = False


class SearchOrchestrator:
    """Drives auto steps, previews and live search for sessions.

    Args:
        search: University search collaborator.
        config: Application settings (limits, debounce).
        sleep: Awaitable sleep used for debouncing (injectable for tests).
    """

    def __init__(
        self,
        search: UniversitySearchAdapter,
        config: Settings = settings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.search = search
        self.config = config
        self._sleep = sleep

    # =========================================================================
    # Shared helpers
    # =========================================================================

    def _discard_stale(self, session: OnboardingSession, ticket: RequestTicket) -> bool:
        if session.is_current(ticket):
            return False
        logger.debug(
            "stale_result_discarded",
            session_id=session.id,
            key=ticket.key,
            step_id=ticket.step_id,
            generation=ticket.generation,
        )
        return True

    async def _run(
        self, session: OnboardingSession, ticket: RequestTicket, request: SearchRequest
    ) -> SearchResponse:
        try:
            return await self.search.search(request)
        finally:
            session.supervisor.finish(ticket)

    @staticmethod
    def _country_request(profile: MatchProfile, with_context: bool) -> SearchRequest:
        context = None
        if with_context:
            context = ProfileContext(
                gpa=profile.gpa,
                bachelors=profile.bachelors,
                target_university=profile.target_university,
            )
        return SearchRequest(
            mode="by-country",
            country=profile.country,
            course=profile.course,
            profile_context=context,
        )

    # =========================================================================
    # Auto steps
    # =========================================================================

    async def drive(self, session: OnboardingSession) -> None:
        """Run auto steps until a user-facing step or the end, then load
        the preview if the session stopped on one."""
        await self.run_auto_steps(session)
        step = session.current_step
        if step is not None and step.kind == StepKind.PREVIEW:
            await self.load_preview(session)

    async def run_auto_steps(self, session: OnboardingSession) -> None:
        """Advance through consecutive auto steps.

        If another caller already has the current auto step in flight, wait
        for it instead of issuing a second request.
        """
        while (step := session.current_step) is not None and step.is_auto:
            key = _auto_key(step.id)
            if session.supervisor.in_flight(key):
                await session.supervisor.wait(key)
                return
            if step.kind == StepKind.AUTO_SEARCH:
                applied = await self._auto_search(session, step)
            else:
                applied = await self._auto_match(session, step)
            if not applied:
                return

    async def _auto_search(self, session: OnboardingSession, step: StepDefinition) -> bool:
        profile = build_profile(session.answers)
        ticket = session.supervisor.issue(_auto_key(step.id), session.epoch, step.id)
        response = await self._run(session, ticket, self._country_request(profile, True))
        if self._discard_stale(session, ticket):
            return False

        pool = normalize_pool(response.universities, profile.country, profile.course)
        synthetic = not pool
        if synthetic:
            pool = synthesize_pool(
                profile.country, profile.course, self.config.synthetic_pool_size
            )
            logger.info(
                "synthetic_pool_used",
                session_id=session.id,
                step_id=step.id,
                country=profile.country,
            )

        state = session.state
        state.candidate_pool = pre_rank_pool(pool, profile, self.config.search_pool_limit)
        state.pool_synthetic = synthetic
        state.pool_step_index = session.current_index
        session.advance_past(step.id)

        logger.info(
            "auto_search_complete",
            session_id=session.id,
            pool_size=len(state.candidate_pool),
            synthetic=synthetic,
        )
        return True

    async def _auto_match(self, session: OnboardingSession, step: StepDefinition) -> bool:
        profile = build_profile(session.answers)
        ticket = session.supervisor.issue(_auto_key(step.id), session.epoch, step.id)
        response = await self._run(session, ticket, self._country_request(profile, True))
        if self._discard_stale(session, ticket):
            return False

        fresh = normalize_pool(response.universities, profile.country, profile.course)
        pool = merge_pools(session.state.candidate_pool, fresh)
        if not pool:
            pool = synthesize_pool(
                profile.country, profile.course, self.config.synthetic_pool_size
            )
            logger.info(
                "synthetic_pool_used",
                session_id=session.id,
                step_id=step.id,
                country=profile.country,
            )

        matches = rank_matches(pool, profile, self.config.match_result_limit)
        state = session.state
        state.matches = matches
        state.summary = summarize_matches(matches, profile.country)
        state.matches_step_index = session.current_index
        session.advance_past(step.id)

        logger.info(
            "auto_match_complete",
            session_id=session.id,
            match_count=len(matches),
            average_score=state.summary.average_score,
        )
        return True

    # =========================================================================
    # Preview
    # =========================================================================

    async def load_preview(self, session: OnboardingSession) -> UniversityPreview | None:
        """Load (once) the preview for the current preview step.

        Returns:
            The cached or freshly loaded preview; None when the current step
            is not a preview step or the result went stale.
        """
        step = session.current_step
        if step is None or step.kind != StepKind.PREVIEW:
            return None
        if session.state.preview is not None:
            return session.state.preview
        if session.supervisor.in_flight(_PREVIEW_KEY):
            await session.supervisor.wait(_PREVIEW_KEY)
            return session.state.preview

        profile = build_profile(session.answers)
        ticket = session.supervisor.issue(_PREVIEW_KEY, session.epoch, step.id)
        response = await self._run(session, ticket, self._country_request(profile, False))
        if self._discard_stale(session, ticket):
            return None

        pool = normalize_pool(response.universities, profile.country, profile.course)
        synthetic = not pool
        if synthetic:
            pool = synthesize_pool(
                profile.country, profile.course, self.config.synthetic_pool_size
            )
        names = tuple(c.name for c in pool[:PREVIEW_SAMPLE_SIZE])
        preview = UniversityPreview(
            country=profile.country,
            course=profile.course,
            sample_names=names,
            estimated_program_count=estimate_program_count(len(names)),
            synthetic=synthetic,
        )
        session.state.preview = preview
        session.state.preview_step_index = session.current_index
        return preview

    # =========================================================================
    # Live search
    # =========================================================================

    def _local_suggestions(
        self, session: OnboardingSession, step: ChoiceGridStep | FreeTextSearchStep, query: str
    ) -> list[str]:
        sources: list[str] = list(CATALOGS.get(step.suggestions or "", ()))
        if isinstance(step, FreeTextSearchStep) and step.search_kind == "university":
            sources.extend(c.name for c in session.state.candidate_pool)
            if session.state.preview is not None:
                sources.extend(session.state.preview.sample_names)
        return filter_catalog(
            list(dict.fromkeys(sources)), query, self.config.live_search_local_limit
        )

    async def live_search(
        self, session: OnboardingSession, step_id: str, query: str
    ) -> LiveSearchResult:
        """Debounced suggestions for the current step.

        Args:
            session: Session being typed into.
            step_id: Step the query belongs to; must be current.
            query: Text typed so far.

        Returns:
            LiveSearchResult; ``stale=True`` when superseded.

        Raises:
            StepTransitionError: If the step is not current or does not
                support search.
        """
        current = session.current_step
        if current is None or current.id != step_id:
            raise StepTransitionError(
                f"Step '{step_id}' is not the current step",
                step_id=step_id,
                current_step_id=current.id if current else None,
            )
        if not isinstance(current, (ChoiceGridStep, FreeTextSearchStep)) or (
            current.suggestions is None
            and getattr(current, "search_kind", None) is None
        ):
            raise StepTransitionError(
                f"Step '{step_id}' does not support search", step_id=step_id
            )

        key = _live_key(step_id)
        ticket = session.supervisor.issue(key, session.epoch, step_id)
        await self._sleep(self.config.search_debounce_seconds)
        if self._discard_stale(session, ticket):
            session.supervisor.finish(ticket)
            return LiveSearchResult(step_id=step_id, query=query, stale=True)

        trimmed = query.strip()
        local = self._local_suggestions(session, current, trimmed)
        search_kind = getattr(current, "search_kind", None)
        if len(trimmed) < self.config.search_min_query_length or search_kind is None:
            session.supervisor.finish(ticket)
            return LiveSearchResult(step_id=step_id, query=query, suggestions=tuple(local))

        country = session.answers.resolve("country")
        request = SearchRequest(
            mode="by-query",
            query=trimmed,
            country=country.value if country is not None else "",
            kind=search_kind,
        )
        response = await self._run(session, ticket, request)
        if self._discard_stale(session, ticket):
            return LiveSearchResult(step_id=step_id, query=query, stale=True)

        remote = (
            list(response.courses)
            if search_kind == "course"
            else [u.name for u in response.universities if u.name]
        )
        suggestions = tuple(dict.fromkeys([*local, *remote]))
        return LiveSearchResult(
            step_id=step_id,
            query=query,
            suggestions=suggestions,
            source="collaborator",
        )
