"""Onboarding API router.

Endpoints:
- POST /sessions: Start a new onboarding session.
- GET /sessions/{session_id}: Current step, transcript and progress.
- POST /sessions/{session_id}/answers: Submit the current step's answer.
- POST /sessions/{session_id}/rewind: Edit an earlier step.
- GET /sessions/{session_id}/search: Live suggestions for the current step.
- GET /sessions/{session_id}/matches: Scored university matches.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Query, status

from edupath.api.deps import CurrentSession, Orchestrator, Store
from edupath.core.errors import to_api_error
from edupath.core.responses import DataResponse
from edupath.schemas.onboarding import (
    LiveSearchView,
    MatchesView,
    MatchSummaryView,
    RewindRequest,
    SessionView,
    SubmitAnswerRequest,
)
from edupath.services.onboarding_errors import (
    AnswerValidationError,
    StepTransitionError,
)

logger = structlog.get_logger()

router = APIRouter()


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def create_session(store: Store) -> DataResponse[SessionView]:
    """Start a new onboarding session at the first visible step."""
    session = store.create()
    return DataResponse(data=SessionView.from_session(session))


@router.get("/sessions/{session_id}")
async def get_session(session: CurrentSession) -> DataResponse[SessionView]:
    """Get the session view.

    Raises:
        NotFoundError: If the session is unknown or expired.
    """
    return DataResponse(data=SessionView.from_session(session))


@router.post("/sessions/{session_id}/answers")
async def submit_answer(
    body: SubmitAnswerRequest,
    session: CurrentSession,
    orchestrator: Orchestrator,
) -> DataResponse[SessionView]:
    """Submit an answer for the current step, then run any auto steps.

    Auto steps that follow the answered step (university search, final
    match) are resolved before the response is returned, so the view always
    stops on a user-facing step or the end of the flow.

    Raises:
        ValidationError: If the answer is rejected (400).
        InvalidStateError: If ``step_id`` is not the current step (422).
    """
    try:
        session.submit_answer(body.step_id, body.value, body.label)
    except AnswerValidationError as exc:
        logger.info(
            "onboarding_answer_rejected",
            session_id=session.id,
            step_id=exc.step_id,
        )
        raise to_api_error(exc) from exc
    except StepTransitionError as exc:
        raise to_api_error(exc) from exc

    await orchestrator.drive(session)
    return DataResponse(data=SessionView.from_session(session))


@router.post("/sessions/{session_id}/rewind")
async def rewind_session(
    body: RewindRequest,
    session: CurrentSession,
    orchestrator: Orchestrator,
) -> DataResponse[SessionView]:
    """Return to an earlier step, clearing every later answer and result.

    Raises:
        InvalidStateError: If the index is out of range, ahead of the
            current step or not part of the session's flow (422).
    """
    try:
        session.edit_step(body.index)
    except StepTransitionError as exc:
        raise to_api_error(exc) from exc

    await orchestrator.drive(session)
    return DataResponse(data=SessionView.from_session(session))


@router.get("/sessions/{session_id}/search")
async def live_search(
    session: CurrentSession,
    orchestrator: Orchestrator,
    step_id: Annotated[str, Query(min_length=1, max_length=100)],
    q: Annotated[str, Query(max_length=200)] = "",
) -> DataResponse[LiveSearchView]:
    """Debounced suggestions for the step being typed into.

    A query superseded by a newer one (or by a rewind) returns
    ``stale: true`` with no suggestions rather than an error.

    Raises:
        InvalidStateError: If the step is not current or not searchable (422).
    """
    try:
        result = await orchestrator.live_search(session, step_id, q)
    except StepTransitionError as exc:
        raise to_api_error(exc) from exc
    return DataResponse(data=LiveSearchView.from_result(result))


@router.get("/sessions/{session_id}/matches")
async def get_matches(session: CurrentSession) -> DataResponse[MatchesView]:
    """Scored matches, best first; empty until the match step has run."""
    state = session.state
    summary = MatchSummaryView.from_summary(state.summary) if state.summary else None
    return DataResponse(data=MatchesView(matches=list(state.matches), summary=summary))
