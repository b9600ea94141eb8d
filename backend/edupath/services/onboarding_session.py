"""Onboarding session context: submit, advance, rewind.

One OnboardingSession holds everything a single user's flow needs: the
current index, the answers, the selected flow, and the orchestration caches
(candidate pool, preview, matches) plus the request supervisor. Nothing is
shared between sessions.

Submission is one synchronous operation (validate, write answer and alias,
resolve the next index), so no await point can observe a half-applied
submit. A submit must target the current step; once it has advanced, a
repeated submit of the same step is rejected.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from edupath.schemas.university import CandidateUniversity, ScoredUniversity
from edupath.services.answer_store import Answer, AnswerStore
from edupath.services.answer_validation import validate_answer
from edupath.services.flow_resolver import is_step_visible, next_visible_index
from edupath.services.onboarding_errors import StepTransitionError
from edupath.services.onboarding_steps import (
    DEFAULT_REGISTRY,
    FLOW_SELECTION_STEP_ID,
    StepDefinition,
    StepRegistry,
)
from edupath.services.request_supervisor import RequestSupervisor, RequestTicket
from edupath.services.university_match import MatchSummary

logger = structlog.get_logger()


@dataclass(frozen=True)
class UniversityPreview:
    """Program-count preview for a country and course.

    Attributes:
        country: Country the preview was loaded for.
        course: Course the preview was loaded for.
        sample_names: Up to 12 university names.
        estimated_program_count: Display estimate of matching programs.
        synthetic: True when built from fallback synthesis.
    """

    country: str
    course: str
    sample_names: tuple[str, ...]
    estimated_program_count: int
    synthetic: bool


@dataclass
class OrchestrationState:
    """Results cached by auto steps and the preview step.

    Each cache remembers the index of the step that produced it so a rewind
    can drop exactly the caches at or after the rewind point.
    """

    candidate_pool: list[CandidateUniversity] = field(default_factory=list)
    pool_synthetic: bool = False
    pool_step_index: int | None = None
    preview: UniversityPreview | None = None
    preview_step_index: int | None = None
    matches: list[ScoredUniversity] = field(default_factory=list)
    summary: MatchSummary | None = None
    matches_step_index: int | None = None

    def clear(self) -> None:
        self.clear_from(0)

    def clear_from(self, index: int) -> None:
        """Drop caches produced by steps at or after ``index``."""
        if self.pool_step_index is not None and self.pool_step_index >= index:
            self.candidate_pool = []
            self.pool_synthetic = False
            self.pool_step_index = None
        if self.preview_step_index is not None and self.preview_step_index >= index:
            self.preview = None
            self.preview_step_index = None
        if self.matches_step_index is not None and self.matches_step_index >= index:
            self.matches = []
            self.summary = None
            self.matches_step_index = None


@dataclass(frozen=True)
class TranscriptEntry:
    """One answered step as shown in the conversation history."""

    index: int
    step: StepDefinition
    answer: Answer


class OnboardingSession:
    """Explicit per-user session context.

    Args:
        registry: Validated step registry.
        session_id: Optional id; generated when omitted.
        start_year: Year offered by month pickers; defaults to the current
            UTC year.
    """

    def __init__(
        self,
        registry: StepRegistry = DEFAULT_REGISTRY,
        session_id: str | None = None,
        start_year: int | None = None,
    ) -> None:
        now = datetime.now(UTC)
        self.id = session_id or uuid.uuid4().hex
        self.registry = registry
        self.answers = AnswerStore(registry.alias_table)
        self.selected_flow: str | None = None
        self.start_year = start_year or now.year
        self.epoch = 0
        self.state = OrchestrationState()
        self.supervisor = RequestSupervisor()
        self.created_at = now
        self.updated_at = now
        self.current_index = next_visible_index(0, registry, self.answers, None)

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    @property
    def is_done(self) -> bool:
        return self.current_index >= len(self.registry)

    @property
    def current_step(self) -> StepDefinition | None:
        if self.is_done:
            return None
        return self.registry[self.current_index]

    def is_visible(self, step: StepDefinition) -> bool:
        return is_step_visible(step, self.answers, self.selected_flow)

    def is_current(self, ticket: RequestTicket) -> bool:
        """Whether a request's result may still be applied.

        A result is stale when a later request was issued on its key, the
        session was rewound since, or the requesting step is no longer
        current.
        """
        step = self.current_step
        return (
            self.supervisor.is_newest(ticket)
            and ticket.epoch == self.epoch
            and step is not None
            and step.id == ticket.step_id
        )

    def transcript(self) -> list[TranscriptEntry]:
        """Answered visible steps before the current index, in order."""
        entries: list[TranscriptEntry] = []
        for index in range(min(self.current_index, len(self.registry))):
            step = self.registry[index]
            answer = self.answers.get(step.id)
            if answer is not None and self.is_visible(step):
                entries.append(TranscriptEntry(index=index, step=step, answer=answer))
        return entries

    def progress(self) -> tuple[int, int]:
        """(completed, total) visible steps, counting auto steps."""
        visible = [i for i, s in enumerate(self.registry) if self.is_visible(s)]
        completed = sum(1 for i in visible if i < self.current_index)
        return completed, len(visible)

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    def _touch(self) -> None:
        self.updated_at = datetime.now(UTC)

    def _require_current(self, step_id: str) -> StepDefinition:
        step = self.current_step
        if step_id not in self.registry:
            raise StepTransitionError(
                f"Unknown step '{step_id}'",
                step_id=step_id,
                current_step_id=step.id if step else None,
            )
        if step is None:
            raise StepTransitionError(
                "Onboarding is already complete", step_id=step_id
            )
        if step.id != step_id:
            raise StepTransitionError(
                f"Step '{step_id}' is not the current step",
                step_id=step_id,
                current_step_id=step.id,
            )
        return step

    def submit_answer(self, step_id: str, value: str, label: str | None = None) -> Answer:
        """Validate, store (with alias) and advance, as one operation.

        Args:
            step_id: Step being answered; must be the current step.
            value: Raw value.
            label: Optional display label.

        Returns:
            The stored Answer.

        Raises:
            StepTransitionError: If ``step_id`` is not the current step.
            AnswerValidationError: If the answer is rejected.
        """
        step = self._require_current(step_id)
        validated = validate_answer(step, value, label, self.answers, self.start_year)

        answer = self.answers.submit(step.id, validated.value, validated.label)
        if step.id == FLOW_SELECTION_STEP_ID:
            self.selected_flow = answer.value
        self.current_index = next_visible_index(
            self.current_index + 1, self.registry, self.answers, self.selected_flow
        )
        self._touch()

        logger.info(
            "onboarding_answer_submitted",
            session_id=self.id,
            step_id=step.id,
            flow=self.selected_flow,
            next_index=self.current_index,
        )
        return answer

    def advance_past(self, step_id: str) -> None:
        """Move beyond an auto step once its result is stored.

        Raises:
            StepTransitionError: If ``step_id`` is not the current step.
        """
        self._require_current(step_id)
        self.current_index = next_visible_index(
            self.current_index + 1, self.registry, self.answers, self.selected_flow
        )
        self._touch()

    def rewind_to(self, index: int) -> None:
        """Return to an earlier visible step, clearing everything after it.

        Deletes every answer owned by a step at or after ``index`` together
        with its alias entry. Rewinding at or before the flow selection step
        also clears the flow and every cached search result. In-flight
        requests are superseded and their results will be discarded.

        Args:
            index: Registry index of a visible step at or before the
                current index.

        Raises:
            StepTransitionError: If ``index`` is out of range, ahead of the
                current step, or not visible.
        """
        if not 0 <= index < len(self.registry):
            raise StepTransitionError(f"Step index {index} is out of range")
        if index > self.current_index:
            raise StepTransitionError(
                f"Cannot rewind forward to index {index} (current {self.current_index})"
            )
        target = self.registry[index]
        if not self.is_visible(target):
            raise StepTransitionError(
                f"Step '{target.id}' is not part of this session's flow",
                step_id=target.id,
            )

        # Nothing below can fail, so the rewind is all-or-nothing
        owned = [step.id for step in self.registry.steps[index:]]
        removed = self.answers.discard(owned)
        if index <= self.registry.flow_selection_index:
            self.selected_flow = None
            self.state.clear()
        else:
            self.state.clear_from(index)
        self.epoch += 1
        self.supervisor.invalidate_all()
        self.current_index = index
        self._touch()

        logger.info(
            "onboarding_rewound",
            session_id=self.id,
            index=index,
            step_id=target.id,
            cleared=len(removed),
            epoch=self.epoch,
        )

    def edit_step(self, index: int) -> None:
        """Alias of rewind_to used by the edit action on a transcript entry."""
        self.rewind_to(index)
