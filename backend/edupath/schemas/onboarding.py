"""Onboarding API request and response schemas.

Request models validate the HTTP payload shape only; answer semantics are
checked by the flow engine. Response views are built from the session
context with ``from_session`` style constructors.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from edupath.schemas.university import ScoredUniversity
from edupath.services.onboarding_session import OnboardingSession, UniversityPreview
from edupath.services.onboarding_steps import (
    ENGLISH_TEST_SCALES,
    ChoiceGridStep,
    FreeTextSearchStep,
    IntroStep,
    MonthPickerStep,
    NumericStep,
    ScaledScoreStep,
    StepDefinition,
)
from edupath.services.search_orchestrator import LiveSearchResult
from edupath.services.university_match import MatchSummary

# =============================================================================
# Requests
# =============================================================================


class SubmitAnswerRequest(BaseModel):
    """Answer for the current step."""

    model_config = ConfigDict(extra="forbid")

    step_id: str = Field(..., min_length=1, max_length=100)
    value: str = Field(default="", max_length=500)
    label: str | None = Field(default=None, max_length=500)


class RewindRequest(BaseModel):
    """Return to an earlier step by registry index."""

    model_config = ConfigDict(extra="forbid")

    index: int = Field(..., ge=0)


# =============================================================================
# Step view
# =============================================================================


class OptionView(BaseModel):
    value: str
    label: str


class ScaleView(BaseModel):
    name: str
    minimum: float
    maximum: float


class StepView(BaseModel):
    """What a client needs to render one step.

    Kind-specific fields are None for kinds that do not use them.
    """

    index: int
    id: str
    kind: str
    prompt: str
    options: list[OptionView] | None = None
    allow_custom: bool = False
    optional: bool = False
    placeholder: str | None = None
    searchable: bool = False
    minimum: int | None = None
    maximum: int | None = None
    unit: str | None = None
    scales: list[ScaleView] | None = None

    @classmethod
    def from_step(
        cls, index: int, step: StepDefinition, session: OnboardingSession
    ) -> "StepView":
        view = cls(index=index, id=step.id, kind=step.kind.value, prompt=step.prompt)
        if isinstance(step, ChoiceGridStep):
            view.options = [OptionView(value=o.value, label=o.label) for o in step.options]
            view.allow_custom = step.allow_custom
            view.searchable = step.suggestions is not None
        elif isinstance(step, FreeTextSearchStep):
            view.optional = step.optional
            view.placeholder = step.placeholder or None
            view.searchable = step.suggestions is not None or step.search_kind is not None
        elif isinstance(step, NumericStep):
            view.minimum = step.minimum
            view.maximum = step.maximum
            view.unit = step.unit or None
        elif isinstance(step, MonthPickerStep):
            year = session.start_year
            view.options = [
                OptionView(value=f"{b}-{year}", label=f"{b} {year}") for b in step.buckets
            ]
        elif isinstance(step, ScaledScoreStep):
            if step.measure == "english":
                test = session.answers.resolve(step.scale_source or "")
                scale = ENGLISH_TEST_SCALES.get(test.value) if test else None
                view.scales = (
                    [ScaleView(name=scale.name, minimum=scale.minimum, maximum=scale.maximum)]
                    if scale
                    else None
                )
            else:
                view.scales = [
                    ScaleView(name="cgpa", minimum=0, maximum=10),
                    ScaleView(name="percentage", minimum=0, maximum=100),
                ]
        elif isinstance(step, IntroStep):
            view.options = [OptionView(value=step.acknowledgement, label="Let's begin")]
        return view


# =============================================================================
# Session view
# =============================================================================


class TranscriptEntryView(BaseModel):
    index: int
    step_id: str
    value: str
    label: str


class ProgressView(BaseModel):
    completed: int
    total: int


class PreviewView(BaseModel):
    country: str
    course: str
    sample_names: list[str]
    estimated_program_count: int
    synthetic: bool

    @classmethod
    def from_preview(cls, preview: UniversityPreview) -> "PreviewView":
        return cls(
            country=preview.country,
            course=preview.course,
            sample_names=list(preview.sample_names),
            estimated_program_count=preview.estimated_program_count,
            synthetic=preview.synthetic,
        )


class MatchSummaryView(BaseModel):
    count: int
    average_score: int
    top_pick: str | None
    country: str
    synthetic: bool

    @classmethod
    def from_summary(cls, summary: MatchSummary) -> "MatchSummaryView":
        return cls(
            count=summary.count,
            average_score=summary.average_score,
            top_pick=summary.top_pick,
            country=summary.country,
            synthetic=summary.synthetic,
        )


class SessionView(BaseModel):
    """Full onboarding session state for the client.

    Attributes:
        id: Session id.
        selected_flow: Flow chosen at the flow selection step, if any.
        current_step: Step to render; None once the flow is done.
        is_done: True when every visible step has been completed.
        progress: Completed and total visible steps.
        transcript: Answered steps in order (each can be edited by index).
        preview: Program-count preview, once loaded.
        match_summary: Summary of scored matches, once computed.
    """

    id: str
    selected_flow: str | None
    current_step: StepView | None
    is_done: bool
    progress: ProgressView
    transcript: list[TranscriptEntryView]
    preview: PreviewView | None = None
    match_summary: MatchSummaryView | None = None

    @classmethod
    def from_session(cls, session: OnboardingSession) -> "SessionView":
        step = session.current_step
        completed, total = session.progress()
        state = session.state
        return cls(
            id=session.id,
            selected_flow=session.selected_flow,
            current_step=(
                StepView.from_step(session.current_index, step, session) if step else None
            ),
            is_done=session.is_done,
            progress=ProgressView(completed=completed, total=total),
            transcript=[
                TranscriptEntryView(
                    index=e.index,
                    step_id=e.step.id,
                    value=e.answer.value,
                    label=e.answer.label,
                )
                for e in session.transcript()
            ],
            preview=PreviewView.from_preview(state.preview) if state.preview else None,
            match_summary=(
                MatchSummaryView.from_summary(state.summary) if state.summary else None
            ),
        )


class MatchesView(BaseModel):
    """Scored matches, best first, with their summary."""

    matches: list[ScoredUniversity]
    summary: MatchSummaryView | None


class LiveSearchView(BaseModel):
    step_id: str
    query: str
    suggestions: list[str]
    source: Literal["local", "collaborator"]
    stale: bool

    @classmethod
    def from_result(cls, result: LiveSearchResult) -> "LiveSearchView":
        return cls(
            step_id=result.step_id,
            query=result.query,
            suggestions=list(result.suggestions),
            source=result.source,
            stale=result.stale,
        )
