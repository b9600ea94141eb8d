"""Onboarding step definitions and the validated step registry.

Each step kind is its own frozen dataclass carrying only the configuration
that kind needs (options, numeric bounds, scales, month buckets). Fields
common to all kinds live on StepDefinition:

- id: unique step id, also the primary answer key
- flows: flow tags the step belongs to; empty means every flow
- skip_if: hide the step when an earlier answer equals a value
- alias: shared profile key the answer is also written under

Flows are mutually exclusive per session, so at most one aliased step per
shared key is visible in any session. StepRegistry enforces that (and the
other structural rules) when it is built; the default registry is built at
import time so a malformed registry fails application startup.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Literal

from edupath.services.onboarding_catalog import FEATURED_COUNTRIES
from edupath.services.onboarding_errors import StepRegistryError

# =============================================================================
# Flows
# =============================================================================

FLOW_PLAN = "plan"
FLOW_LOAN = "loan"
FLOW_COMPARE = "compare"

ALL_FLOWS: frozenset[str] = frozenset({FLOW_PLAN, FLOW_LOAN, FLOW_COMPARE})

FLOW_SELECTION_STEP_ID = "goal"
"""Step whose answer sets the session's flow."""

MONTH_BUCKETS: tuple[str, ...] = ("Jan to Mar", "Apr to Jun", "Jul to Sep", "Oct to Dec")


class StepKind(Enum):
    """Kinds of onboarding steps."""

    CHOICE_GRID = "choice-grid"
    FREE_TEXT_SEARCH = "free-text-search"
    NUMERIC = "numeric"
    SCALED_SCORE = "scaled-score"
    MONTH_PICKER = "month-picker"
    AUTO_SEARCH = "auto-search"
    AUTO_MATCH = "auto-match"
    INTRO = "intro"
    PREVIEW = "preview"


AUTO_KINDS: frozenset[StepKind] = frozenset({StepKind.AUTO_SEARCH, StepKind.AUTO_MATCH})
"""Kinds the orchestrator advances itself; users never submit them."""


# =============================================================================
# Step Variants
# =============================================================================


@dataclass(frozen=True)
class SkipCondition:
    """Hide a step when ``step_id`` was answered with ``value``."""

    step_id: str
    value: str


@dataclass(frozen=True)
class ChoiceOption:
    """One selectable option of a choice-grid step."""

    value: str
    label: str


@dataclass(frozen=True)
class ScoreScale:
    """Inclusive numeric range for a scaled score."""

    name: str
    minimum: float
    maximum: float


GPA_SCALES: dict[str, ScoreScale] = {
    "cgpa": ScoreScale("cgpa", 0, 10),
    "percentage": ScoreScale("percentage", 0, 100),
}

ENGLISH_TEST_SCALES: dict[str, ScoreScale] = {
    "ielts": ScoreScale("ielts", 0, 9),
    "toefl": ScoreScale("toefl", 0, 120),
    "pte": ScoreScale("pte", 10, 90),
    "duolingo": ScoreScale("duolingo", 10, 160),
}

NO_ENGLISH_TEST = "none"


@dataclass(frozen=True, kw_only=True)
class StepDefinition:
    """Fields shared by every step kind."""

    kind: ClassVar[StepKind]

    id: str
    prompt: str = ""
    flows: frozenset[str] = frozenset()
    skip_if: SkipCondition | None = None
    alias: str | None = None

    @property
    def is_auto(self) -> bool:
        """True for steps the orchestrator drives."""
        return self.kind in AUTO_KINDS

    def in_flow(self, flow: str | None) -> bool:
        """Whether the step belongs to ``flow``.

        Steps without flow tags belong to every flow (and to the session
        before a flow is selected). Flow-tagged steps never match an unset
        flow.
        """
        if not self.flows:
            return True
        return flow is not None and flow in self.flows


@dataclass(frozen=True, kw_only=True)
class ChoiceGridStep(StepDefinition):
    """Pick one option; ``allow_custom`` also accepts free values."""

    kind: ClassVar[StepKind] = StepKind.CHOICE_GRID

    options: tuple[ChoiceOption, ...] = ()
    allow_custom: bool = False
    suggestions: str | None = None

    def option_values(self) -> tuple[str, ...]:
        return tuple(o.value for o in self.options)

    def label_for(self, value: str) -> str | None:
        for option in self.options:
            if option.value == value:
                return option.label
        return None


@dataclass(frozen=True, kw_only=True)
class FreeTextSearchStep(StepDefinition):
    """Free text with local suggestions and optional collaborator search.

    Attributes:
        placeholder: Input hint.
        optional: Empty answers are accepted and stored as skipped.
        suggestions: Catalog name for local live search.
        search_kind: Collaborator query kind for live search, if any.
    """

    kind: ClassVar[StepKind] = StepKind.FREE_TEXT_SEARCH

    placeholder: str = ""
    optional: bool = False
    suggestions: str | None = None
    search_kind: Literal["university", "course"] | None = None


@dataclass(frozen=True, kw_only=True)
class NumericStep(StepDefinition):
    """Whole number within inclusive bounds."""

    kind: ClassVar[StepKind] = StepKind.NUMERIC

    minimum: int = 0
    maximum: int = 0
    unit: str = ""


@dataclass(frozen=True, kw_only=True)
class ScaledScoreStep(StepDefinition):
    """Score on a scale chosen by the answer itself or an earlier answer.

    Attributes:
        measure: "gpa" (CGPA out of 10 or a percentage) or "english"
            (bounds taken from the selected English test).
        scale_source: Shared key whose answer selects the scale (english).
    """

    kind: ClassVar[StepKind] = StepKind.SCALED_SCORE

    measure: Literal["gpa", "english"] = "gpa"
    scale_source: str | None = None


@dataclass(frozen=True, kw_only=True)
class MonthPickerStep(StepDefinition):
    """Start window chosen as "<bucket>-<year>" for the session's year."""

    kind: ClassVar[StepKind] = StepKind.MONTH_PICKER

    buckets: tuple[str, ...] = MONTH_BUCKETS


@dataclass(frozen=True, kw_only=True)
class IntroStep(StepDefinition):
    """Acknowledgement screen for a flow."""

    kind: ClassVar[StepKind] = StepKind.INTRO

    acknowledgement: str = "begin"


@dataclass(frozen=True, kw_only=True)
class PreviewStep(StepDefinition):
    """Program-count preview for the chosen country and course."""

    kind: ClassVar[StepKind] = StepKind.PREVIEW


@dataclass(frozen=True, kw_only=True)
class AutoSearchStep(StepDefinition):
    """Bulk collaborator search that fills the candidate pool."""

    kind: ClassVar[StepKind] = StepKind.AUTO_SEARCH


@dataclass(frozen=True, kw_only=True)
class AutoMatchStep(StepDefinition):
    """Final profile-aware search plus scoring."""

    kind: ClassVar[StepKind] = StepKind.AUTO_MATCH


# =============================================================================
# Registry
# =============================================================================


def _overlap(a: frozenset[str], b: frozenset[str]) -> bool:
    """Whether two flow sets can be visible in the same session."""
    return not a or not b or bool(a & b)


def find_registry_problems(steps: Sequence[StepDefinition]) -> list[str]:
    """Collect every structural problem in a step list.

    Args:
        steps: Ordered step definitions.

    Returns:
        Problem descriptions; empty when the registry is valid.
    """
    problems: list[str] = []
    if not steps:
        return ["registry is empty"]

    index_of: dict[str, int] = {}
    for i, step in enumerate(steps):
        if step.id in index_of:
            problems.append(f"duplicate step id '{step.id}'")
        else:
            index_of[step.id] = i

    for i, step in enumerate(steps):
        unknown_flows = step.flows - ALL_FLOWS
        if unknown_flows:
            problems.append(f"step '{step.id}' has unknown flows {sorted(unknown_flows)}")

        if step.skip_if is not None:
            target = index_of.get(step.skip_if.step_id)
            if target is None:
                problems.append(
                    f"step '{step.id}' skip_if references unknown step "
                    f"'{step.skip_if.step_id}'"
                )
            elif target >= i:
                problems.append(
                    f"step '{step.id}' skip_if must reference an earlier step, "
                    f"got '{step.skip_if.step_id}'"
                )

        if step.alias is not None:
            if step.is_auto or step.kind in (StepKind.INTRO, StepKind.PREVIEW):
                problems.append(f"step '{step.id}' of kind {step.kind.value} cannot alias")
            if step.alias in index_of and step.alias != step.id:
                problems.append(
                    f"alias '{step.alias}' on step '{step.id}' shadows another step id"
                )

        if isinstance(step, ChoiceGridStep):
            values = step.option_values()
            if not values and not step.allow_custom:
                problems.append(f"choice step '{step.id}' has no options")
            if len(set(values)) != len(values):
                problems.append(f"choice step '{step.id}' has duplicate option values")
        if isinstance(step, NumericStep) and step.minimum > step.maximum:
            problems.append(f"numeric step '{step.id}' has minimum above maximum")
        if (
            isinstance(step, ScaledScoreStep)
            and step.measure == "english"
            and not step.scale_source
        ):
            problems.append(f"english score step '{step.id}' needs a scale_source")

    aliased = [s for s in steps if s.alias is not None]
    for a_pos, first in enumerate(aliased):
        for second in aliased[a_pos + 1 :]:
            if first.alias == second.alias and _overlap(first.flows, second.flows):
                problems.append(
                    f"alias '{first.alias}' is written by both '{first.id}' and "
                    f"'{second.id}' in the same flow"
                )

    selector = next((s for s in steps if s.id == FLOW_SELECTION_STEP_ID), None)
    if selector is None:
        problems.append(f"flow selection step '{FLOW_SELECTION_STEP_ID}' is missing")
    elif not isinstance(selector, ChoiceGridStep) or selector.flows:
        problems.append(
            f"flow selection step '{FLOW_SELECTION_STEP_ID}' must be an all-flows "
            "choice step"
        )
    elif set(selector.option_values()) != ALL_FLOWS or selector.allow_custom:
        problems.append(
            f"flow selection step '{FLOW_SELECTION_STEP_ID}' options must be exactly "
            f"{sorted(ALL_FLOWS)}"
        )

    return problems


@dataclass(frozen=True)
class StepRegistry:
    """Ordered, validated, immutable list of steps.

    Raises:
        StepRegistryError: On construction, if the step list is malformed.
    """

    steps: tuple[StepDefinition, ...]
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        problems = find_registry_problems(self.steps)
        if problems:
            raise StepRegistryError(problems)
        object.__setattr__(self, "_index", {s.id: i for i, s in enumerate(self.steps)})

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[StepDefinition]:
        return iter(self.steps)

    def __getitem__(self, index: int) -> StepDefinition:
        return self.steps[index]

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._index

    def index_of(self, step_id: str) -> int:
        """Position of a step.

        Raises:
            KeyError: If the step id is unknown.
        """
        return self._index[step_id]

    def get(self, step_id: str) -> StepDefinition:
        """Step by id.

        Raises:
            KeyError: If the step id is unknown.
        """
        return self.steps[self._index[step_id]]

    @property
    def flow_selection_index(self) -> int:
        return self._index[FLOW_SELECTION_STEP_ID]

    @property
    def alias_table(self) -> dict[str, str]:
        """Static mapping of step id to shared profile key."""
        return {s.id: s.alias for s in self.steps if s.alias is not None}


# =============================================================================
# Default Steps
# =============================================================================

_ENGLISH_TEST_OPTIONS = (
    ChoiceOption("ielts", "IELTS"),
    ChoiceOption("toefl", "TOEFL"),
    ChoiceOption("pte", "PTE"),
    ChoiceOption("duolingo", "Duolingo"),
    ChoiceOption(NO_ENGLISH_TEST, "Not taken yet"),
)


def _country_step(step_id: str, flow: str) -> ChoiceGridStep:
    return ChoiceGridStep(
        id=step_id,
        prompt="Which country would you like to study in?",
        flows=frozenset({flow}),
        alias="country",
        options=tuple(ChoiceOption(c, c) for c in FEATURED_COUNTRIES),
        allow_custom=True,
        suggestions="countries",
    )


def _course_step(step_id: str, flow: str) -> FreeTextSearchStep:
    return FreeTextSearchStep(
        id=step_id,
        prompt="Which field interests you the most?",
        flows=frozenset({flow}),
        alias="course",
        placeholder="e.g. Computer Science, Data Science, MBA",
        suggestions="courses",
        search_kind="course",
    )


def _gpa_step(step_id: str, flow: str) -> ScaledScoreStep:
    return ScaledScoreStep(
        id=step_id,
        prompt="What is your current academic score (CGPA / Percentage)?",
        flows=frozenset({flow}),
        alias="gpa",
        measure="gpa",
    )


def _work_exp_step(step_id: str, flow: str) -> NumericStep:
    return NumericStep(
        id=step_id,
        prompt="Enter your work experience (in months).",
        flows=frozenset({flow}),
        alias="work_exp",
        minimum=0,
        maximum=600,
        unit="months",
    )


def _english_steps(prefix: str, flow: str) -> tuple[ChoiceGridStep, ScaledScoreStep]:
    test_step = ChoiceGridStep(
        id=f"{prefix}_english_test",
        prompt="Which English proficiency test have you taken?",
        flows=frozenset({flow}),
        alias="english_test",
        options=_ENGLISH_TEST_OPTIONS,
    )
    score_step = ScaledScoreStep(
        id=f"{prefix}_english_score",
        prompt="What was your overall score?",
        flows=frozenset({flow}),
        alias="english_score",
        skip_if=SkipCondition(test_step.id, NO_ENGLISH_TEST),
        measure="english",
        scale_source="english_test",
    )
    return test_step, score_step


def build_default_steps() -> tuple[StepDefinition, ...]:
    """Build the product's step list in display order."""
    plan = frozenset({FLOW_PLAN})
    loan = frozenset({FLOW_LOAN})
    compare = frozenset({FLOW_COMPARE})

    return (
        ChoiceGridStep(
            id=FLOW_SELECTION_STEP_ID,
            prompt="How can we support you with your master's?",
            options=(
                ChoiceOption(FLOW_PLAN, "Help me find the right university"),
                ChoiceOption(FLOW_LOAN, "Need help with an education loan"),
                ChoiceOption(FLOW_COMPARE, "Evaluate my shortlisted universities"),
            ),
        ),
        # Find a university
        IntroStep(id="plan_intro", prompt="Let's find the right program for you.", flows=plan),
        _country_step("plan_country", FLOW_PLAN),
        _course_step("plan_course", FLOW_PLAN),
        PreviewStep(id="university_preview", flows=plan),
        MonthPickerStep(
            id="plan_start_when",
            prompt="When are you planning to start your Master's?",
            flows=plan,
            alias="start_when",
        ),
        FreeTextSearchStep(
            id="bachelors_degree",
            prompt="What is your bachelor's degree?",
            flows=plan,
            alias="bachelors",
            placeholder="e.g. B.Tech in Computer Science",
            suggestions="bachelors",
            search_kind="course",
        ),
        FreeTextSearchStep(
            id="target_university",
            prompt="Any specific university you're targeting? (optional)",
            flows=plan,
            alias="target_university",
            optional=True,
            search_kind="university",
        ),
        _work_exp_step("plan_work_exp", FLOW_PLAN),
        _gpa_step("plan_gpa", FLOW_PLAN),
        *_english_steps("plan", FLOW_PLAN),
        # Education loan
        IntroStep(id="loan_intro", prompt="Let's estimate your loan options.", flows=loan),
        _country_step("loan_country", FLOW_LOAN),
        _course_step("loan_course", FLOW_LOAN),
        ChoiceGridStep(
            id="loan_admit_status",
            prompt="Where are you in the admission process?",
            flows=loan,
            alias="admit_status",
            options=(
                ChoiceOption("admitted", "I have an admit"),
                ChoiceOption("applied", "I've applied"),
                ChoiceOption("exploring", "Still exploring"),
            ),
        ),
        NumericStep(
            id="loan_amount",
            prompt="How much do you need to borrow (INR)?",
            flows=loan,
            alias="loan_amount",
            minimum=1,
            maximum=100_000_000,
            unit="INR",
        ),
        _gpa_step("loan_gpa", FLOW_LOAN),
        *_english_steps("loan", FLOW_LOAN),
        # Compare shortlisted universities
        IntroStep(
            id="compare_intro", prompt="Let's evaluate your shortlist.", flows=compare
        ),
        _country_step("compare_country", FLOW_COMPARE),
        _course_step("compare_course", FLOW_COMPARE),
        FreeTextSearchStep(
            id="compare_shortlist",
            prompt="Which universities have you shortlisted? (comma separated)",
            flows=compare,
            alias="shortlist",
            search_kind="university",
        ),
        _gpa_step("compare_gpa", FLOW_COMPARE),
        _work_exp_step("compare_work_exp", FLOW_COMPARE),
        *_english_steps("compare", FLOW_COMPARE),
        # Shared tail
        AutoSearchStep(id="ai_search", flows=ALL_FLOWS),
        AutoMatchStep(id="ai_match", flows=ALL_FLOWS),
    )


DEFAULT_REGISTRY = StepRegistry(build_default_steps())
"""Validated product registry; constructing it raises StepRegistryError."""
