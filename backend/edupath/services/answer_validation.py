"""Answer validation at the submission boundary.

Each step kind has its own rule. A rejected answer raises
AnswerValidationError and leaves the session untouched, so the step stays
current. Accepted answers come back canonicalized:

- choice-grid: one of the options; custom values only where allowed
  (custom values matching a catalog entry adopt its spelling)
- free-text-search: non-empty unless optional (then value "" / "Skipped")
- numeric: whole number within bounds, "," "_" and spaces ignored
- scaled-score: GPA as CGPA (0-10) or "NN%" (divided by 10, two decimals);
  English scores bounded by the selected test's range
- month-picker: "<bucket>-<year>" for the session's start year
- intro / preview: any acknowledgement
- auto steps: never accept submissions

An empty label is replaced with the canonical value.
"""

import math
import re
from dataclasses import dataclass

from edupath.services.answer_store import AnswerStore
from edupath.services.onboarding_catalog import CATALOGS
from edupath.services.onboarding_errors import AnswerValidationError
from edupath.services.onboarding_steps import (
    ENGLISH_TEST_SCALES,
    GPA_SCALES,
    ChoiceGridStep,
    FreeTextSearchStep,
    IntroStep,
    MonthPickerStep,
    NumericStep,
    PreviewStep,
    ScaledScoreStep,
    StepDefinition,
)

MAX_ANSWER_LENGTH = 200
"""Longest accepted value or label."""

SKIPPED_LABEL = "Skipped"

_NUMERIC_SEPARATORS = re.compile(r"[,_\s]")
_WHOLE_NUMBER = re.compile(r"^-?\d+$")


@dataclass(frozen=True)
class ValidatedAnswer:
    """Canonical value and label ready for the answer store."""

    value: str
    label: str


def format_score(number: float) -> str:
    """Render a score with at most two decimals ("8.50" -> "8.5")."""
    return f"{number:.2f}".rstrip("0").rstrip(".")


def _parse_float(step_id: str, raw: str) -> float:
    try:
        number = float(raw)
    except ValueError:
        raise AnswerValidationError(step_id, f"'{raw}' is not a number") from None
    if not math.isfinite(number):
        raise AnswerValidationError(step_id, f"'{raw}' is not a number")
    return number


def _check_range(step_id: str, number: float, low: float, high: float, what: str) -> None:
    if not low <= number <= high:
        raise AnswerValidationError(
            step_id, f"{what} must be between {format_score(low)} and {format_score(high)}"
        )


# =============================================================================
# Per-kind Validators
# =============================================================================


def _validate_choice(step: ChoiceGridStep, value: str) -> str:
    if value in step.option_values():
        return value
    if not value:
        raise AnswerValidationError(step.id, "a choice is required")
    if not step.allow_custom:
        allowed = ", ".join(step.option_values())
        raise AnswerValidationError(step.id, f"'{value}' is not one of: {allowed}")
    catalog = CATALOGS.get(step.suggestions or "", ())
    folded = value.casefold()
    for entry in catalog:
        if entry.casefold() == folded:
            return entry
    return value


def _validate_numeric(step: NumericStep, value: str) -> str:
    cleaned = _NUMERIC_SEPARATORS.sub("", value)
    if not _WHOLE_NUMBER.match(cleaned):
        raise AnswerValidationError(step.id, f"'{value}' is not a whole number")
    number = int(cleaned)
    if not step.minimum <= number <= step.maximum:
        raise AnswerValidationError(
            step.id, f"value must be between {step.minimum} and {step.maximum}"
        )
    return str(number)


def _validate_gpa(step: ScaledScoreStep, value: str) -> str:
    if value.endswith("%"):
        scale = GPA_SCALES["percentage"]
        percentage = _parse_float(step.id, value[:-1].strip())
        _check_range(step.id, percentage, scale.minimum, scale.maximum, "percentage")
        return format_score(round(percentage / 10, 2))
    scale = GPA_SCALES["cgpa"]
    cgpa = _parse_float(step.id, value)
    _check_range(step.id, cgpa, scale.minimum, scale.maximum, "CGPA")
    return format_score(cgpa)


def _validate_english(step: ScaledScoreStep, value: str, answers: AnswerStore) -> str:
    test = answers.resolve(step.scale_source or "")
    if test is None:
        raise AnswerValidationError(step.id, "select an English test first")
    scale = ENGLISH_TEST_SCALES.get(test.value)
    if scale is None:
        raise AnswerValidationError(step.id, f"no score scale for test '{test.value}'")
    score = _parse_float(step.id, value)
    _check_range(step.id, score, scale.minimum, scale.maximum, f"{test.label} score")
    return format_score(score)


def _validate_month(step: MonthPickerStep, value: str, start_year: int) -> str:
    allowed = [f"{bucket}-{start_year}" for bucket in step.buckets]
    if value not in allowed:
        raise AnswerValidationError(step.id, f"'{value}' is not one of: {', '.join(allowed)}")
    return value


# =============================================================================
# Entry Point
# =============================================================================


def validate_answer(
    step: StepDefinition,
    value: str,
    label: str | None,
    answers: AnswerStore,
    start_year: int,
) -> ValidatedAnswer:
    """Validate and canonicalize one submission.

    Args:
        step: Step the answer targets.
        value: Raw submitted value.
        label: Optional display label.
        answers: Current answers (English scores read the selected test).
        start_year: Year offered by month pickers in this session.

    Returns:
        ValidatedAnswer with canonical value and label.

    Raises:
        AnswerValidationError: If the answer is rejected.
    """
    if step.is_auto:
        raise AnswerValidationError(step.id, "this step advances automatically")

    value = (value or "").strip()
    label = (label or "").strip()
    if len(value) > MAX_ANSWER_LENGTH or len(label) > MAX_ANSWER_LENGTH:
        raise AnswerValidationError(
            step.id, f"answers are limited to {MAX_ANSWER_LENGTH} characters"
        )

    if isinstance(step, ChoiceGridStep):
        canonical = _validate_choice(step, value)
    elif isinstance(step, FreeTextSearchStep):
        if not value:
            if step.optional:
                return ValidatedAnswer(value="", label=SKIPPED_LABEL)
            raise AnswerValidationError(step.id, "an answer is required")
        canonical = value
    elif isinstance(step, NumericStep):
        canonical = _validate_numeric(step, value)
    elif isinstance(step, ScaledScoreStep):
        if not value:
            raise AnswerValidationError(step.id, "a score is required")
        if step.measure == "english":
            canonical = _validate_english(step, value, answers)
        else:
            canonical = _validate_gpa(step, value)
    elif isinstance(step, MonthPickerStep):
        canonical = _validate_month(step, value, start_year)
    elif isinstance(step, IntroStep):
        canonical = value or step.acknowledgement
    elif isinstance(step, PreviewStep):
        canonical = value or "continue"
    else:
        raise AnswerValidationError(step.id, f"unsupported step kind {step.kind.value}")

    return ValidatedAnswer(value=canonical, label=label or canonical)
