"""Build the match profile from shared answer keys.

Only shared (alias) keys are read, so the profile looks the same whichever
flow collected it. Missing answers and unparseable numbers fall back to the
product defaults.
"""

from dataclasses import dataclass

from edupath.services.answer_store import AnswerStore
from edupath.services.onboarding_steps import NO_ENGLISH_TEST

DEFAULT_COUNTRY = "USA"
DEFAULT_GPA = 6.5


@dataclass(frozen=True)
class MatchProfile:
    """Normalized applicant profile consumed by the scoring engine.

    Attributes:
        country: Destination country.
        course: Intended course ("" when unknown).
        gpa: CGPA on the 10-point scale.
        english_test: Test family ("ielts", "toefl", "pte", "duolingo", "none").
        english_score: Overall score on the test's own scale (0 when none).
        work_exp_months: Months of work experience.
        loan_amount: Requested loan in INR (0 when not asked).
        bachelors: Bachelor's degree (search context only).
        target_university: Target university (search context only).
    """

    country: str = DEFAULT_COUNTRY
    course: str = ""
    gpa: float = DEFAULT_GPA
    english_test: str = NO_ENGLISH_TEST
    english_score: float = 0.0
    work_exp_months: int = 0
    loan_amount: int = 0
    bachelors: str = ""
    target_university: str = ""


def _text(answers: AnswerStore, key: str, default: str) -> str:
    answer = answers.resolve(key)
    if answer is None or not answer.value:
        return default
    return answer.value


def _float(answers: AnswerStore, key: str, default: float) -> float:
    answer = answers.resolve(key)
    if answer is None:
        return default
    try:
        return float(answer.value)
    except ValueError:
        return default


def _int(answers: AnswerStore, key: str, default: int) -> int:
    answer = answers.resolve(key)
    if answer is None:
        return default
    try:
        return int(answer.value)
    except ValueError:
        return default


def build_profile(answers: AnswerStore) -> MatchProfile:
    """Assemble a MatchProfile from shared answer keys.

    Args:
        answers: Session answers.

    Returns:
        MatchProfile with defaults for anything missing.
    """
    target = answers.resolve("target_university")
    return MatchProfile(
        country=_text(answers, "country", DEFAULT_COUNTRY),
        course=_text(answers, "course", ""),
        gpa=_float(answers, "gpa", DEFAULT_GPA),
        english_test=_text(answers, "english_test", NO_ENGLISH_TEST),
        english_score=_float(answers, "english_score", 0.0),
        work_exp_months=_int(answers, "work_exp", 0),
        loan_amount=_int(answers, "loan_amount", 0),
        bachelors=_text(answers, "bachelors", ""),
        target_university=target.value if target is not None else "",
    )
