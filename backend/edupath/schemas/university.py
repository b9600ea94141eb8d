"""University schemas for search results and scored matches.

- PartialUniversity: lenient parse of one row from the search collaborator.
  Unknown keys are ignored, common key aliases are accepted, and malformed
  values become None instead of failing the whole row.
- CandidateUniversity: a normalized candidate with defaults applied.
- ScoredUniversity: a candidate plus its match score and per-factor breakdown.
"""

import math
import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_NUMERIC_NOISE = re.compile(r"[\s,$%#_]")


def _lenient_float(value: Any) -> float | None:
    """Coerce loosely formatted numbers ("25%", "$30,000", "#12") to float.

    Non-finite results ("1e400", "Infinity", NaN) and integers too large for
    a float become None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = _NUMERIC_NOISE.sub("", value)
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


class PartialUniversity(BaseModel):
    """One university row as returned by the search collaborator.

    Every field is optional. Normalization into a CandidateUniversity applies
    the documented defaults.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    country: str | None = None
    courses_offered: list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("courses_offered", "courses", "programs"),
    )
    rank: int | None = Field(
        default=None, validation_alias=AliasChoices("rank", "global_rank")
    )
    acceptance_rate: float | None = Field(
        default=None,
        validation_alias=AliasChoices("acceptance_rate", "accept", "acceptanceRate"),
    )
    min_gpa: float | None = Field(
        default=None, validation_alias=AliasChoices("min_gpa", "minGpa")
    )
    min_ielts: float | None = Field(
        default=None, validation_alias=AliasChoices("min_ielts", "minIelts")
    )
    min_toefl: float | None = Field(
        default=None, validation_alias=AliasChoices("min_toefl", "minToefl")
    )
    tuition_usd: int | None = Field(
        default=None, validation_alias=AliasChoices("tuition_usd", "tuition")
    )
    offers_loan_partnership: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("offers_loan_partnership", "loan"),
    )

    @field_validator("name", "country", mode="before")
    @classmethod
    def clean_text(cls, value: Any) -> str | None:
        """Strip text fields; blanks and non-strings become None."""
        if not isinstance(value, str):
            return None
        stripped = value.strip()
        return stripped or None

    @field_validator("courses_offered", mode="before")
    @classmethod
    def clean_courses(cls, value: Any) -> list[str] | None:
        """Accept a list of names or a comma-separated string."""
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, list):
            return None
        courses = [c.strip() for c in value if isinstance(c, str) and c.strip()]
        return courses or None

    @field_validator("rank", mode="before")
    @classmethod
    def clean_rank(cls, value: Any) -> int | None:
        """Keep positive whole ranks only."""
        number = _lenient_float(value)
        if number is None or number < 1:
            return None
        return int(number)

    @field_validator("acceptance_rate", mode="before")
    @classmethod
    def clean_acceptance(cls, value: Any) -> float | None:
        """Acceptance rate as a percentage in [0, 100]."""
        number = _lenient_float(value)
        if number is None or not 0 <= number <= 100:
            return None
        return number

    @field_validator("min_gpa", mode="before")
    @classmethod
    def clean_min_gpa(cls, value: Any) -> float | None:
        """Minimum GPA on the 10-point scale."""
        number = _lenient_float(value)
        if number is None or not 0 <= number <= 10:
            return None
        return number

    @field_validator("min_ielts", mode="before")
    @classmethod
    def clean_min_ielts(cls, value: Any) -> float | None:
        """IELTS band in [0, 9]."""
        number = _lenient_float(value)
        if number is None or not 0 <= number <= 9:
            return None
        return number

    @field_validator("min_toefl", mode="before")
    @classmethod
    def clean_min_toefl(cls, value: Any) -> float | None:
        """TOEFL iBT score in [0, 120]."""
        number = _lenient_float(value)
        if number is None or not 0 <= number <= 120:
            return None
        return number

    @field_validator("tuition_usd", mode="before")
    @classmethod
    def clean_tuition(cls, value: Any) -> int | None:
        """Yearly tuition in whole USD."""
        number = _lenient_float(value)
        if number is None or number < 0:
            return None
        return int(number)

    @field_validator("offers_loan_partnership", mode="before")
    @classmethod
    def clean_loan(cls, value: Any) -> bool | None:
        """Booleans and yes/no style strings only."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "yes", "y", "1"):
                return True
            if lowered in ("false", "no", "n", "0"):
                return False
        return None


class CandidateUniversity(BaseModel):
    """A normalized university candidate ready for scoring.

    Attributes:
        name: University name.
        country: Country the university is in.
        courses_offered: Lowercased course names.
        rank: Global rank; None when unknown (sorted last).
        acceptance_rate: Acceptance rate percentage.
        min_gpa: Minimum CGPA on the 10-point scale.
        min_ielts: Minimum IELTS band.
        min_toefl: Minimum TOEFL iBT score.
        tuition_usd: Yearly tuition in USD.
        offers_loan_partnership: Whether education-loan partners exist.
        synthetic: True for rows produced by the fallback generator.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    country: str
    courses_offered: list[str] = Field(default_factory=list)
    rank: int | None = None
    acceptance_rate: float | None = None
    min_gpa: float = 7.0
    min_ielts: float | None = None
    min_toefl: float | None = None
    tuition_usd: int | None = None
    offers_loan_partnership: bool = False
    synthetic: bool = False


class ScoreBreakdown(BaseModel):
    """Per-factor contribution to a match score."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    gpa_fit: int
    english_fit: int
    course_relevance: int
    access_fit: int


class ScoredUniversity(CandidateUniversity):
    """A candidate with its match score (0-100) and breakdown."""

    match_score: int
    breakdown: ScoreBreakdown
