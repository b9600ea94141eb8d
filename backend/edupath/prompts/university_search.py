"""University search prompt templates.

Three prompt sets, one per search task:
1. By-country search: best universities for a course in a country, with the
   applicant's profile as context.
2. University query: universities whose name matches a partial query.
3. Course query: course or major names matching a partial query.

Every template asks for a single JSON object so the provider can run in JSON
mode. All user-supplied fields pass through sanitize_llm_input.
"""

from dataclasses import dataclass

from edupath.core.llm_sanitization import sanitize_llm_input

MAX_UNIVERSITIES_PER_SEARCH = 15
"""Upper bound on universities requested from the model per call."""

MAX_COURSES_PER_SEARCH = 15
"""Upper bound on course names requested from the model per call."""


@dataclass(frozen=True)
class ProfileContext:
    """Applicant details that sharpen a by-country search.

    Attributes:
        gpa: CGPA on a 10-point scale (0 when unknown).
        bachelors: Bachelor's degree name.
        target_university: University the applicant is aiming for.
    """

    gpa: float = 0.0
    bachelors: str = ""
    target_university: str = ""


# =============================================================================
# System Prompt
# =============================================================================

UNIVERSITY_SEARCH_SYSTEM_PROMPT = """You are a study-abroad research assistant for students planning a master's degree.

You return factual, widely known universities only. Never invent institutions.

Output format: a single JSON object and nothing else."""

_UNIVERSITY_FIELDS = (
    "name, country, rank (global ranking, integer), accept (acceptance rate %), "
    "tuition (USD per year), courses (array of course names), min_gpa (out of 10), "
    "min_ielts, min_toefl, loan (true if education-loan partners exist)"
)

# =============================================================================
# By-country Search
# =============================================================================

_COUNTRY_SEARCH_TEMPLATE = """Return a list of up to {limit} best universities for {course} in {country}.
Applicant profile: {bachelors} degree, {gpa} GPA (out of 10), target: {target_university}.
Each university object must have: {fields}.

Return the list under a "universities" key."""


def build_country_search_prompt(
    *,
    country: str,
    course: str,
    profile: ProfileContext | None = None,
) -> str:
    """Build the by-country search prompt.

    Args:
        country: Destination country.
        course: Intended course; empty means any field.
        profile: Optional applicant context.

    Returns:
        Formatted user prompt.
    """
    profile = profile or ProfileContext()
    return _COUNTRY_SEARCH_TEMPLATE.format(
        limit=MAX_UNIVERSITIES_PER_SEARCH,
        course=sanitize_llm_input(course) or "Higher Education",
        country=sanitize_llm_input(country) or "any country",
        bachelors=sanitize_llm_input(profile.bachelors) or "unspecified",
        gpa=profile.gpa if profile.gpa > 0 else "unknown",
        target_university=sanitize_llm_input(profile.target_university) or "none",
        fields=_UNIVERSITY_FIELDS,
    )


# =============================================================================
# Query Search
# =============================================================================

_UNIVERSITY_QUERY_TEMPLATE = """Search for universities whose name matches "{query}"{country_clause}.
Return up to {limit} results. Each university object must have: {fields}.

Return the list under a "universities" key."""

_COURSE_QUERY_TEMPLATE = """Search for courses or majors matching "{query}".
Return up to {limit} specific course names as strings.

Return the list under a "courses" key."""


def build_university_query_prompt(*, query: str, country: str = "") -> str:
    """Build the partial-name university search prompt."""
    clean_country = sanitize_llm_input(country)
    return _UNIVERSITY_QUERY_TEMPLATE.format(
        query=sanitize_llm_input(query),
        country_clause=f" in {clean_country}" if clean_country else "",
        limit=MAX_UNIVERSITIES_PER_SEARCH,
        fields=_UNIVERSITY_FIELDS,
    )


def build_course_query_prompt(*, query: str) -> str:
    """Build the course-name search prompt."""
    return _COURSE_QUERY_TEMPLATE.format(
        query=sanitize_llm_input(query),
        limit=MAX_COURSES_PER_SEARCH,
    )
