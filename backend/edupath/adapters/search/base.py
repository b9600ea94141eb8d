"""Abstract base class and types for university search collaborators.

The onboarding orchestrator only sees UniversitySearchAdapter. Concrete
adapters decide how to answer (LLM, static dataset, remote API) and must
never raise: any failure is reported as an empty SearchResponse.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

from edupath.prompts.university_search import ProfileContext
from edupath.schemas.university import PartialUniversity

SearchMode = Literal["by-country", "by-query"]
SearchKind = Literal["university", "course"]


@dataclass(frozen=True)
class SearchRequest:
    """Parameters for one collaborator call.

    Attributes:
        mode: "by-country" lists universities for country+course;
            "by-query" matches a partial name typed by the user.
        country: Destination country (by-country, optionally by-query).
        course: Intended course (by-country).
        query: Partial text typed by the user (by-query).
        kind: What a by-query search returns: universities or course names.
        profile_context: Optional applicant details for by-country searches.
    """

    mode: SearchMode
    country: str = ""
    course: str = ""
    query: str = ""
    kind: SearchKind = "university"
    profile_context: ProfileContext | None = None


@dataclass(frozen=True)
class SearchResponse:
    """Collaborator result.

    Attributes:
        universities: Partial university rows (possibly empty).
        courses: Course names for course-kind queries.
    """

    universities: tuple[PartialUniversity, ...] = ()
    courses: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when the collaborator returned nothing usable."""
        return not self.universities and not self.courses


class UniversitySearchAdapter(ABC):
    """Abstract base class for university search collaborators."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return the canonical name for this collaborator (for logging)."""
        ...

    @abstractmethod
    async def search(self, request: SearchRequest) -> SearchResponse:
        """Run one search.

        Args:
            request: Search parameters.

        Returns:
            SearchResponse; empty on any failure.
        """
        ...
