"""LLM-backed university search collaborator.

Builds a prompt per search mode, asks the provider for a JSON object and
parses the university (or course) list out of it. The model's output is
untrusted: missing keys, wrong shapes and invalid JSON all degrade to an
empty SearchResponse so the orchestrator can fall back to synthesis.
"""

import json
from typing import Any

import structlog
from pydantic import ValidationError

from edupath.adapters.search.base import (
    SearchRequest,
    SearchResponse,
    UniversitySearchAdapter,
)
from edupath.prompts.university_search import (
    UNIVERSITY_SEARCH_SYSTEM_PROMPT,
    build_country_search_prompt,
    build_course_query_prompt,
    build_university_query_prompt,
)
from edupath.providers.config import ProviderConfig
from edupath.providers.errors import ProviderError
from edupath.providers.llm.base import LLMMessage, LLMProvider, TaskType
from edupath.providers.retry import with_retries
from edupath.schemas.university import PartialUniversity

logger = structlog.get_logger()

_UNIVERSITY_LIST_KEYS = ("universities", "results")
_COURSE_LIST_KEYS = ("courses", "results")


def _extract_list(payload: Any, keys: tuple[str, ...]) -> list[Any] | None:
    """Pull the result list out of a parsed payload.

    Accepts a bare list or an object carrying the list under one of ``keys``.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return None


def parse_university_rows(rows: list[Any]) -> tuple[PartialUniversity, ...]:
    """Validate raw rows, skipping anything that is not an object."""
    parsed: list[PartialUniversity] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            parsed.append(PartialUniversity.model_validate(row))
        except ValidationError:
            logger.debug("search_row_discarded", keys=sorted(row)[:10])
    return tuple(parsed)


class LLMUniversitySearch(UniversitySearchAdapter):
    """University search collaborator over the LLM provider abstraction.

    Attributes:
        provider: LLM provider used for completions.
        retry_config: Retry settings passed to with_retries.
    """

    def __init__(
        self,
        provider: LLMProvider,
        retry_config: ProviderConfig | None = None,
    ) -> None:
        self.provider = provider
        self.retry_config = retry_config or ProviderConfig()

    @property
    def source_name(self) -> str:
        return f"llm:{self.provider.provider_name}"

    def _build_call(self, request: SearchRequest) -> tuple[TaskType, str]:
        if request.mode == "by-country":
            return TaskType.UNIVERSITY_SEARCH, build_country_search_prompt(
                country=request.country,
                course=request.course,
                profile=request.profile_context,
            )
        if request.kind == "course":
            return TaskType.COURSE_QUERY, build_course_query_prompt(query=request.query)
        return TaskType.UNIVERSITY_QUERY, build_university_query_prompt(
            query=request.query, country=request.country
        )

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Run one search against the LLM.

        Args:
            request: Search parameters.

        Returns:
            SearchResponse with parsed rows; empty on any provider or parse
            failure.
        """
        task, prompt = self._build_call(request)
        messages = [
            LLMMessage(role="system", content=UNIVERSITY_SEARCH_SYSTEM_PROMPT),
            LLMMessage(role="user", content=prompt),
        ]

        try:
            response = await with_retries(
                lambda: self.provider.complete(messages, task, json_mode=True),
                self.retry_config,
            )
        except ProviderError as e:
            logger.warning(
                "university_search_failed",
                source=self.source_name,
                mode=request.mode,
                error=str(e),
                error_type=type(e).__name__,
                retryable=e.retryable,
            )
            return SearchResponse()

        if not response.content:
            logger.warning(
                "university_search_empty", source=self.source_name, mode=request.mode
            )
            return SearchResponse()

        try:
            payload = json.loads(response.content)
        except json.JSONDecodeError as e:
            logger.warning(
                "university_search_malformed",
                source=self.source_name,
                mode=request.mode,
                error=str(e),
            )
            return SearchResponse()

        if task == TaskType.COURSE_QUERY:
            rows = _extract_list(payload, _COURSE_LIST_KEYS)
            if rows is None:
                logger.warning("university_search_malformed", source=self.source_name)
                return SearchResponse()
            courses = tuple(c.strip() for c in rows if isinstance(c, str) and c.strip())
            return SearchResponse(courses=courses)

        rows = _extract_list(payload, _UNIVERSITY_LIST_KEYS)
        if rows is None:
            logger.warning(
                "university_search_malformed",
                source=self.source_name,
                mode=request.mode,
                payload_type=type(payload).__name__,
            )
            return SearchResponse()

        universities = parse_university_rows(rows)
        logger.info(
            "university_search_complete",
            source=self.source_name,
            mode=request.mode,
            result_count=len(universities),
        )
        return SearchResponse(universities=universities)
