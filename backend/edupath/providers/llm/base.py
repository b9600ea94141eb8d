"""Provider-neutral LLM interface.

The university search collaborator only ever calls ``LLMProvider.complete``;
SDK types stay inside the adapters.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from edupath.providers.config import ProviderConfig


class TaskType(Enum):
    """What a completion is for; adapters route models by it.

    UNIVERSITY_SEARCH serves the preview, the bulk search and the final
    match; the two query tasks serve live search and may run on a smaller
    model.
    """

    UNIVERSITY_SEARCH = "university_search"
    UNIVERSITY_QUERY = "university_query"
    COURSE_QUERY = "course_query"


@dataclass
class LLMMessage:
    """One chat message ("system", "user" or "assistant")."""

    role: str
    content: str


@dataclass
class LLMResponse:
    """Completion result plus the usage figures that get logged.

    Attributes:
        content: Generated text; None when the provider returned no choice.
        model: Model that actually served the request.
        input_tokens: Prompt tokens billed.
        output_tokens: Completion tokens billed.
        finish_reason: "stop", "length", ... or "unknown".
        latency_ms: Wall-clock time of the call.
    """

    content: str | None
    model: str
    input_tokens: int
    output_tokens: int
    finish_reason: str
    latency_ms: float

    @property
    def truncated(self) -> bool:
        """True when generation hit the token limit (JSON is likely cut off)."""
        return self.finish_reason == "length"


class LLMProvider(ABC):
    """Chat-completion backend used by the search collaborator."""

    def __init__(self, config: "ProviderConfig") -> None:
        self.config = config

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short identifier used in logs and the collaborator's source name."""

    @abstractmethod
    async def complete(
        self,
        messages: list[LLMMessage],
        task: TaskType,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Run one non-streaming completion.

        Args:
            messages: Chat history, system prompt first.
            task: Task used for model routing.
            max_tokens: Overrides ``config.default_max_tokens``.
            temperature: Overrides ``config.default_temperature``.
            json_mode: Ask the model for a single JSON object.

        Returns:
            The completion.

        Raises:
            ProviderError: Any provider failure, already classified (see
                edupath.providers.errors).
        """

    @abstractmethod
    def get_model_for_task(self, task: TaskType) -> str:
        """Model identifier this provider uses for ``task``."""
