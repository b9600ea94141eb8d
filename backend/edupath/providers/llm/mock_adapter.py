"""In-memory LLM provider for tests and offline development.

Select it with ``LLM_PROVIDER=mock``: every task answers "{}" unless a test
scripts a reply with ``set_response`` or a failure with ``set_error``.
"""

from typing import Any

from edupath.providers.errors import ProviderError
from edupath.providers.llm.base import LLMMessage, LLMProvider, LLMResponse, TaskType

MOCK_MODEL = "mock-model"


class MockLLMProvider(LLMProvider):
    """Scripted provider that records every call it receives.

    Each entry of ``calls`` is a dict with ``method``, ``messages``,
    ``task`` and ``kwargs`` (max_tokens, temperature, json_mode).
    """

    def __init__(self, responses: dict[TaskType, str] | None = None) -> None:
        # No ProviderConfig: nothing here is configurable
        self.responses: dict[TaskType, str] = dict(responses or {})
        self.errors: dict[TaskType, ProviderError] = {}
        self.calls: list[dict[str, Any]] = []
        self.last_task: TaskType | None = None

    @property
    def provider_name(self) -> str:
        return "mock"

    def set_response(self, task: TaskType, content: str) -> None:
        self.responses[task] = content

    def set_error(self, task: TaskType, error: ProviderError) -> None:
        """Raise ``error`` from every later call for ``task``."""
        self.errors[task] = error

    def get_model_for_task(self, _task: TaskType) -> str:
        return MOCK_MODEL

    async def complete(
        self,
        messages: list[LLMMessage],
        task: TaskType,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        kwargs = {
            "max_tokens": max_tokens,
            "temperature": temperature,
            "json_mode": json_mode,
        }
        self.calls.append(
            {"method": "complete", "messages": messages, "task": task, "kwargs": kwargs}
        )
        self.last_task = task

        error = self.errors.get(task)
        if error is not None:
            raise error

        return LLMResponse(
            content=self.responses.get(task, "{}"),
            model=MOCK_MODEL,
            input_tokens=100,
            output_tokens=50,
            finish_reason="stop",
            latency_ms=10,
        )

    def assert_called_with_task(self, task: TaskType) -> None:
        seen = [call["task"] for call in self.calls]
        assert task in seen, f"Expected {task}, got {seen}"
