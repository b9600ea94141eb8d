"""LLMProvider over the OpenAI chat-completions API.

``ProviderConfig.base_url`` points the same client at Groq or any other
OpenAI-compatible gateway. The SDK's own retries are disabled; retries
belong to edupath.providers.retry.
"""

import time
from typing import TYPE_CHECKING, Any

import openai
import structlog
from openai import AsyncOpenAI

from edupath.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    ContextLengthError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from edupath.providers.llm.base import LLMMessage, LLMProvider, LLMResponse, TaskType

if TYPE_CHECKING:
    from edupath.providers.config import ProviderConfig

logger = structlog.get_logger()


def _retry_after(error: openai.RateLimitError) -> float | None:
    response = getattr(error, "response", None)
    if response is None:
        return None
    header = response.headers.get("retry-after")
    try:
        return float(header) if header is not None else None
    except ValueError:
        return None


def _classify_openai_error(error: Exception) -> ProviderError:
    """Translate an SDK exception into a ProviderError (returned, not raised)."""
    message = str(error)
    if isinstance(error, openai.RateLimitError):
        return RateLimitError(message, retry_after_seconds=_retry_after(error))
    if isinstance(error, openai.AuthenticationError):
        return AuthenticationError(message)
    if isinstance(error, openai.BadRequestError):
        lowered = message.lower()
        if "context_length" in lowered:
            return ContextLengthError(message)
        if "content_policy" in lowered:
            return ContentFilterError(message)
        return ProviderError(message)
    # covers APITimeoutError, a subclass of APIConnectionError
    if isinstance(error, (openai.APIConnectionError, openai.InternalServerError)):
        return TransientError(message)
    return ProviderError(message)


class OpenAIAdapter(LLMProvider):
    """Chat completions through ``AsyncOpenAI``."""

    def __init__(self, config: "ProviderConfig") -> None:
        super().__init__(config)
        self.client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.request_timeout_s,
            max_retries=0,
        )
        self.model_routing = dict(config.model_routing or {})

    @property
    def provider_name(self) -> str:
        return "openai"

    def get_model_for_task(self, task: TaskType) -> str:
        return self.model_routing.get(task.value, self.config.model)

    def _request_params(
        self,
        task: TaskType,
        messages: list[LLMMessage],
        max_tokens: int | None,
        temperature: float | None,
        json_mode: bool,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": self.get_model_for_task(task),
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "max_tokens": self.config.default_max_tokens if max_tokens is None else max_tokens,
            "temperature": (
                self.config.default_temperature if temperature is None else temperature
            ),
        }
        if json_mode:
            params["response_format"] = {"type": "json_object"}
        return params

    async def complete(
        self,
        messages: list[LLMMessage],
        task: TaskType,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        params = self._request_params(task, messages, max_tokens, temperature, json_mode)
        log = logger.bind(provider=self.provider_name, model=params["model"], task=task.value)
        log.info("llm_request_start", message_count=len(messages))

        started = time.monotonic()
        try:
            response = await self.client.chat.completions.create(**params)
        except openai.OpenAIError as e:
            log.error("llm_request_failed", error=str(e), error_type=type(e).__name__)
            raise _classify_openai_error(e) from e
        latency_ms = (time.monotonic() - started) * 1000
        log.info("llm_request_complete", latency_ms=round(latency_ms, 1))

        choice = response.choices[0] if response.choices else None
        usage = response.usage
        return LLMResponse(
            content=choice.message.content if choice else None,
            model=params["model"],
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            finish_reason=(choice and choice.finish_reason) or "unknown",
            latency_ms=latency_ms,
        )
