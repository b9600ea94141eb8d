"""Tests for the OpenAI-compatible chat-completions adapter.

The SDK client is mocked; no network calls are made.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import openai
import pytest

from edupath.providers.config import ProviderConfig
from edupath.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    ContextLengthError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from edupath.providers.llm.base import LLMMessage, TaskType
from edupath.providers.llm.openai_adapter import OpenAIAdapter, _classify_openai_error

MESSAGES = [LLMMessage(role="user", content="Universities in Canada")]


@pytest.fixture
def config():
    """Provider config pointing at a Groq-style endpoint."""
    return ProviderConfig(
        llm_provider="openai",
        api_key="test-api-key",
        base_url="https://api.groq.com/openai/v1",
        model="llama-3.3-70b-versatile",
        model_routing={"course_query": "llama-3.1-8b-instant"},
    )


@pytest.fixture
def mock_openai_response():
    """A chat-completions response with JSON content."""
    response = MagicMock()
    choice = MagicMock()
    choice.message.content = '{"universities": []}'
    choice.finish_reason = "stop"
    response.choices = [choice]
    response.usage = MagicMock(prompt_tokens=12, completion_tokens=7)
    return response


class TestOpenAIAdapterComplete:
    """Successful completions."""

    @pytest.mark.asyncio
    async def test_complete_returns_content_and_usage(self, config, mock_openai_response):
        with patch("edupath.providers.llm.openai_adapter.AsyncOpenAI") as client_cls:
            client = AsyncMock()
            client.chat.completions.create = AsyncMock(return_value=mock_openai_response)
            client_cls.return_value = client

            adapter = OpenAIAdapter(config)
            result = await adapter.complete(MESSAGES, TaskType.UNIVERSITY_SEARCH)

        assert result.content == '{"universities": []}'
        assert result.input_tokens == 12
        assert result.output_tokens == 7
        assert result.finish_reason == "stop"
        client_cls.assert_called_once_with(
            api_key="test-api-key",
            base_url="https://api.groq.com/openai/v1",
            timeout=config.request_timeout_s,
            max_retries=0,
        )

    @pytest.mark.asyncio
    async def test_json_mode_requests_json_object(self, config, mock_openai_response):
        with patch("edupath.providers.llm.openai_adapter.AsyncOpenAI") as client_cls:
            client = AsyncMock()
            client.chat.completions.create = AsyncMock(return_value=mock_openai_response)
            client_cls.return_value = client

            await OpenAIAdapter(config).complete(
                MESSAGES, TaskType.UNIVERSITY_SEARCH, json_mode=True
            )

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["model"] == "llama-3.3-70b-versatile"
        assert kwargs["max_tokens"] == config.default_max_tokens
        assert kwargs["messages"] == [
            {"role": "user", "content": "Universities in Canada"}
        ]

    @pytest.mark.asyncio
    async def test_plain_mode_omits_response_format(self, config, mock_openai_response):
        with patch("edupath.providers.llm.openai_adapter.AsyncOpenAI") as client_cls:
            client = AsyncMock()
            client.chat.completions.create = AsyncMock(return_value=mock_openai_response)
            client_cls.return_value = client

            await OpenAIAdapter(config).complete(
                MESSAGES, TaskType.UNIVERSITY_SEARCH, temperature=0.0
            )

        kwargs = client.chat.completions.create.call_args.kwargs
        assert "response_format" not in kwargs
        assert kwargs["temperature"] == 0.0

    def test_model_routing(self, config):
        with patch("edupath.providers.llm.openai_adapter.AsyncOpenAI"):
            adapter = OpenAIAdapter(config)
        assert adapter.get_model_for_task(TaskType.COURSE_QUERY) == "llama-3.1-8b-instant"
        assert adapter.get_model_for_task(TaskType.UNIVERSITY_QUERY) == config.model
        assert adapter.provider_name == "openai"

    @pytest.mark.asyncio
    async def test_empty_choices_give_no_content(self, config):
        response = MagicMock(choices=[], usage=None)
        with patch("edupath.providers.llm.openai_adapter.AsyncOpenAI") as client_cls:
            client = AsyncMock()
            client.chat.completions.create = AsyncMock(return_value=response)
            client_cls.return_value = client

            result = await OpenAIAdapter(config).complete(MESSAGES, TaskType.UNIVERSITY_SEARCH)

        assert result.content is None
        assert result.finish_reason == "unknown"
        assert result.input_tokens == 0


class TestOpenAIErrorMapping:
    """SDK exceptions map onto the provider error taxonomy."""

    def test_rate_limit_with_retry_after(self):
        error = openai.RateLimitError(
            message="Rate limit exceeded",
            response=MagicMock(status_code=429, headers={"retry-after": "3"}),
            body=None,
        )
        mapped = _classify_openai_error(error)
        assert isinstance(mapped, RateLimitError)
        assert mapped.retry_after_seconds == 3.0

    def test_rate_limit_with_unparseable_retry_after(self):
        error = openai.RateLimitError(
            message="Rate limit exceeded",
            response=MagicMock(status_code=429, headers={"retry-after": "soon"}),
            body=None,
        )
        assert _classify_openai_error(error).retry_after_seconds is None

    def test_authentication(self):
        error = openai.AuthenticationError(
            message="Invalid API key", response=MagicMock(status_code=401), body=None
        )
        assert isinstance(_classify_openai_error(error), AuthenticationError)

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("Request exceeds context_length limit", ContextLengthError),
            ("Blocked due to content_policy violation", ContentFilterError),
            ("Invalid request parameters", ProviderError),
        ],
    )
    def test_bad_request_variants(self, message, expected):
        error = openai.BadRequestError(
            message=message, response=MagicMock(status_code=400), body=None
        )
        assert type(_classify_openai_error(error)) is expected

    def test_connection_error_is_transient(self):
        error = openai.APIConnectionError(message="Connection failed", request=MagicMock())
        assert isinstance(_classify_openai_error(error), TransientError)

    def test_timeout_is_transient(self):
        error = openai.APITimeoutError(request=MagicMock())
        assert isinstance(_classify_openai_error(error), TransientError)

    @pytest.mark.asyncio
    async def test_complete_raises_mapped_error(self, config):
        error = openai.InternalServerError(
            message="Bad gateway", response=MagicMock(status_code=502), body=None
        )
        with patch("edupath.providers.llm.openai_adapter.AsyncOpenAI") as client_cls:
            client = AsyncMock()
            client.chat.completions.create = AsyncMock(side_effect=error)
            client_cls.return_value = client

            with pytest.raises(TransientError, match="Bad gateway"):
                await OpenAIAdapter(config).complete(MESSAGES, TaskType.UNIVERSITY_SEARCH)
