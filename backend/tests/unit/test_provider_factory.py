"""Tests for provider configuration and the provider factory."""

import pytest
from pydantic import SecretStr

from edupath.core.config import Settings
from edupath.providers import factory
from edupath.providers.config import ProviderConfig
from edupath.providers.errors import RateLimitError
from edupath.providers.factory import get_llm_provider, reset_providers
from edupath.providers.llm.base import LLMMessage, TaskType
from edupath.providers.llm.mock_adapter import MockLLMProvider
from edupath.providers.llm.openai_adapter import OpenAIAdapter


@pytest.fixture(autouse=True)
def _reset():
    reset_providers()
    yield
    reset_providers()


class TestProviderConfig:
    """ProviderConfig defaults and settings mapping."""

    def test_defaults(self):
        config = ProviderConfig()
        assert config.llm_provider == "openai"
        assert config.model == "llama-3.3-70b-versatile"
        assert config.max_retries == 2
        assert config.retry_base_delay_ms == 500
        assert config.retry_max_delay_ms == 5000
        assert config.request_timeout_s == 20.0

    def test_from_settings(self):
        settings = Settings(
            llm_provider="openai",
            llm_api_key=SecretStr("gsk-test"),
            llm_base_url="https://api.groq.com/openai/v1",
            llm_model="llama-3.1-8b-instant",
        )

        config = ProviderConfig.from_settings(settings)

        assert config.api_key == "gsk-test"
        assert config.base_url == "https://api.groq.com/openai/v1"
        assert config.model == "llama-3.1-8b-instant"

    def test_empty_key_and_url_become_none(self):
        config = ProviderConfig.from_settings(Settings())
        assert config.api_key is None
        assert config.base_url is None


class TestGetLLMProvider:
    """Singleton factory."""

    def test_mock_provider(self):
        provider = get_llm_provider(ProviderConfig(llm_provider="mock"))
        assert isinstance(provider, MockLLMProvider)

    def test_openai_provider(self):
        provider = get_llm_provider(ProviderConfig(llm_provider="openai", api_key="k"))
        assert isinstance(provider, OpenAIAdapter)

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown LLM provider: cohere"):
            get_llm_provider(ProviderConfig(llm_provider="cohere"))

    def test_returns_same_instance(self):
        first = get_llm_provider(ProviderConfig(llm_provider="mock"))
        second = get_llm_provider(ProviderConfig(llm_provider="openai"))
        assert first is second

    def test_reset_clears_singleton(self):
        get_llm_provider(ProviderConfig(llm_provider="mock"))
        reset_providers()
        assert factory._llm_provider is None


class TestMockLLMProvider:
    """Test double behavior."""

    @pytest.mark.asyncio
    async def test_default_response_is_empty_object(self):
        mock = MockLLMProvider()
        response = await mock.complete(
            [LLMMessage(role="user", content="hi")], TaskType.UNIVERSITY_SEARCH
        )
        assert response.content == "{}"
        assert mock.last_task == TaskType.UNIVERSITY_SEARCH

    @pytest.mark.asyncio
    async def test_configured_response_and_error(self):
        mock = MockLLMProvider({TaskType.COURSE_QUERY: '{"courses": []}'})
        mock.set_error(TaskType.UNIVERSITY_QUERY, RateLimitError("slow down"))

        response = await mock.complete([], TaskType.COURSE_QUERY, json_mode=True)
        assert response.content == '{"courses": []}'
        assert mock.calls[0]["kwargs"]["json_mode"] is True

        with pytest.raises(RateLimitError):
            await mock.complete([], TaskType.UNIVERSITY_QUERY)
        assert len(mock.calls) == 2

    def test_assert_called_with_task_fails_when_missing(self):
        with pytest.raises(AssertionError):
            MockLLMProvider().assert_called_with_task(TaskType.COURSE_QUERY)
