"""Test OpenAI-compatible provider adapters."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from openai import OpenAIError

from llm_dispatcher.exceptions import ProviderError
from llm_dispatcher.llm.deepseek_provider import DEEPSEEK_BASE_URL, DeepSeekAdapter
from llm_dispatcher.llm.openai_provider import OpenAIAdapter
from llm_dispatcher.models.request import DispatchRequest, GenerationOptions


@pytest.fixture
def openai_adapter():
    """Create OpenAI adapter with test API key."""
    return OpenAIAdapter(api_key="test-api-key")


@pytest.fixture
def openai_request():
    """Create request with explicit options."""
    return DispatchRequest(
        model_id="test-model",
        provider_id="openai",
        prompt="What is Python?",
        options=GenerationOptions(max_tokens=256, temperature=0.2, top_p=0.8),
    )


@pytest.fixture
def mock_openai_response():
    """Create mock OpenAI API response."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = "Python is a programming language"
    mock_response.choices[0].finish_reason = "stop"
    mock_response.usage = MagicMock()
    mock_response.usage.prompt_tokens = 10
    mock_response.usage.completion_tokens = 20
    mock_response.usage.total_tokens = 30
    mock_response.model = "test-model"
    return mock_response


class TestOpenAIAdapter:
    """Test OpenAI adapter implementation."""

    def test_should_get_provider_name(self, openai_adapter):
        """Test getting provider name."""
        assert openai_adapter.get_name() == "openai"

    @pytest.mark.asyncio
    async def test_should_invoke_model(
        self, openai_adapter, sample_model, openai_request, mock_openai_response
    ):
        """Test invoking a model through chat completions."""
        with patch("llm_dispatcher.llm.openai_provider.AsyncOpenAI") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.chat.completions.create.return_value = mock_openai_response
            mock_client_class.return_value = mock_client

            result = await openai_adapter.invoke(sample_model, openai_request)

            assert result.content == "Python is a programming language"
            assert result.prompt_tokens == 10
            assert result.completion_tokens == 20
            assert result.total_tokens == 30

    @pytest.mark.asyncio
    async def test_should_forward_options(
        self, openai_adapter, sample_model, openai_request, mock_openai_response
    ):
        """Test request options reach the API call."""
        with patch("llm_dispatcher.llm.openai_provider.AsyncOpenAI") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.chat.completions.create.return_value = mock_openai_response
            mock_client_class.return_value = mock_client

            await openai_adapter.invoke(sample_model, openai_request)

            call_kwargs = mock_client.chat.completions.create.call_args.kwargs
            assert call_kwargs["model"] == "test-model"
            assert call_kwargs["max_tokens"] == 256
            assert call_kwargs["temperature"] == 0.2
            assert call_kwargs["top_p"] == 0.8
            assert call_kwargs["messages"] == [
                {"role": "user", "content": "What is Python?"}
            ]

    @pytest.mark.asyncio
    async def test_should_estimate_tokens_without_usage(
        self, openai_adapter, sample_model, openai_request, mock_openai_response
    ):
        """Test fallback token estimates."""
        mock_openai_response.usage = None
        with patch("llm_dispatcher.llm.openai_provider.AsyncOpenAI") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.chat.completions.create.return_value = mock_openai_response
            mock_client_class.return_value = mock_client

            result = await openai_adapter.invoke(sample_model, openai_request)

            assert result.prompt_tokens == len("What is Python?") // 4
            assert result.completion_tokens == 100
            assert result.total_tokens == result.prompt_tokens + 100

    @pytest.mark.asyncio
    async def test_should_wrap_api_errors(
        self, openai_adapter, sample_model, openai_request
    ):
        """Test vendor errors become ProviderError."""
        with patch("llm_dispatcher.llm.openai_provider.AsyncOpenAI") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.chat.completions.create.side_effect = OpenAIError("API Error")
            mock_client_class.return_value = mock_client

            with pytest.raises(ProviderError) as exc_info:
                await openai_adapter.invoke(sample_model, openai_request)

            assert "OpenAI API call failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_should_wrap_unexpected_errors(
        self, openai_adapter, sample_model, openai_request
    ):
        """Test unexpected errors become ProviderError."""
        with patch("llm_dispatcher.llm.openai_provider.AsyncOpenAI") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.chat.completions.create.side_effect = ValueError("Bad value")
            mock_client_class.return_value = mock_client

            with pytest.raises(ProviderError) as exc_info:
                await openai_adapter.invoke(sample_model, openai_request)

            assert "Unexpected error in OpenAI adapter" in str(exc_info.value)
            assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_should_report_health_from_credential(self):
        """Test health check."""
        assert await OpenAIAdapter(api_key="key").health_check() is True
        assert await OpenAIAdapter(api_key="").health_check() is False

    def test_should_reuse_client(self, openai_adapter):
        """Test lazy client is created once."""
        with patch("llm_dispatcher.llm.openai_provider.AsyncOpenAI") as mock_client_class:
            first = openai_adapter._get_client()
            second = openai_adapter._get_client()

            assert first is second
            mock_client_class.assert_called_once_with(api_key="test-api-key", base_url=None)


class TestDeepSeekAdapter:
    """Test DeepSeek adapter."""

    def test_should_get_provider_name(self):
        """Test getting provider name."""
        assert DeepSeekAdapter(api_key="key").get_name() == "deepseek"

    def test_should_use_deepseek_endpoint(self):
        """Test base URL."""
        with patch("llm_dispatcher.llm.openai_provider.AsyncOpenAI") as mock_client_class:
            DeepSeekAdapter(api_key="key")._get_client()

            mock_client_class.assert_called_once_with(
                api_key="key", base_url=DEEPSEEK_BASE_URL
            )

    @pytest.mark.asyncio
    async def test_should_name_deepseek_in_errors(self, sample_model, openai_request):
        """Test error message uses display name."""
        with patch("llm_dispatcher.llm.openai_provider.AsyncOpenAI") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.chat.completions.create.side_effect = OpenAIError("down")
            mock_client_class.return_value = mock_client

            with pytest.raises(ProviderError) as exc_info:
                await DeepSeekAdapter(api_key="key").invoke(sample_model, openai_request)

            assert "DeepSeek API call failed" in str(exc_info.value)
