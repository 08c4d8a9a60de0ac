"""
Anthropic provider adapter.

Sandi Metz Principles:
- Single Responsibility: Anthropic messages API interaction
- Small methods: Each method < 10 lines
- Dependency Injection: API key injected
"""

from anthropic import AnthropicError, AsyncAnthropic

from llm_dispatcher.exceptions import ProviderError
from llm_dispatcher.llm.provider import FALLBACK_COMPLETION_TOKENS, BaseProviderAdapter
from llm_dispatcher.llm.retry import RetryHandler
from llm_dispatcher.models.model import ModelInfo
from llm_dispatcher.models.request import DispatchRequest
from llm_dispatcher.models.response import AdapterResult
from llm_dispatcher.utils.logger import get_logger

logger = get_logger(__name__)


class AnthropicAdapter(BaseProviderAdapter):
    """
    Anthropic/Claude implementation of provider adapter.

    Maps input/output token fields onto canonical prompt/completion counts.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        retry_handler: RetryHandler | None = None,
    ):
        """
        Initialize Anthropic adapter.

        Args:
            api_key: Anthropic API key
            base_url: Optional endpoint override
            retry_handler: Optional retry handler (creates default if None)
        """
        self._api_key = api_key
        self._base_url = base_url
        self._client: AsyncAnthropic | None = None
        self._retry_handler = retry_handler or RetryHandler()

    async def invoke(self, model: ModelInfo, request: DispatchRequest) -> AdapterResult:
        """
        Generate completion using Anthropic.

        Args:
            model: Target model
            request: Dispatch request

        Returns:
            Adapter result

        Raises:
            ProviderError: If API call fails
        """
        try:
            return await self._retry_handler.execute(
                lambda: self._make_api_call(model, request)
            )
        except AnthropicError as e:
            error_msg = self._build_error_message(e, "Anthropic API call failed")
            logger.error("Anthropic error", error=str(e))
            raise ProviderError(error_msg) from e
        except Exception as e:
            error_msg = self._build_error_message(
                e, "Unexpected error in Anthropic adapter"
            )
            logger.error("Unexpected error", error=str(e))
            raise ProviderError(error_msg) from e

    async def _make_api_call(
        self, model: ModelInfo, request: DispatchRequest
    ) -> AdapterResult:
        """
        Make Anthropic messages API call.

        Args:
            model: Target model
            request: Dispatch request

        Returns:
            Adapter result
        """
        client = self._get_client()

        response = await client.messages.create(
            model=model.id,
            max_tokens=request.options.max_tokens,
            temperature=request.options.temperature,
            messages=[{"role": "user", "content": request.prompt}],
        )

        usage = response.usage
        prompt_tokens = (
            usage.input_tokens if usage else self.estimate_prompt_tokens(request.prompt)
        )
        completion_tokens = usage.output_tokens if usage else FALLBACK_COMPLETION_TOKENS

        return AdapterResult(
            content=response.content[0].text if response.content else "",
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            finish_reason=response.stop_reason or "stop",
            model=response.model or model.id,
        )

    async def health_check(self) -> bool:
        """Report healthy when a credential is configured."""
        return bool(self._api_key)

    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name
        """
        return "anthropic"

    def _get_client(self) -> AsyncAnthropic:
        """
        Get or create Anthropic client.

        Returns:
            Anthropic async client
        """
        if not self._client:
            self._client = AsyncAnthropic(api_key=self._api_key, base_url=self._base_url)
        return self._client
