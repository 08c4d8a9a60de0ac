"""
OpenAI-compatible provider adapter.

Sandi Metz Principles:
- Single Responsibility: OpenAI chat-completions interaction
- Small methods: Each method < 10 lines
- Dependency Injection: API key and endpoint injected
"""

from openai import AsyncOpenAI, OpenAIError

from llm_dispatcher.exceptions import ProviderError
from llm_dispatcher.llm.provider import FALLBACK_COMPLETION_TOKENS, BaseProviderAdapter
from llm_dispatcher.llm.retry import RetryHandler
from llm_dispatcher.models.model import ModelInfo
from llm_dispatcher.models.request import DispatchRequest
from llm_dispatcher.models.response import AdapterResult
from llm_dispatcher.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAIAdapter(BaseProviderAdapter):
    """
    OpenAI implementation of provider adapter.

    Also serves any vendor exposing the chat-completions API via base_url.
    """

    provider_name = "openai"
    display_name = "OpenAI"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        retry_handler: RetryHandler | None = None,
    ):
        """
        Initialize OpenAI adapter.

        Args:
            api_key: API key
            base_url: Optional endpoint override
            retry_handler: Optional retry handler (creates default if None)
        """
        self._api_key = api_key
        self._base_url = base_url
        self._client: AsyncOpenAI | None = None
        self._retry_handler = retry_handler or RetryHandler()

    async def invoke(self, model: ModelInfo, request: DispatchRequest) -> AdapterResult:
        """
        Generate completion using the chat-completions API.

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
        except OpenAIError as e:
            error_msg = self._build_error_message(
                e, f"{self.display_name} API call failed"
            )
            logger.error(f"{self.display_name} error", error=str(e))
            raise ProviderError(error_msg) from e
        except Exception as e:
            error_msg = self._build_error_message(
                e, f"Unexpected error in {self.display_name} adapter"
            )
            logger.error("Unexpected error", error=str(e))
            raise ProviderError(error_msg) from e

    async def _make_api_call(
        self, model: ModelInfo, request: DispatchRequest
    ) -> AdapterResult:
        """
        Make chat-completions API call.

        Args:
            model: Target model
            request: Dispatch request

        Returns:
            Adapter result
        """
        client = self._get_client()

        response = await client.chat.completions.create(
            model=model.id,
            messages=[{"role": "user", "content": request.prompt}],
            max_tokens=request.options.max_tokens,
            temperature=request.options.temperature,
            top_p=request.options.top_p,
            stream=False,
        )

        return self._parse_response(response, model, request)

    def _parse_response(
        self, response, model: ModelInfo, request: DispatchRequest
    ) -> AdapterResult:
        """Extract content and token accounting."""
        choice = response.choices[0] if response.choices else None
        usage = response.usage
        prompt_tokens = (
            usage.prompt_tokens if usage else self.estimate_prompt_tokens(request.prompt)
        )
        completion_tokens = (
            usage.completion_tokens if usage else FALLBACK_COMPLETION_TOKENS
        )

        return AdapterResult(
            content=(choice.message.content if choice else None) or "",
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=(
                usage.total_tokens if usage else prompt_tokens + completion_tokens
            ),
            finish_reason=(choice.finish_reason if choice else None) or "stop",
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
        return self.provider_name

    def _get_client(self) -> AsyncOpenAI:
        """
        Get or create OpenAI client.

        Returns:
            OpenAI async client
        """
        if not self._client:
            self._client = AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client
