"""
DeepSeek provider adapter.

DeepSeek exposes an OpenAI-compatible chat-completions endpoint, so the
adapter only changes the endpoint and naming.
"""

from llm_dispatcher.llm.openai_provider import OpenAIAdapter
from llm_dispatcher.llm.retry import RetryHandler

DEEPSEEK_BASE_URL = "https://api.deepseek.com/v1"


class DeepSeekAdapter(OpenAIAdapter):
    """DeepSeek implementation of provider adapter."""

    provider_name = "deepseek"
    display_name = "DeepSeek"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        retry_handler: RetryHandler | None = None,
    ):
        super().__init__(
            api_key=api_key,
            base_url=base_url or DEEPSEEK_BASE_URL,
            retry_handler=retry_handler,
        )
