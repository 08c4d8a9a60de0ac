"""
Dispatch response models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable response data
- Clear naming conventions
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from llm_dispatcher.models.request import generate_id


class TokenUsage(BaseModel):
    """Token accounting for a response."""

    model_config = ConfigDict(frozen=True)

    prompt: int = Field(..., ge=0, description="Tokens in prompt")
    completion: int = Field(..., ge=0, description="Tokens in completion")
    total: int = Field(..., ge=0, description="Total tokens used")

    @classmethod
    def create(cls, prompt: int, completion: int) -> "TokenUsage":
        """Create usage with calculated total."""
        return cls(prompt=prompt, completion=completion, total=prompt + completion)


class AdapterResult(BaseModel):
    """Canonical result returned by a provider adapter."""

    content: str = Field(..., description="Generated content")
    prompt_tokens: int = Field(..., ge=0)
    completion_tokens: int = Field(..., ge=0)
    total_tokens: int = Field(..., ge=0)
    finish_reason: str = Field(default="stop")
    model: Optional[str] = Field(None, description="Model reported by vendor")

    @property
    def tokens(self) -> TokenUsage:
        """Get token accounting."""
        return TokenUsage(
            prompt=self.prompt_tokens,
            completion=self.completion_tokens,
            total=self.total_tokens,
        )


class DispatchResponse(BaseModel):
    """Response delivered to the caller."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: str = Field(default_factory=lambda: generate_id("res"))
    request_id: str = Field(..., description="Originating request")
    model_id: str = Field(..., description="Model that served the request")
    provider_id: str = Field(..., description="Provider that served the request")
    content: str = Field(..., description="Response content")
    tokens: TokenUsage = Field(..., description="Token accounting")
    latency_ms: float = Field(..., ge=0, description="Measured latency")
    cost: float = Field(..., ge=0, description="Computed cost in USD")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    cached: bool = Field(default=False, description="Served from cache")
    error: Optional[str] = Field(None, description="Error message")

    @property
    def is_error(self) -> bool:
        """Check if response carries an error."""
        return self.error is not None

    def as_cache_hit(self, request_id: str) -> "DispatchResponse":
        """
        Wrap cached content in a fresh response.

        Args:
            request_id: Request the hit is served for

        Returns:
            New response with its own ID, flagged cached
        """
        return self.model_copy(
            update={
                "id": generate_id("res"),
                "request_id": request_id,
                "latency_ms": 0.0,
                "cost": 0.0,
                "timestamp": datetime.now(timezone.utc),
                "cached": True,
            }
        )
