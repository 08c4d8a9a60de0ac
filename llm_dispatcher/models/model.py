"""
Model definition and metadata models.

Sandi Metz Principles:
- Small classes with clear purpose
- Defaults resolved in one place
- Clear naming conventions
"""

from datetime import datetime
from typing import List, Literal, Optional, Set

from pydantic import BaseModel, Field

RequestType = Literal["completion", "chat", "embedding", "image", "audio"]

DEFAULT_MAX_TOKENS = 4096
DEFAULT_CONTEXT_WINDOW = 8192
DEFAULT_COST_PER_1K_TOKENS = 0.002
DEFAULT_LATENCY_MS = 1000.0
DEFAULT_CAPABILITIES = ["text-generation"]


class ModelSpec(BaseModel):
    """Caller-supplied model definition used at provider registration."""

    id: Optional[str] = Field(None, description="Model identifier")
    name: Optional[str] = Field(None, description="Display name")
    type: Optional[RequestType] = Field(None, description="Request type served")
    max_tokens: Optional[int] = Field(None, description="Max output tokens")
    context_window: Optional[int] = Field(None, description="Context window size")
    cost_per_1k_tokens: Optional[float] = Field(None, description="USD per 1k tokens")
    latency_ms: Optional[float] = Field(None, description="Expected latency")
    capabilities: Optional[List[str]] = Field(None, description="Capability tags")

    def build(self, provider_id: str, index: int) -> "ModelInfo":
        """
        Resolve defaults into a registered model.

        Missing or non-positive numeric values fall back to defaults.

        Args:
            provider_id: Owning provider ID
            index: Position of the spec in the registration list

        Returns:
            Model info with all fields populated
        """
        return ModelInfo(
            id=self.id if self.id is not None else f"{provider_id}-model-{index}",
            provider_id=provider_id,
            name=self.name or f"Model {index}",
            type=self.type or "completion",
            max_tokens=_positive(self.max_tokens, DEFAULT_MAX_TOKENS),
            context_window=_positive(self.context_window, DEFAULT_CONTEXT_WINDOW),
            cost_per_1k_tokens=_positive(
                self.cost_per_1k_tokens, DEFAULT_COST_PER_1K_TOKENS
            ),
            latency_ms=_positive(self.latency_ms, DEFAULT_LATENCY_MS),
            capabilities=list(self.capabilities or DEFAULT_CAPABILITIES),
        )


class ModelInfo(BaseModel):
    """Registered model with static and dynamic metadata."""

    id: str = Field(..., min_length=1, description="Model identifier")
    provider_id: str = Field(..., description="Owning provider")
    name: str = Field(..., description="Display name")
    type: RequestType = Field(default="completion", description="Request type")
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    context_window: int = Field(default=DEFAULT_CONTEXT_WINDOW, gt=0)
    cost_per_1k_tokens: float = Field(default=DEFAULT_COST_PER_1K_TOKENS, gt=0)
    latency_ms: float = Field(default=DEFAULT_LATENCY_MS, gt=0)
    capabilities: List[str] = Field(default_factory=lambda: list(DEFAULT_CAPABILITIES))
    is_available: bool = Field(default=True, description="Availability flag")
    last_used: Optional[datetime] = Field(None, description="Last use timestamp")
    usage_count: int = Field(default=0, ge=0, description="Lifetime usage count")
    error_rate: float = Field(default=0.0, ge=0.0, le=1.0, description="Error rate")

    @property
    def capability_set(self) -> Set[str]:
        """Get capabilities as a set."""
        return set(self.capabilities)

    def calculate_cost(self, total_tokens: int) -> float:
        """Calculate cost in USD for a token count."""
        return (total_tokens / 1000) * self.cost_per_1k_tokens


def _positive(value, default):
    if value is None or value <= 0:
        return default
    return value
