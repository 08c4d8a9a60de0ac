"""
Dispatch request models.

Sandi Metz Principles:
- Small classes focused on request data
- Immutable once created
- Clear property names
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from llm_dispatcher.models.model import RequestType

Priority = Literal["low", "medium", "high", "critical"]

PRIORITY_RANK: Dict[str, int] = {"low": 0, "medium": 1, "high": 2, "critical": 3}


def generate_id(prefix: str) -> str:
    """
    Generate a unique identifier.

    Args:
        prefix: Identifier prefix ("req", "res")

    Returns:
        Identifier of the form prefix-<epoch ms>-<8 hex>
    """
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class GenerationOptions(BaseModel):
    """Generation options forwarded to the provider."""

    model_config = ConfigDict(frozen=True)

    max_tokens: int = Field(default=1000, ge=1, description="Max output tokens")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Temperature")
    top_p: float = Field(default=0.9, ge=0.0, le=1.0, description="Top-p")
    stream: bool = Field(default=False, description="Streaming flag")


class DispatchRequest(BaseModel):
    """Request owned by the dispatcher while queued and executing."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: str = Field(default_factory=lambda: generate_id("req"))
    model_id: str = Field(..., description="Resolved target model")
    provider_id: str = Field(..., description="Resolved target provider")
    prompt: str = Field(..., min_length=1, description="Prompt text")
    options: GenerationOptions = Field(default_factory=GenerationOptions)
    request_type: Optional[RequestType] = Field(None, description="Type filter")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    priority: Priority = Field(default="medium")
    timeout_seconds: float = Field(default=300.0, gt=0)
    allow_fallback: bool = Field(default=True)

    @property
    def priority_rank(self) -> int:
        """Get numeric priority (higher runs first)."""
        return PRIORITY_RANK[self.priority]

    def retarget(self, model_id: str, provider_id: str) -> "DispatchRequest":
        """Create a copy aimed at a different model."""
        return self.model_copy(update={"model_id": model_id, "provider_id": provider_id})
