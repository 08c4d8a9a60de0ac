"""
Provider metadata models.

Sandi Metz Principles:
- Small classes with clear purpose
- Credentials kept out of reprs and logs
- Clear naming conventions
"""

import math
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

HealthStatus = Literal["healthy", "degraded", "unavailable"]


class RateLimitBudget(BaseModel):
    """Per-provider request and token budget."""

    requests_per_minute: int = Field(default=60, ge=1, description="Requests per window")
    tokens_per_minute: int = Field(
        default=100000, ge=1, description="Tokens per window"
    )
    window_seconds: float = Field(default=60.0, gt=0, description="Window length")

    @field_validator("window_seconds")
    @classmethod
    def validate_window(cls, v: float) -> float:
        """Reject infinite windows."""
        if not math.isfinite(v):
            raise ValueError("Rate limit window must be finite")
        return v


class ProviderInfo(BaseModel):
    """Registered provider."""

    model_config = ConfigDict(protected_namespaces=())

    id: str = Field(..., min_length=1, description="Provider identifier")
    name: str = Field(..., description="Display name")
    base_url: str = Field(default="", description="Base endpoint")
    credential: SecretStr = Field(..., description="API credential")
    model_ids: List[str] = Field(default_factory=list, description="Owned models")
    rate_limits: RateLimitBudget = Field(default_factory=RateLimitBudget)
    health_status: HealthStatus = Field(default="healthy")
    last_health_check: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def is_healthy(self) -> bool:
        """Check if provider is healthy."""
        return self.health_status == "healthy"
