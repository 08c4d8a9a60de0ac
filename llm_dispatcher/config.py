"""
Dispatcher configuration management.

Following Sandi Metz principles:
- Single Responsibility: Configuration loading and validation
- Small class: < 100 lines
- Clear naming: Descriptive property names
"""

from typing import Dict, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

StrategyName = Literal[
    "round-robin", "least-latency", "least-cost", "most-capable", "intelligent"
]


class DispatcherConfig(BaseSettings):
    """
    Dispatcher configuration with validation.

    Loads from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="LLMDispatcher", description="Application name")
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Render logs as JSON lines")

    # Provider credentials
    openai_api_key: str = Field(default="", description="OpenAI API key")
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    deepseek_api_key: str = Field(default="", description="DeepSeek API key")

    # Load balancing
    load_balancing_strategy: StrategyName = Field(
        default="intelligent", description="Model selection strategy"
    )
    weight_latency: float = Field(default=0.3, ge=0.0, le=1.0, description="Latency weight")
    weight_cost: float = Field(default=0.2, ge=0.0, le=1.0, description="Cost weight")
    weight_capability: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Capability weight"
    )
    weight_availability: float = Field(
        default=0.2, ge=0.0, le=1.0, description="Availability weight"
    )

    # Request defaults
    default_request_timeout_seconds: float = Field(
        default=300.0, gt=0, description="Request timeout"
    )
    default_priority: Literal["low", "medium", "high", "critical"] = Field(
        default="medium", description="Request priority"
    )
    default_max_tokens: int = Field(default=1000, ge=1, description="Max tokens")
    default_temperature: float = Field(
        default=0.7, ge=0.0, le=2.0, description="Temperature"
    )
    default_top_p: float = Field(default=0.9, ge=0.0, le=1.0, description="Top-p")

    # Cache settings
    enable_cache: bool = Field(default=True, description="Enable response cache")
    cache_max_entries: int = Field(
        default=1000, ge=0, description="LRU bound (0 = unbounded)"
    )

    # Execution settings
    max_in_flight: int = Field(default=10, ge=1, le=1000, description="Max in-flight")

    # Rate limit defaults
    default_requests_per_minute: int = Field(default=60, ge=1, description="RPM")
    default_tokens_per_minute: int = Field(default=100000, ge=1, description="TPM")
    rate_limit_window_seconds: float = Field(
        default=60.0, gt=0, le=3600, description="Rate window"
    )

    # Vendor retries inside one provider call
    provider_retry_attempts: int = Field(
        default=3, ge=1, le=10, description="Attempts per provider call"
    )
    provider_retry_max_delay_seconds: float = Field(
        default=30.0, gt=0, le=300, description="Retry backoff cap"
    )

    # Health checks
    health_check_interval_seconds: float = Field(
        default=30.0, gt=0, description="Health check interval"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        return v.upper()

    @property
    def load_balancing_weights(self) -> Dict[str, float]:
        """Get intelligent-selection weights as mapping."""
        return {
            "latency": self.weight_latency,
            "cost": self.weight_cost,
            "capability": self.weight_capability,
            "availability": self.weight_availability,
        }

    @property
    def is_cache_enabled(self) -> bool:
        """Check if response caching is enabled."""
        return self.enable_cache


# Global configuration instance
config = DispatcherConfig()
