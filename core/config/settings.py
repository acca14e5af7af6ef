# Complete settings with ALL required sections
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum
from typing import List, Dict, Optional


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LoggingSettings(BaseModel):
    # Core logging settings
    level: str = "INFO"
    json_format: bool = True

    # Console logging
    console_enabled: bool = True
    console_json_format: bool = False  # Plain text for console by default

    # File logging
    file_enabled: bool = True
    logs_dir: str = "logs"
    file_max_size: str = "100MB"
    file_backup_count: int = 5

    # Multi-channel logging
    multi_channel_enabled: bool = True

    # Redaction
    redact_keys: list[str] = [
        "authorization", "api_key", "apikey", "x-api-key", "x-cmc_pro_api_key",
        "x-cg-demo-api-key", "secret", "token", "password"
    ]


class MarketDataSettings(BaseModel):
    """Market data acquisition configuration"""
    default_provider: str = "synthetic"
    request_timeout_seconds: float = 10.0
    # provider id -> API key; resolved by the deployment, never looked up here
    api_keys: Dict[str, str] = Field(default_factory=dict)
    default_symbols: List[str] = Field(
        default_factory=lambda: ["BTC", "ETH", "BNB", "SOL", "XRP", "ADA", "DOGE"]
    )
    # Fixed seed makes synthetic fallback data reproducible
    synthetic_seed: Optional[int] = None
    history_days: int = 30

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    @field_validator("api_keys", mode="before")
    @classmethod
    def normalize_api_keys(cls, v):
        """Lower-case provider ids so env overrides match registry ids"""
        if isinstance(v, dict):
            return {str(k).lower(): val for k, val in v.items()}
        return v


class RateLimitOverride(BaseModel):
    """Per-provider override of the registry's default request limits"""
    per_minute: int
    per_hour: int

    @model_validator(mode="after")
    def validate_limits(self):
        if self.per_minute <= 0 or self.per_hour <= 0:
            raise ValueError("Rate limits must be positive")
        if self.per_hour < self.per_minute:
            raise ValueError("per_hour must be >= per_minute")
        return self


class OrchestrationSettings(BaseModel):
    """Agent fan-out configuration"""
    agent_timeout_seconds: float = 60.0
    # Aggregate section is only written when at least this many agents succeeded
    aggregate_min_successes: int = 3
    max_agents: int = 16

    @field_validator("agent_timeout_seconds")
    @classmethod
    def validate_agent_timeout(cls, v):
        if v <= 0:
            raise ValueError("agent_timeout_seconds must be positive")
        return v


class MonitoringSettings(BaseModel):
    metrics_enabled: bool = True

    # Prometheus bucket tuning (optional overrides)
    class PrometheusBuckets(BaseModel):
        agent_call_latency_seconds: list[float] = [
            0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0
        ]
        market_data_latency_seconds: list[float] = [
            0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0
        ]

    prometheus_buckets: PrometheusBuckets = PrometheusBuckets()


class APISettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    # CORS settings
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )
    cors_methods: List[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        description="Allowed CORS methods"
    )
    cors_headers: List[str] = Field(
        default=["Authorization", "Content-Type", "X-Request-ID"],
        description="Allowed CORS headers"
    )
    cors_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS requests"
    )

    @field_validator('cors_origins')
    def validate_cors_origins(cls, v):
        """Validate CORS origins configuration"""
        if "*" in v and len(v) > 1:
            raise ValueError("Cannot mix '*' with specific origins")
        return v


class Settings(BaseSettings):
    """Main application settings, loaded from environment variables"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = "Crypto Council"
    version: str = "0.3.0"
    environment: Environment = Environment.DEVELOPMENT

    logging: LoggingSettings = LoggingSettings()
    market_data: MarketDataSettings = MarketDataSettings()
    rate_limits: Dict[str, RateLimitOverride] = Field(default_factory=dict)
    orchestration: OrchestrationSettings = OrchestrationSettings()
    monitoring: MonitoringSettings = MonitoringSettings()
    api: APISettings = APISettings()

    @field_validator("rate_limits", mode="before")
    @classmethod
    def normalize_rate_limit_keys(cls, v):
        if isinstance(v, dict):
            return {str(k).lower(): val for k, val in v.items()}
        return v

    @property
    def logs_dir(self) -> str:
        """Get path to logs directory"""
        return self.logging.logs_dir

    def api_key_for(self, provider_id: str) -> Optional[str]:
        """Configured market-data API key for a provider, if any"""
        key = self.market_data.api_keys.get(provider_id.lower())
        return key or None


# No global settings instance - use dependency injection instead
