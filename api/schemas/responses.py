from pydantic import BaseModel, Field
from typing import Generic, TypeVar, List, Optional, Any, Dict
from datetime import datetime, timezone
from enum import Enum

from core.schemas.base import CouncilBaseModel
from core.schemas.collaboration import AgentResponse, CollaborationReport, CollaborationStats

T = TypeVar('T')


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class StandardResponse(CouncilBaseModel, Generic[T]):
    """Standard API response wrapper"""
    success: bool = Field(True, description="Whether the request succeeded")
    data: Optional[T] = Field(None, description="Response data")
    error: Optional[str] = Field(None, description="Error message when success is false")


class ErrorResponse(BaseModel):
    """Error response model"""
    success: bool = False
    error: str
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    path: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CollaborationResult(CouncilBaseModel):
    """Payload of a successful collaboration run"""
    report: str
    agent_responses: List[AgentResponse]
    statistics: CollaborationStats
    aggregate_confidence: Optional[float] = None

    @classmethod
    def from_report(cls, report: CollaborationReport) -> "CollaborationResult":
        return cls(
            report=report.report_text,
            agent_responses=report.agent_responses,
            statistics=report.stats,
            aggregate_confidence=report.aggregate_confidence,
        )


class ProviderInfo(CouncilBaseModel):
    id: str
    base_url: str
    auth_scheme: str
    rate_limit: Dict[str, int]
    implemented: bool
    configured: bool
    default: bool


class RateLimitStats(CouncilBaseModel):
    provider: str
    minute_count: int
    hour_count: int
    per_minute: int
    per_hour: int
    minute_remaining: int
    hour_remaining: int
