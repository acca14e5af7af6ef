# Collaboration run records: task in, per-agent responses and report out

import time
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from core.schemas.base import CouncilBaseModel


class AgentConfig(CouncilBaseModel):
    """One independently configured AI agent. Supplied per run, never persisted."""

    id: str = Field(..., description="Agent role, e.g. technical_analyst")
    provider: str = Field(..., description="openai|claude|perplexity|grok|gemini|custom")
    model: str = ""
    api_key: str = Field("", exclude=True, repr=False)
    api_url: Optional[str] = None
    system_prompt: str = ""
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(1000, gt=0)
    enabled: bool = True

    @property
    def is_usable(self) -> bool:
        return self.enabled and bool(self.api_key and self.api_key.strip())


class AgentResponse(CouncilBaseModel):
    """Result record for one agent call; exactly one per usable agent per run"""

    model_config = ConfigDict(frozen=True)

    agent_id: str
    provider: str
    content: str = ""
    success: bool
    error: Optional[str] = None
    confidence: Optional[float] = None
    timestamp_ms: int = Field(default_factory=lambda: int(time.time() * 1000))


class CollaborationTask(CouncilBaseModel):
    symbol: str = ""
    question: str = ""
    data_context: Dict[str, Any] = Field(default_factory=dict)
    agents: List[AgentConfig] = Field(default_factory=list)


class CollaborationStats(CouncilBaseModel):
    total_agents: int
    successful_agents: int
    failed_agents: int
    elapsed_ms: float


class CollaborationReport(CouncilBaseModel):
    report_text: str
    agent_responses: List[AgentResponse]
    stats: CollaborationStats
    aggregate_confidence: Optional[float] = None
