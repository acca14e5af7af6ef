# Parallel fan-out of one analysis task to many independently configured AI agents
import asyncio
import time
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from core.config.settings import Settings
from core.logging import get_agents_logger_safe, get_performance_logger_safe
from core.logging.correlation import create_correlation_context
from core.schemas.collaboration import (
    AgentConfig,
    AgentResponse,
    CollaborationReport,
    CollaborationTask,
)
from core.utils.exceptions import (
    AgentTimeout,
    InvalidTask,
    NoEnabledAgents,
    RateLimitExceeded,
)
from core.utils.rate_limiter import RateLimiter
from .agents import AgentClientRegistry
from .confidence import ConfidenceExtractor
from .prompts import PromptBuilder
from .report import ReportSynthesizer

MARKET_CONTEXT_KEY = "marketData"


class OrchestrationState(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    COLLECTING = "collecting"
    SYNTHESIZING = "synthesizing"
    COMPLETE = "complete"
    FAILED = "failed"


class _RunTracker:
    """State machine of a single run; logs every transition"""

    def __init__(self, run_id: str, logger):
        self.run_id = run_id
        self.logger = logger
        self.state = OrchestrationState.IDLE

    def transition(self, state: OrchestrationState, **context) -> None:
        self.logger.info(
            "Collaboration state change",
            run_id=self.run_id,
            from_state=self.state.value,
            to_state=state.value,
            **context,
        )
        self.state = state


class AgentOrchestrator:
    """Runs every usable agent concurrently and synthesizes one report.

    Each agent call is isolated: failures, timeouts and rate-limit denials
    become failure records, never exceptions, and never affect sibling
    calls. Only ``InvalidTask`` and ``NoEnabledAgents`` escape ``run``.
    """

    def __init__(
        self,
        settings: Settings,
        agent_clients: AgentClientRegistry,
        rate_limiter: RateLimiter,
        prompt_builder: PromptBuilder,
        confidence_extractor: ConfidenceExtractor,
        report_synthesizer: ReportSynthesizer,
        market_data_client: Optional[Any] = None,
        metrics_collector: Optional[Any] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.agent_clients = agent_clients
        self.rate_limiter = rate_limiter
        self.prompt_builder = prompt_builder
        self.confidence_extractor = confidence_extractor
        self.report_synthesizer = report_synthesizer
        self.market_data_client = market_data_client
        self.metrics_collector = metrics_collector
        self._transport = transport

        self.logger = get_agents_logger_safe("agent_orchestrator")
        self.perf_logger = get_performance_logger_safe("agent_orchestrator")

    async def run(self, task: CollaborationTask) -> CollaborationReport:
        started = time.perf_counter()
        run_id = str(uuid.uuid4())
        create_correlation_context("collaboration", "run", run_id=run_id, symbol=task.symbol)
        tracker = _RunTracker(run_id, self.logger)

        try:
            agents = self._validate(task)
        except (InvalidTask, NoEnabledAgents) as e:
            tracker.transition(OrchestrationState.FAILED, reason=e.message)
            if self.metrics_collector:
                outcome = "invalid_task" if isinstance(e, InvalidTask) else "no_agents"
                self.metrics_collector.record_collaboration_run(outcome)
            raise

        context = await self._build_context(task)

        tracker.transition(
            OrchestrationState.DISPATCHING,
            symbol=task.symbol,
            agents=[a.id for a in agents],
            skipped=len(task.agents) - len(agents),
        )
        timeout = self.settings.orchestration.agent_timeout_seconds
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as http:
            calls = [
                self._call_agent(http, agent, self.prompt_builder.build(agent, task), context, run_id)
                for agent in agents
            ]
            tracker.transition(OrchestrationState.COLLECTING, pending=len(calls))
            # gather preserves input order; _call_agent never raises
            responses: List[AgentResponse] = list(await asyncio.gather(*calls))

        tracker.transition(
            OrchestrationState.SYNTHESIZING,
            succeeded=sum(1 for r in responses if r.success),
            failed=sum(1 for r in responses if not r.success),
        )
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        report = self.report_synthesizer.synthesize(responses, task, elapsed_ms)
        tracker.transition(OrchestrationState.COMPLETE, elapsed_ms=elapsed_ms)

        self.perf_logger.info(
            "Collaboration run finished",
            run_id=run_id,
            symbol=task.symbol,
            total_agents=report.stats.total_agents,
            successful_agents=report.stats.successful_agents,
            elapsed_ms=elapsed_ms,
        )
        if self.metrics_collector:
            self.metrics_collector.record_collaboration_run("complete")
        return report

    def _validate(self, task: CollaborationTask) -> List[AgentConfig]:
        if not task.symbol or not task.symbol.strip():
            raise InvalidTask("Task is missing a symbol", field="symbol")
        if not task.question or not task.question.strip():
            raise InvalidTask("Task is missing a question", field="question")

        agents = [agent for agent in task.agents if agent.is_usable]
        if not agents:
            raise NoEnabledAgents()

        max_agents = self.settings.orchestration.max_agents
        if len(agents) > max_agents:
            raise InvalidTask(f"Too many agents: {len(agents)} > {max_agents}", field="agents")
        return agents

    async def _build_context(self, task: CollaborationTask) -> Dict[str, Any]:
        """Caller's data context, with a market snapshot added when none was supplied"""
        context = dict(task.data_context)
        if self.market_data_client is not None and MARKET_CONTEXT_KEY not in context:
            snapshots = await self.market_data_client.fetch_market_data([task.symbol])
            context[MARKET_CONTEXT_KEY] = [s.model_dump(mode="json", by_alias=True) for s in snapshots]
        return context

    async def _call_agent(self, http: httpx.AsyncClient, agent: AgentConfig, prompt: str,
                          context: Dict[str, Any], run_id: str) -> AgentResponse:
        """One isolated agent call; every failure becomes a failure record"""
        timeout = self.settings.orchestration.agent_timeout_seconds
        started = time.perf_counter()
        try:
            client = self.agent_clients.get(agent.provider)
            if not self.rate_limiter.try_acquire(agent.provider):
                raise RateLimitExceeded(agent.provider)
            try:
                content = await asyncio.wait_for(client.complete(http, agent, prompt, context), timeout)
            except asyncio.TimeoutError:
                raise AgentTimeout(agent.id, timeout) from None
        except Exception as e:
            duration = time.perf_counter() - started
            self.logger.warning(
                "Agent call failed",
                run_id=run_id,
                agent_id=agent.id,
                provider=agent.provider,
                error_type=type(e).__name__,
                error=str(e),
                duration_ms=round(duration * 1000, 2),
            )
            if self.metrics_collector:
                self.metrics_collector.record_agent_call(agent.provider, False, duration)
            return AgentResponse(
                agent_id=agent.id,
                provider=agent.provider,
                content=f"{agent.id} analysis failed: {e}",
                success=False,
                error=str(e),
            )

        duration = time.perf_counter() - started
        self.logger.info(
            "Agent call succeeded",
            run_id=run_id,
            agent_id=agent.id,
            provider=agent.provider,
            duration_ms=round(duration * 1000, 2),
        )
        if self.metrics_collector:
            self.metrics_collector.record_agent_call(agent.provider, True, duration)
        return AgentResponse(
            agent_id=agent.id,
            provider=agent.provider,
            content=content,
            success=True,
            confidence=self.confidence_extractor.extract(content),
        )
