"""
Collaboration API endpoints
"""

import time

from fastapi import APIRouter, Depends

from api.dependencies import get_orchestrator
from api.schemas.responses import CollaborationResult, StandardResponse
from core.logging import get_api_logger_safe, get_performance_logger_safe
from core.schemas.collaboration import CollaborationTask
from services.collaboration.orchestrator import AgentOrchestrator

router = APIRouter(prefix="/collaboration", tags=["collaboration"])

api_logger = get_api_logger_safe("collaboration_api")
performance_logger = get_performance_logger_safe("collaboration_performance")


@router.post("/run", response_model=StandardResponse[CollaborationResult])
async def run_collaboration(
    task: CollaborationTask,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> StandardResponse[CollaborationResult]:
    """Fan the task out to every enabled agent and return the synthesized report.

    Invalid tasks and tasks without a usable agent are answered with 400.
    """
    start_time = time.time()
    api_logger.info("Collaboration requested",
                    symbol=task.symbol,
                    agents=len(task.agents))

    report = await orchestrator.run(task)

    performance_logger.info("Collaboration request completed",
                            symbol=task.symbol,
                            processing_time_ms=round((time.time() - start_time) * 1000, 2),
                            successful_agents=report.stats.successful_agents,
                            total_agents=report.stats.total_agents)
    return StandardResponse[CollaborationResult](data=CollaborationResult.from_report(report))
