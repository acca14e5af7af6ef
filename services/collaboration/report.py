# Aggregates per-agent responses into one human-readable report
from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.config.settings import Settings
from core.schemas.collaboration import (
    AgentResponse,
    CollaborationReport,
    CollaborationStats,
    CollaborationTask,
)
from .prompts import role_display_name

DISCLAIMER = "*Generated by the Crypto Council collaboration engine. For reference only, not financial advice.*"
MAX_STARS = 5


class ReportSynthesizer:
    def __init__(self, settings: Settings):
        self.aggregate_min_successes = settings.orchestration.aggregate_min_successes

    def synthesize(self, responses: List[AgentResponse], task: CollaborationTask,
                   elapsed_ms: float, now: Optional[datetime] = None) -> CollaborationReport:
        successful = [r for r in responses if r.success]
        failed = [r for r in responses if not r.success]
        total = len(responses)
        now = now or datetime.now(timezone.utc)

        lines = [
            f"# AI Collaboration Report - {task.symbol.strip().upper()}",
            "",
            f"**Generated**: {now.strftime('%Y-%m-%d %H:%M:%S %Z')}",
            f"**Question**: {task.question.strip()}",
            f"**Agents**: {total} (succeeded: {len(successful)}, failed: {len(failed)})",
            "",
        ]

        if successful:
            lines += ["## Analysis", ""]
            for agent_id, group in self._group_by_role(successful).items():
                lines.append(f"### {role_display_name(agent_id)}")
                for response in group:
                    if response.confidence is not None:
                        lines.append(f"_Confidence: {response.confidence:.0f}%_")
                    lines += [response.content.strip(), ""]
        else:
            lines += [
                "## No analysis available",
                "",
                "No agent produced a successful analysis for this task, so no conclusion can be drawn.",
                "",
            ]

        if failed:
            lines += ["## Failures", ""]
            for response in failed:
                lines.append(f"- **{response.agent_id}** ({response.provider}): {response.error}")
            lines.append("")

        aggregate_confidence = None
        if successful and len(successful) >= self.aggregate_min_successes:
            aggregate_confidence = float(round(len(successful) / total * 100))
            lines += [
                "## Aggregate Assessment",
                "",
                f"Based on the combined analysis of {len(successful)} AI agents:",
                "",
                f"**Signal strength**: {'★' * min(MAX_STARS, len(successful))}",
                f"**Aggregate confidence**: {aggregate_confidence:.0f}%",
                "**Suggested action**: weigh all of the analyses above together",
                "",
            ]

        lines += ["---", DISCLAIMER]

        return CollaborationReport(
            report_text="\n".join(lines),
            agent_responses=list(responses),
            stats=CollaborationStats(
                total_agents=total,
                successful_agents=len(successful),
                failed_agents=len(failed),
                elapsed_ms=elapsed_ms,
            ),
            aggregate_confidence=aggregate_confidence,
        )

    @staticmethod
    def _group_by_role(responses: List[AgentResponse]) -> Dict[str, List[AgentResponse]]:
        """Responses grouped by agent id in first-appearance order"""
        groups: Dict[str, List[AgentResponse]] = {}
        for response in responses:
            groups.setdefault(response.agent_id, []).append(response)
        return groups
