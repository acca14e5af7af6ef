"""
Multi-agent collaboration: fan-out orchestration, confidence extraction and report synthesis
"""

from .confidence import ConfidenceExtractor
from .orchestrator import AgentOrchestrator, OrchestrationState
from .prompts import PromptBuilder
from .report import ReportSynthesizer

__all__ = [
    "AgentOrchestrator",
    "ConfidenceExtractor",
    "OrchestrationState",
    "PromptBuilder",
    "ReportSynthesizer",
]
