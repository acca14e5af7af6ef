# Role-specific prompts for collaboration agents
import json
from typing import Any, Dict

from core.schemas.collaboration import AgentConfig, CollaborationTask

ROLE_PROMPTS: Dict[str, str] = {
    "coordinator": (
        "As the lead coordinator of a panel of AI analysts, give an overall assessment of the question below.\n"
        "Question: {question}\n"
        "Trading pair: {symbol}\n\n"
        "Provide:\n"
        "1. An overall conclusion\n"
        "2. An investment view with a risk assessment\n"
        "3. Concrete, actionable recommendations"
    ),
    "technical_analyst": (
        "As a professional technical analyst, analyse the technical picture for {symbol}.\n"
        "Question: {question}\n\n"
        "Provide:\n"
        "1. Indicator analysis (RSI, MACD, KDJ, ...)\n"
        "2. Support and resistance levels\n"
        "3. Chart pattern recognition\n"
        "4. A short-term trend forecast"
    ),
    "news_researcher": (
        "As a news researcher, find and analyse the latest market developments for {symbol}.\n"
        "Question: {question}\n\n"
        "Provide:\n"
        "1. The most relevant recent news and events\n"
        "2. Fundamental analysis\n"
        "3. An assessment of market impact\n"
        "4. Regulatory and policy considerations"
    ),
    "sentiment_analyst": (
        "As a market sentiment analyst, analyse sentiment around {symbol}.\n"
        "Question: {question}\n\n"
        "Provide:\n"
        "1. Social media sentiment\n"
        "2. A fear and greed assessment\n"
        "3. Retail investor sentiment\n"
        "4. How sentiment is likely to affect price"
    ),
    "chart_analyst": (
        "As a chart analyst, analyse the price chart of {symbol}.\n"
        "Question: {question}\n\n"
        "Provide:\n"
        "1. Candlestick pattern analysis\n"
        "2. Volume analysis\n"
        "3. Key price levels\n"
        "4. Trading signals implied by the chart"
    ),
    "custom_specialist": (
        "As a specialist analyst, give an expert analysis of {symbol}.\n"
        "Question: {question}\n\n"
        "Draw on your area of expertise for an in-depth analysis and recommendation."
    ),
}

GENERIC_PROMPT = "Analyse {symbol} and answer: {question}"

ROLE_DISPLAY_NAMES: Dict[str, str] = {
    "coordinator": "Lead Coordinator",
    "technical_analyst": "Technical Analyst",
    "news_researcher": "News Researcher",
    "sentiment_analyst": "Sentiment Analyst",
    "chart_analyst": "Chart Analyst",
    "custom_specialist": "Custom Specialist",
}


def role_display_name(agent_id: str) -> str:
    return ROLE_DISPLAY_NAMES.get(agent_id, agent_id)


class PromptBuilder:
    """Builds each agent's prompt from its role and the task alone"""

    def build(self, agent: AgentConfig, task: CollaborationTask) -> str:
        template = ROLE_PROMPTS.get(agent.id, GENERIC_PROMPT)
        return template.format(symbol=task.symbol.strip().upper(), question=task.question.strip())

    @staticmethod
    def with_context(prompt: str, context: Dict[str, Any]) -> str:
        """Append the serialized data context to a prompt"""
        return f"{prompt}\n\nData: {json.dumps(context, ensure_ascii=False, default=str)}"
