from typing import Any, Dict

import httpx

from core.schemas.collaboration import AgentConfig
from services.collaboration.prompts import PromptBuilder
from .base import AgentClient


class GeminiClient(AgentClient):
    """Google generateContent API; the key travels as a query parameter"""

    async def complete(self, http: httpx.AsyncClient, agent: AgentConfig,
                       prompt: str, context: Dict[str, Any]) -> str:
        text = PromptBuilder.with_context(prompt, context)
        if agent.system_prompt:
            text = f"{agent.system_prompt}\n\n{text}"
        payload = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "temperature": agent.temperature,
                "maxOutputTokens": agent.max_tokens,
            },
        }
        data = await self._post_json(
            http,
            f"{self.base_url(agent)}/models/{agent.model}:generateContent",
            payload,
            agent.api_key,
        )
        return self._extract(data, "candidates", 0, "content", "parts", 0, "text")
