from typing import Any, Dict

import httpx

from core.schemas.collaboration import AgentConfig
from services.collaboration.prompts import PromptBuilder
from .base import AgentClient

ANTHROPIC_VERSION = "2023-06-01"


class ClaudeClient(AgentClient):
    """Anthropic messages API"""

    async def complete(self, http: httpx.AsyncClient, agent: AgentConfig,
                       prompt: str, context: Dict[str, Any]) -> str:
        payload = {
            "model": agent.model,
            "max_tokens": agent.max_tokens,
            "temperature": agent.temperature,
            "messages": [
                {"role": "user", "content": PromptBuilder.with_context(prompt, context)},
            ],
        }
        if agent.system_prompt:
            payload["system"] = agent.system_prompt

        data = await self._post_json(
            http,
            f"{self.base_url(agent)}/messages",
            payload,
            agent.api_key,
            extra_headers={"anthropic-version": ANTHROPIC_VERSION},
        )
        return self._extract(data, "content", 0, "text")
