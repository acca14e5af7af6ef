from typing import Any, Dict

import httpx

from core.schemas.collaboration import AgentConfig
from services.collaboration.prompts import PromptBuilder
from .base import AgentClient


class OpenAICompatibleClient(AgentClient):
    """Chat-completions style APIs (OpenAI, Grok)"""

    # OpenAI renamed the output cap; x.ai still takes max_tokens
    max_tokens_field = "max_tokens"

    def build_payload(self, agent: AgentConfig, prompt: str, context: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "model": agent.model,
            "messages": [
                {"role": "system", "content": agent.system_prompt},
                {"role": "user", "content": PromptBuilder.with_context(prompt, context)},
            ],
            "temperature": agent.temperature,
            self.max_tokens_field: agent.max_tokens,
        }

    async def complete(self, http: httpx.AsyncClient, agent: AgentConfig,
                       prompt: str, context: Dict[str, Any]) -> str:
        data = await self._post_json(
            http,
            f"{self.base_url(agent)}/chat/completions",
            self.build_payload(agent, prompt, context),
            agent.api_key,
        )
        return self._extract(data, "choices", 0, "message", "content")


class OpenAIClient(OpenAICompatibleClient):
    max_tokens_field = "max_completion_tokens"


class PerplexityClient(OpenAICompatibleClient):
    """Chat completions restricted to recent search results"""

    def build_payload(self, agent: AgentConfig, prompt: str, context: Dict[str, Any]) -> Dict[str, Any]:
        payload = super().build_payload(agent, prompt, context)
        payload["search_recency_filter"] = "month"
        payload["return_images"] = False
        return payload
