import json
from typing import Any, Dict

import httpx

from core.schemas.collaboration import AgentConfig
from core.utils.exceptions import ConfigurationError
from .base import AgentClient

ANSWER_FIELDS = ("response", "content", "text")


class CustomEndpointClient(AgentClient):
    """Any endpoint accepting ``{model, prompt, context, temperature, max_tokens}``"""

    async def complete(self, http: httpx.AsyncClient, agent: AgentConfig,
                       prompt: str, context: Dict[str, Any]) -> str:
        if not agent.api_url:
            raise ConfigurationError("Custom provider requires api_url", "api_url", agent.api_url)

        full_prompt = f"{agent.system_prompt}\n\n{prompt}" if agent.system_prompt else prompt
        payload = {
            "model": agent.model,
            "prompt": full_prompt,
            "context": context,
            "temperature": agent.temperature,
            "max_tokens": agent.max_tokens,
        }
        data = await self._post_json(http, agent.api_url, payload, agent.api_key)

        if isinstance(data, dict):
            for field in ANSWER_FIELDS:
                value = data.get(field)
                if isinstance(value, str) and value:
                    return value
        return json.dumps(data, ensure_ascii=False)
