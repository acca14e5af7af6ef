from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from core.providers.registry import ProviderConfig
from core.schemas.collaboration import AgentConfig
from core.utils.exceptions import ProviderHTTPError, ProviderParseError, UnsupportedProviderError


class AgentClient(ABC):
    """Calls one LLM provider and returns the answer text"""

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    def provider_id(self) -> str:
        return self.config.id

    @abstractmethod
    async def complete(self, http: httpx.AsyncClient, agent: AgentConfig,
                       prompt: str, context: Dict[str, Any]) -> str:
        """Send the prompt (plus serialized context) and return the model's answer."""
        pass

    def base_url(self, agent: AgentConfig) -> str:
        """Per-agent URL override, else the registry's base URL"""
        return (agent.api_url or self.config.base_url).rstrip("/")

    async def _post_json(self, http: httpx.AsyncClient, url: str, payload: Dict[str, Any],
                         api_key: Optional[str], extra_headers: Optional[Dict[str, str]] = None) -> Any:
        headers = {"Content-Type": "application/json"}
        headers.update(self.config.auth_headers(api_key))
        headers.update(extra_headers or {})
        response = await http.post(
            url,
            json=payload,
            headers=headers,
            params=self.config.auth_params(api_key) or None,
        )
        if response.is_error:
            raise ProviderHTTPError(
                f"{self.provider_id} API error: {response.status_code} {response.reason_phrase}",
                self.provider_id,
                response.status_code,
                response_text=response.text[:500],
            )
        try:
            return response.json()
        except ValueError:
            raise ProviderParseError(f"{self.provider_id} returned a non-JSON body", self.provider_id) from None

    def _extract(self, data: Any, *path) -> str:
        """Walk ``path`` (keys / indexes) into a response body, requiring a string at the end."""
        node = data
        try:
            for key in path:
                node = node[key]
        except (KeyError, IndexError, TypeError):
            raise ProviderParseError(
                f"Unexpected {self.provider_id} response shape", self.provider_id
            ) from None
        if not isinstance(node, str):
            raise ProviderParseError(f"{self.provider_id} answer is not text", self.provider_id)
        return node


class AgentClientRegistry:
    """Agent clients keyed by provider id"""

    def __init__(self):
        self._clients: Dict[str, AgentClient] = {}

    def register(self, client: AgentClient) -> None:
        self._clients[client.provider_id.lower()] = client

    def get(self, provider_id: str) -> AgentClient:
        client = self._clients.get(provider_id.lower())
        if client is None:
            raise UnsupportedProviderError(provider_id)
        return client

    @property
    def providers(self):
        return sorted(self._clients)

    def __contains__(self, provider_id: str) -> bool:
        return provider_id.lower() in self._clients
