from core.providers.registry import ProviderRegistry
from .base import AgentClient, AgentClientRegistry
from .anthropic import ClaudeClient
from .custom import CustomEndpointClient
from .gemini import GeminiClient
from .openai_compatible import OpenAICompatibleClient, OpenAIClient, PerplexityClient

AGENT_CLIENT_TYPES = {
    "openai": OpenAIClient,
    "claude": ClaudeClient,
    "perplexity": PerplexityClient,
    "grok": OpenAICompatibleClient,
    "gemini": GeminiClient,
    "custom": CustomEndpointClient,
}


def create_agent_client_registry(providers: ProviderRegistry) -> AgentClientRegistry:
    """Registry holding one client per LLM provider in ``providers``"""
    registry = AgentClientRegistry()
    for provider_id, client_cls in AGENT_CLIENT_TYPES.items():
        registry.register(client_cls(providers.get(provider_id)))
    return registry


__all__ = [
    "AgentClient",
    "AgentClientRegistry",
    "ClaudeClient",
    "CustomEndpointClient",
    "GeminiClient",
    "OpenAICompatibleClient",
    "OpenAIClient",
    "PerplexityClient",
    "create_agent_client_registry",
]
