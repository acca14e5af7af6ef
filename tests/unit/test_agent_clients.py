import json

import httpx
import pytest

from core.providers.registry import ProviderRegistry
from core.utils.exceptions import (
    ConfigurationError,
    ProviderHTTPError,
    ProviderParseError,
    UnsupportedProviderError,
)
from services.collaboration.agents import create_agent_client_registry
from tests.helpers import chat_completion, request_json

CONTEXT = {"price": 43000}


class RecordingTransport:
    """Captures the single request an agent client sends and answers with ``body``"""

    def __init__(self, body, status=200):
        self.body = body
        self.status = status
        self.request = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.request = request
        if isinstance(self.body, str):
            return httpx.Response(self.status, text=self.body)
        return httpx.Response(self.status, json=self.body)


async def _complete(agent, body, status=200):
    recorder = RecordingTransport(body, status)
    registry = create_agent_client_registry(ProviderRegistry())
    async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as http:
        answer = await registry.get(agent.provider).complete(http, agent, "Analyse BTC", CONTEXT)
    return answer, recorder.request


@pytest.mark.asyncio
async def test_openai_chat_completion(make_agent):
    agent = make_agent(provider="openai", api_key="sk-openai")

    answer, request = await _complete(agent, chat_completion("Bullish"))

    assert answer == "Bullish"
    assert str(request.url) == "https://api.openai.com/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-openai"
    body = request_json(request)
    assert body["model"] == "test-model"
    assert body["max_completion_tokens"] == 256
    assert "max_tokens" not in body
    assert body["messages"][0] == {"role": "system", "content": "You are a crypto analyst."}
    assert body["messages"][1]["content"].startswith("Analyse BTC\n\nData: ")
    assert json.loads(body["messages"][1]["content"].split("Data: ", 1)[1]) == CONTEXT


@pytest.mark.asyncio
async def test_grok_uses_max_tokens(make_agent):
    _, request = await _complete(make_agent(provider="grok"), chat_completion("ok"))

    assert str(request.url) == "https://api.x.ai/v1/chat/completions"
    assert request_json(request)["max_tokens"] == 256


@pytest.mark.asyncio
async def test_perplexity_adds_search_options(make_agent):
    _, request = await _complete(make_agent(provider="perplexity"), chat_completion("ok"))

    body = request_json(request)
    assert str(request.url) == "https://api.perplexity.ai/chat/completions"
    assert body["search_recency_filter"] == "month"
    assert body["return_images"] is False


@pytest.mark.asyncio
async def test_claude_messages(make_agent):
    agent = make_agent(provider="claude", api_key="sk-ant", model="claude-test")

    answer, request = await _complete(agent, {"content": [{"type": "text", "text": "Neutral"}]})

    assert answer == "Neutral"
    assert str(request.url) == "https://api.anthropic.com/v1/messages"
    assert request.headers["x-api-key"] == "sk-ant"
    assert request.headers["anthropic-version"] == "2023-06-01"
    assert "Authorization" not in request.headers
    body = request_json(request)
    assert body["system"] == "You are a crypto analyst."
    assert body["messages"][0]["role"] == "user"


@pytest.mark.asyncio
async def test_gemini_key_in_query(make_agent):
    agent = make_agent(provider="gemini", api_key="g-key", model="gemini-pro")
    body = {"candidates": [{"content": {"parts": [{"text": "Bearish"}]}}]}

    answer, request = await _complete(agent, body)

    assert answer == "Bearish"
    assert request.url.path == "/v1beta/models/gemini-pro:generateContent"
    assert request.url.params["key"] == "g-key"
    payload = request_json(request)
    assert payload["generationConfig"] == {"temperature": 0.3, "maxOutputTokens": 256}
    assert payload["contents"][0]["parts"][0]["text"].startswith("You are a crypto analyst.")


@pytest.mark.asyncio
async def test_api_url_overrides_base_url(make_agent):
    agent = make_agent(provider="openai", api_url="https://proxy.example.com/v1/")

    _, request = await _complete(agent, chat_completion("ok"))

    assert str(request.url) == "https://proxy.example.com/v1/chat/completions"


@pytest.mark.asyncio
@pytest.mark.parametrize("body,expected", [
    ({"response": "from response"}, "from response"),
    ({"content": "from content"}, "from content"),
    ({"text": "from text"}, "from text"),
    ({"other": 1}, '{"other": 1}'),
])
async def test_custom_endpoint_answer_fields(make_agent, body, expected):
    agent = make_agent(provider="custom", api_url="https://llm.internal/answer")

    answer, request = await _complete(agent, body)

    assert answer == expected
    assert str(request.url) == "https://llm.internal/answer"
    payload = request_json(request)
    assert payload["context"] == CONTEXT
    assert payload["prompt"].endswith("Analyse BTC")


@pytest.mark.asyncio
async def test_custom_endpoint_requires_api_url(make_agent):
    with pytest.raises(ConfigurationError):
        await _complete(make_agent(provider="custom"), {"response": "x"})


@pytest.mark.asyncio
async def test_non_2xx_raises_http_error(make_agent):
    with pytest.raises(ProviderHTTPError) as exc_info:
        await _complete(make_agent(provider="openai"), {"error": "bad key"}, status=401)
    assert exc_info.value.status == 401
    assert exc_info.value.provider == "openai"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"choices": []}, "not json", {"choices": [{"message": {"content": None}}]}])
async def test_unexpected_body_raises_parse_error(make_agent, body):
    with pytest.raises(ProviderParseError):
        await _complete(make_agent(provider="openai"), body)


def test_registry_rejects_unknown_provider():
    registry = create_agent_client_registry(ProviderRegistry())
    assert registry.providers == ["claude", "custom", "gemini", "grok", "openai", "perplexity"]
    assert "OpenAI" in registry
    with pytest.raises(UnsupportedProviderError):
        registry.get("mistral")
