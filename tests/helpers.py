"""
Shared test helpers (plain functions, importable from test modules).
"""
import json
from typing import Any, Dict, List

import httpx


class FakeClock:
    """Controllable wall clock (seconds since epoch)"""

    def __init__(self, now: float = 1_700_000_040.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def chat_completion(content: str) -> Dict[str, Any]:
    """OpenAI-style chat completion body"""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def request_json(request: httpx.Request) -> Dict[str, Any]:
    return json.loads(request.content)


def agent_request_text(request: httpx.Request) -> str:
    """Concatenated message text of a chat completion request"""
    body = request_json(request)
    return " ".join(m["content"] for m in body.get("messages", []))


def metric_value(metrics, name: str, labels: Dict[str, str]) -> float:
    value = metrics.registry.get_sample_value(name, labels)
    return value or 0.0


def symbols_of(snapshots) -> List[str]:
    return [s.symbol for s in snapshots]
