"""
Pytest configuration and shared fixtures for Crypto Council tests.
"""
import random
from typing import Any, Callable, Dict

import httpx
import pytest

from core.config.settings import (
    Settings,
    LoggingSettings,
    MarketDataSettings,
    OrchestrationSettings,
)
from core.monitoring.prometheus_metrics import get_metrics_for_testing
from core.providers.registry import ProviderRegistry
from core.schemas.collaboration import AgentConfig
from core.utils.rate_limiter import RateLimiter
from services.collaboration.agents import create_agent_client_registry
from services.collaboration.confidence import ConfidenceExtractor
from services.collaboration.orchestrator import AgentOrchestrator
from services.collaboration.prompts import PromptBuilder
from services.collaboration.report import ReportSynthesizer
from services.market_data.client import MarketDataClient
from services.market_data.synthetic import SyntheticDataGenerator
from tests.helpers import FakeClock


@pytest.fixture
def test_settings():
    """Test settings configuration."""
    return Settings(
        environment="testing",
        logging=LoggingSettings(
            level="DEBUG",
            file_enabled=False,
            multi_channel_enabled=False,
        ),
        market_data=MarketDataSettings(
            default_provider="synthetic",
            synthetic_seed=42,
            request_timeout_seconds=5.0,
        ),
        orchestration=OrchestrationSettings(
            agent_timeout_seconds=2.0,
        ),
    )


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def provider_registry(test_settings):
    return ProviderRegistry.from_settings(test_settings)


@pytest.fixture
def metrics():
    return get_metrics_for_testing()


@pytest.fixture
def rate_limiter(provider_registry, fake_clock, metrics):
    return RateLimiter(provider_registry, clock=fake_clock, metrics_collector=metrics)


@pytest.fixture
def synthetic_generator():
    return SyntheticDataGenerator(seed=7)


@pytest.fixture
def make_market_data_client(test_settings, provider_registry, rate_limiter, synthetic_generator, metrics):
    """Factory building a MarketDataClient whose HTTP calls go to ``handler``"""
    def _make(handler: Callable[[httpx.Request], httpx.Response] = None,
              settings: Settings = None) -> MarketDataClient:
        transport = httpx.MockTransport(handler) if handler is not None else None
        return MarketDataClient(
            settings=settings or test_settings,
            registry=provider_registry,
            rate_limiter=rate_limiter,
            synthetic=synthetic_generator,
            metrics_collector=metrics,
            transport=transport,
        )
    return _make


@pytest.fixture
def make_agent():
    """Factory for agent configs with sensible defaults"""
    def _make(agent_id: str = "technical_analyst", provider: str = "openai", **overrides) -> AgentConfig:
        values: Dict[str, Any] = {
            "id": agent_id,
            "provider": provider,
            "model": "test-model",
            "api_key": "sk-test",
            "system_prompt": "You are a crypto analyst.",
            "temperature": 0.3,
            "max_tokens": 256,
            "enabled": True,
        }
        values.update(overrides)
        return AgentConfig(**values)
    return _make


@pytest.fixture
def make_orchestrator(test_settings, provider_registry, rate_limiter, metrics):
    """Factory building an AgentOrchestrator whose HTTP calls go to ``handler``"""
    def _make(handler: Callable[[httpx.Request], Any], settings: Settings = None,
              market_data_client: MarketDataClient = None) -> AgentOrchestrator:
        settings = settings or test_settings
        return AgentOrchestrator(
            settings=settings,
            agent_clients=create_agent_client_registry(provider_registry),
            rate_limiter=rate_limiter,
            prompt_builder=PromptBuilder(),
            confidence_extractor=ConfidenceExtractor(rng=random.Random(3)),
            report_synthesizer=ReportSynthesizer(settings),
            market_data_client=market_data_client,
            metrics_collector=metrics,
            transport=httpx.MockTransport(handler),
        )
    return _make
