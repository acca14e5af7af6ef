# Application DI container
from dependency_injector import containers, providers
from prometheus_client import CollectorRegistry

from core.config.settings import Settings
from core.monitoring.prometheus_metrics import create_metrics_collector
from core.providers.registry import ProviderRegistry
from core.utils.rate_limiter import RateLimiter
from services.collaboration.agents import create_agent_client_registry
from services.collaboration.confidence import ConfidenceExtractor
from services.collaboration.orchestrator import AgentOrchestrator
from services.collaboration.prompts import PromptBuilder
from services.collaboration.report import ReportSynthesizer
from services.market_data.client import MarketDataClient
from services.market_data.synthetic import SyntheticDataGenerator


class AppContainer(containers.DeclarativeContainer):
    """Application dependency injection container"""

    # Configuration
    settings = providers.Singleton(Settings)

    # --- Observability: Prometheus ---
    # Shared registry used by API /metrics endpoint and collectors
    prometheus_registry = providers.Singleton(CollectorRegistry)
    # None when settings.monitoring.metrics_enabled is false
    prometheus_metrics = providers.Singleton(
        create_metrics_collector,
        registry=prometheus_registry,
        settings=settings,
    )

    # Outbound HTTP transport; None means the real network (tests override it)
    http_transport = providers.Object(None)

    # Provider table with rate-limit overrides applied
    provider_registry = providers.Singleton(
        ProviderRegistry.from_settings,
        settings=settings,
    )

    # Shared by market data and agent calls
    rate_limiter = providers.Singleton(
        RateLimiter,
        registry=provider_registry,
        metrics_collector=prometheus_metrics,
    )

    # --- Market data ---
    synthetic_generator = providers.Singleton(
        SyntheticDataGenerator,
        seed=settings.provided.market_data.synthetic_seed,
    )

    market_data_client = providers.Singleton(
        MarketDataClient,
        settings=settings,
        registry=provider_registry,
        rate_limiter=rate_limiter,
        synthetic=synthetic_generator,
        metrics_collector=prometheus_metrics,
        transport=http_transport,
    )

    # --- Collaboration ---
    agent_clients = providers.Singleton(
        create_agent_client_registry,
        providers=provider_registry,
    )
    prompt_builder = providers.Singleton(PromptBuilder)
    confidence_extractor = providers.Singleton(ConfidenceExtractor)
    report_synthesizer = providers.Singleton(ReportSynthesizer, settings=settings)

    orchestrator = providers.Singleton(
        AgentOrchestrator,
        settings=settings,
        agent_clients=agent_clients,
        rate_limiter=rate_limiter,
        prompt_builder=prompt_builder,
        confidence_extractor=confidence_extractor,
        report_synthesizer=report_synthesizer,
        market_data_client=market_data_client,
        metrics_collector=prometheus_metrics,
        transport=http_transport,
    )
