from fastapi import Depends
from dependency_injector.wiring import inject, Provide

from app.containers import AppContainer
from services.collaboration.orchestrator import AgentOrchestrator
from services.market_data.client import MarketDataClient


@inject
def get_market_data_client(
    client: MarketDataClient = Depends(Provide[AppContainer.market_data_client])
) -> MarketDataClient:
    """Get the shared market data client"""
    return client


@inject
def get_orchestrator(
    orchestrator: AgentOrchestrator = Depends(Provide[AppContainer.orchestrator])
) -> AgentOrchestrator:
    """Get the shared agent orchestrator"""
    return orchestrator
