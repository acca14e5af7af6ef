"""
Market data API endpoints
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field, StringConstraints

from api.dependencies import get_market_data_client
from api.schemas.responses import ProviderInfo, RateLimitStats, StandardResponse
from core.logging import get_api_logger_safe
from core.schemas.base import CouncilBaseModel
from core.schemas.market import ConnectionTestResult, HistoricalPoint, MarketSnapshot
from services.market_data.client import MarketDataClient

router = APIRouter(prefix="/market-data", tags=["market-data"])

api_logger = get_api_logger_safe("market_data_api")

Symbol = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=20)]


class MarketDataRequest(CouncilBaseModel):
    symbols: List[Symbol] = Field(..., min_length=1, max_length=100)
    provider: Optional[str] = None


@router.post("", response_model=StandardResponse[List[MarketSnapshot]])
async def fetch_market_data(
    request: MarketDataRequest,
    client: MarketDataClient = Depends(get_market_data_client),
):
    """Snapshots for the requested symbols; falls back to synthetic data, never fails for provider reasons"""
    api_logger.info("Market data requested", symbols=request.symbols, provider=request.provider)
    snapshots = await client.fetch_market_data(request.symbols, request.provider)
    return StandardResponse[List[MarketSnapshot]](data=snapshots)


@router.get("/history/{symbol}", response_model=StandardResponse[List[HistoricalPoint]])
async def fetch_history(
    symbol: Symbol,
    days: Optional[int] = Query(None, ge=1, le=365, description="Number of days (default from settings)"),
    provider: Optional[str] = Query(None),
    client: MarketDataClient = Depends(get_market_data_client),
):
    points = await client.fetch_historical_data(symbol, days=days, provider=provider)
    return StandardResponse[List[HistoricalPoint]](data=points)


@router.get("/providers", response_model=StandardResponse[List[ProviderInfo]])
async def list_providers(client: MarketDataClient = Depends(get_market_data_client)):
    providers = [ProviderInfo.model_validate(p) for p in client.describe_providers()]
    return StandardResponse[List[ProviderInfo]](data=providers)


@router.get("/rate-limits/{provider}", response_model=StandardResponse[RateLimitStats])
async def rate_limit_stats(provider: str, client: MarketDataClient = Depends(get_market_data_client)):
    """Current rate-limit window usage; unknown providers answer 404"""
    return StandardResponse[RateLimitStats](data=RateLimitStats.model_validate(client.get_request_stats(provider)))


@router.post("/providers/{provider}/test", response_model=StandardResponse[ConnectionTestResult])
async def test_provider_connection(provider: str, client: MarketDataClient = Depends(get_market_data_client)):
    """Live probe of a provider without synthetic fallback"""
    result = await client.test_connection(provider)
    api_logger.info("Provider connection tested", provider=provider, success=result.success)
    return StandardResponse[ConnectionTestResult](data=result)
