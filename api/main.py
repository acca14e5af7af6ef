import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from core.config.settings import Environment
from core.logging import get_api_logger_safe, configure_logging

from app.containers import AppContainer
from api.middleware.request_ids import RequestIdMiddleware
from api.middleware.error_handling import ErrorHandlingMiddleware, register_exception_handlers
from api.routers import collaboration, market_data
from api.schemas.responses import HealthStatus
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

logger = get_api_logger_safe("api.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = app.state.container.settings()
    logger.info("Starting Crypto Council API server",
                environment=settings.environment.value,
                default_provider=settings.market_data.default_provider)
    yield
    logger.info("Shutting down Crypto Council API server")


def _build_uvicorn_log_config() -> dict:
    """Return a minimal log config that cooperates with our structlog handlers.

    Do NOT set explicit handler lists here: uvicorn applies this dictConfig at
    startup and would otherwise clear handlers that enhanced logging already
    attached to the uvicorn/fastapi loggers.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "loggers": {
            "uvicorn": {"level": "INFO"},
            "uvicorn.error": {"level": "INFO"},
            "uvicorn.access": {"level": "INFO"},
            "fastapi": {"level": "INFO"},
        },
    }


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    """Creates and configures the FastAPI application"""
    container = container or AppContainer()
    settings = container.settings()

    app = FastAPI(
        title="Crypto Council API",
        version=settings.version,
        description="""
        # Crypto Council API

        Multi-provider orchestration core for crypto market analysis.

        ## Features
        - **Market data**: rate-limited Binance / CoinGecko / CoinMarketCap access with synthetic fallback
        - **Collaboration**: one question fanned out to many AI agents in parallel, merged into one report
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.container = container

    # Configure logging for API context (idempotent)
    configure_logging(settings)

    # Use DI: shared Prometheus registry from container
    app.state.prom_registry = container.prometheus_registry()

    container.wire(modules=[
        "api.dependencies",
        "api.routers.collaboration",
        "api.routers.market_data",
    ])

    # Add middleware (order matters - last added is outermost)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    cors_origins = settings.api.cors_origins
    if settings.environment == Environment.PRODUCTION and "*" in cors_origins:
        raise ValueError(
            "CORS wildcard (*) not allowed in production. "
            "Specify exact origins in API__CORS_ORIGINS environment variable."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.api.cors_credentials,
        allow_methods=settings.api.cors_methods,
        allow_headers=settings.api.cors_headers,
    )

    app.include_router(collaboration.router, prefix="/api/v1", tags=["Collaboration"])
    app.include_router(market_data.router, prefix="/api/v1", tags=["Market Data"])

    @app.get("/health", tags=["Health"])
    def health_check():
        return {
            "status": HealthStatus.HEALTHY.value,
            "service": "crypto-council-api",
            "version": settings.version,
            "environment": settings.environment.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # Prometheus metrics endpoint
    @app.get("/metrics", tags=["Monitoring"])
    def metrics():
        data = generate_latest(app.state.prom_registry)
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    @app.get("/", tags=["Root"])
    def root():
        return {
            "service": settings.app_name,
            "version": settings.version,
            "docs": "/docs",
            "health": "/health",
            "metrics": "/metrics",
            "api_prefix": "/api/v1",
            "endpoints": {
                "collaboration": "/api/v1/collaboration/run",
                "market_data": "/api/v1/market-data",
                "history": "/api/v1/market-data/history/{symbol}",
                "providers": "/api/v1/market-data/providers",
                "rate_limits": "/api/v1/market-data/rate-limits/{provider}",
            },
        }

    return app


def run():
    """Main function to run the API server"""
    app = create_app()
    settings = app.state.container.settings()
    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.logging.level.lower(),
        access_log=True,
        log_config=_build_uvicorn_log_config(),
    )


if __name__ == "__main__":
    run()
