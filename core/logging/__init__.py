# Enhanced structured logging with multi-channel support
import structlog
from typing import Optional, Dict, Any

from core.config.settings import Settings
from .channels import LogChannel
from .enhanced_logging import (
    configure_enhanced_logging,
    get_enhanced_logger,
    get_channel_logger,
    get_logging_statistics,
    get_market_data_logger,
    get_agents_logger,
    get_api_logger,
    get_performance_logger,
    get_error_logger,
)

# Global flag to prevent duplicate logging configuration
_logging_configured = False


def configure_logging(settings: Settings) -> None:
    """Configure the logging system once per process."""
    global _logging_configured

    if _logging_configured:
        return

    configure_enhanced_logging(settings)
    _logging_configured = True


def get_logger(name: str, component: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return get_enhanced_logger(name, component)


def get_statistics() -> Dict[str, Any]:
    """Get logging system statistics."""
    return get_logging_statistics()


# Channel-specific logger functions
def get_market_data_logger_safe(name: str) -> structlog.BoundLogger:
    """Get a market data logger safely."""
    try:
        return get_market_data_logger(name)
    except Exception:
        return get_enhanced_logger(name, "market_data")


def get_agents_logger_safe(name: str) -> structlog.BoundLogger:
    """Get an agents logger safely."""
    try:
        return get_agents_logger(name)
    except Exception:
        return get_enhanced_logger(name, "agents")


def get_api_logger_safe(name: str) -> structlog.BoundLogger:
    """Get an API logger safely."""
    try:
        return get_api_logger(name)
    except Exception:
        return get_enhanced_logger(name, "api")


def get_performance_logger_safe(name: str) -> structlog.BoundLogger:
    """Get a performance logger safely."""
    try:
        return get_performance_logger(name)
    except Exception:
        return get_enhanced_logger(name, "performance")


def get_error_logger_safe(name: str) -> structlog.BoundLogger:
    """Get an error logger safely."""
    try:
        return get_error_logger(name)
    except Exception:
        return get_enhanced_logger(name, "error")


__all__ = [
    "configure_logging",
    "get_logger",
    "get_statistics",
    "get_market_data_logger_safe",
    "get_agents_logger_safe",
    "get_api_logger_safe",
    "get_performance_logger_safe",
    "get_error_logger_safe",
    "LogChannel",
    "get_channel_logger",
]
