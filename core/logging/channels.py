"""
Logging channel definitions and configuration for Crypto Council.
Provides multi-channel logging with dedicated files for different components.
"""

from enum import Enum
from typing import Dict, Any, Optional
from pathlib import Path
from dataclasses import dataclass


class LogChannel(str, Enum):
    """Logging channels for different components."""

    APPLICATION = "application"  # General application logs
    MARKET_DATA = "market_data"  # Provider requests and synthetic fallbacks
    AGENTS = "agents"            # AI agent fan-out and report synthesis
    API = "api"                  # API requests/responses
    PERFORMANCE = "performance"  # Latency figures
    ERROR = "error"              # Error logs


@dataclass
class ChannelConfig:
    """Configuration for a logging channel."""

    name: str
    filename: str
    level: str = "INFO"
    max_bytes: str = "50MB"
    backup_count: int = 5
    retention_days: Optional[int] = None

    def get_file_path(self, logs_dir: str) -> Path:
        """Get the full file path for this channel."""
        return Path(logs_dir) / self.filename


# Channel configurations
CHANNEL_CONFIGS: Dict[LogChannel, ChannelConfig] = {
    LogChannel.APPLICATION: ChannelConfig(
        name="application",
        filename="application.log",
        max_bytes="100MB",
        backup_count=10,
        retention_days=30
    ),
    LogChannel.MARKET_DATA: ChannelConfig(
        name="market_data",
        filename="market_data.log",
        max_bytes="100MB",
        retention_days=7
    ),
    LogChannel.AGENTS: ChannelConfig(
        name="agents",
        filename="agents.log",
        max_bytes="100MB",
        backup_count=10,
        retention_days=30
    ),
    LogChannel.API: ChannelConfig(
        name="api",
        filename="api.log",
        backup_count=10,
        retention_days=30
    ),
    LogChannel.PERFORMANCE: ChannelConfig(
        name="performance",
        filename="performance.log",
        retention_days=30
    ),
    LogChannel.ERROR: ChannelConfig(
        name="error",
        filename="error.log",
        level="ERROR",
        backup_count=20,
        retention_days=90
    ),
}


def get_channel_for_component(component: str) -> LogChannel:
    """Get the appropriate logging channel for a component."""
    component_mapping = {
        "market_data": LogChannel.MARKET_DATA,
        "rate_limiter": LogChannel.MARKET_DATA,
        "synthetic": LogChannel.MARKET_DATA,
        "orchestrator": LogChannel.AGENTS,
        "agents": LogChannel.AGENTS,
        "report": LogChannel.AGENTS,
        "api": LogChannel.API,
        "performance": LogChannel.PERFORMANCE,
    }

    return component_mapping.get(component, LogChannel.APPLICATION)


def get_channel_config(channel: LogChannel) -> ChannelConfig:
    """Get configuration for a specific channel."""
    return CHANNEL_CONFIGS[channel]


def create_log_directory_structure(logs_dir: str) -> None:
    """Create the logs directory."""
    Path(logs_dir).mkdir(parents=True, exist_ok=True)


def get_channel_statistics() -> Dict[str, Any]:
    """Get statistics about all logging channels."""
    stats = {
        "total_channels": len(LogChannel),
        "channels": {}
    }

    for channel in LogChannel:
        config = get_channel_config(channel)
        stats["channels"][channel.value] = {
            "filename": config.filename,
            "level": config.level,
            "max_bytes": config.max_bytes,
            "backup_count": config.backup_count,
            "retention_days": config.retention_days,
        }

    return stats
