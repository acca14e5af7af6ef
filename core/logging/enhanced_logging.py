# Enhanced structured logging with multi-channel support
import sys
import logging
import logging.handlers
from pathlib import Path
from typing import Dict, Optional, Any
import structlog

from core.config.settings import Settings
from .channels import (
    LogChannel,
    get_channel_for_component,
    get_channel_config,
    create_log_directory_structure,
    get_channel_statistics
)
from .correlation import CorrelationIdManager

# Global logger manager instance
_logger_manager: Optional['EnhancedLoggerManager'] = None

# Global flag to prevent duplicate configuration
_enhanced_logging_configured = False


class ChannelFilter(logging.Filter):
    """Filter that routes records to a handler only if they match a channel.

    If the record has a structured `channel` attribute, it must match `expected_channel`.
    If not present, allow selected third-party logger name prefixes (e.g., uvicorn/httpx) when provided.
    """

    def __init__(self, expected_channel: str, allowed_logger_prefixes: Optional[list[str]] = None):
        super().__init__()
        self.expected_channel = expected_channel
        self.allowed_logger_prefixes = allowed_logger_prefixes or []

    def filter(self, record: logging.LogRecord) -> bool:
        ch = getattr(record, "channel", None)
        if ch is None and isinstance(record.msg, dict):
            ch = record.msg.get("channel")
        if ch is not None:
            return str(ch) == self.expected_channel
        name = getattr(record, "name", "")
        for prefix in self.allowed_logger_prefixes:
            if name.startswith(prefix):
                return True
        return False


def _foreign_pre_chain() -> list:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


class EnhancedLoggerManager:
    """Enhanced logging manager with multi-channel support and configurable formats."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.channel_handlers: Dict[LogChannel, logging.Handler] = {}
        self.configured_loggers: Dict[str, structlog.BoundLogger] = {}

        # Set up logging
        self._setup_logging()

    def _setup_logging(self) -> None:
        """Setup enhanced logging with configurable formats."""
        if self.settings.logging.file_enabled:
            create_log_directory_structure(self.settings.logs_dir)

        self._setup_console_logging()

        if self.settings.logging.file_enabled:
            self._setup_file_logging()

        if self.settings.logging.multi_channel_enabled:
            self._setup_multi_channel_logging()

        self._configure_structlog()

    def _level(self) -> int:
        return getattr(logging, self.settings.logging.level.upper())

    def _setup_console_logging(self) -> None:
        """Setup console logging with configurable format."""
        root_logger = logging.getLogger()
        root_logger.setLevel(self._level())

        if not self.settings.logging.console_enabled:
            # Remove any existing stdout console handlers (e.g., added by uvicorn)
            for handler in list(root_logger.handlers):
                if isinstance(handler, logging.StreamHandler) and getattr(handler, "stream", None) == sys.stdout:
                    root_logger.removeHandler(handler)
            return

        console_processor = (
            structlog.processors.JSONRenderer()
            if self.settings.logging.console_json_format
            else structlog.dev.ConsoleRenderer()
        )
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=console_processor,
            foreign_pre_chain=_foreign_pre_chain(),
        )

        # If a console handler already exists (e.g., set by uvicorn), reconfigure it
        for handler in root_logger.handlers:
            if isinstance(handler, logging.StreamHandler) and getattr(handler, "stream", None) == sys.stdout:
                handler.setLevel(self._level())
                handler.setFormatter(formatter)
                return

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self._level())
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    def _file_formatter(self) -> structlog.stdlib.ProcessorFormatter:
        file_processor = (
            structlog.processors.JSONRenderer()
            if self.settings.logging.json_format
            else structlog.processors.KeyValueRenderer(key_order=["event", "level", "timestamp"])
        )
        return structlog.stdlib.ProcessorFormatter(
            processor=file_processor,
            foreign_pre_chain=_foreign_pre_chain(),
        )

    def _setup_file_logging(self) -> None:
        """Setup the combined application log file."""
        log_file = Path(self.settings.logs_dir) / "crypto_council.log"

        root_logger = logging.getLogger()

        for handler in root_logger.handlers:
            if (isinstance(handler, logging.handlers.RotatingFileHandler) and
                    Path(handler.baseFilename) == log_file.resolve()):
                return  # File handler already configured

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=self._parse_size(self.settings.logging.file_max_size),
            backupCount=self.settings.logging.file_backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(self._level())
        file_handler.setFormatter(self._file_formatter())
        root_logger.addHandler(file_handler)

    def _setup_multi_channel_logging(self) -> None:
        """Setup multi-channel logging with dedicated files."""
        # Channel handlers are file-backed
        if not self.settings.logging.file_enabled:
            return

        for channel in LogChannel:
            config = get_channel_config(channel)
            self.channel_handlers[channel] = self._create_channel_handler(channel, config)

        # API channel -> uvicorn/fastapi loggers
        api_handler = self.channel_handlers.get(LogChannel.API)
        if api_handler:
            for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
                logger = logging.getLogger(name)
                if api_handler not in logger.handlers:
                    logger.addHandler(api_handler)

        # MARKET_DATA channel -> outbound HTTP client
        md_handler = self.channel_handlers.get(LogChannel.MARKET_DATA)
        if md_handler:
            lg = logging.getLogger("httpx")
            if md_handler not in lg.handlers:
                lg.addHandler(md_handler)
            if lg.level == logging.NOTSET:
                lg.setLevel(logging.WARNING)

        # ERROR channel -> root, captures all ERROR+ records
        error_handler = self.channel_handlers.get(LogChannel.ERROR)
        if error_handler:
            root_logger = logging.getLogger()
            if error_handler not in root_logger.handlers:
                root_logger.addHandler(error_handler)

    def _create_channel_handler(self, channel: LogChannel, config) -> logging.Handler:
        """Create a file handler for a specific channel."""
        handler = logging.handlers.RotatingFileHandler(
            filename=config.get_file_path(self.settings.logs_dir),
            maxBytes=self._parse_size(config.max_bytes),
            backupCount=config.backup_count,
            encoding="utf-8"
        )
        handler.setLevel(getattr(logging, config.level))
        handler.setFormatter(self._file_formatter())

        # Error handler keeps every ERROR+ record regardless of channel
        if channel != LogChannel.ERROR:
            allowed_prefixes = []
            if channel == LogChannel.API:
                allowed_prefixes = ["uvicorn", "fastapi", "starlette"]
            elif channel == LogChannel.MARKET_DATA:
                allowed_prefixes = ["httpx"]
            handler.addFilter(ChannelFilter(expected_channel=channel.value, allowed_logger_prefixes=allowed_prefixes))

        return handler

    @staticmethod
    def _parse_size(size_str: str) -> int:
        """Parse size string (e.g., '100MB') to bytes."""
        size_str = size_str.upper()

        if size_str.endswith("B"):
            size_str = size_str[:-1]

        multipliers = {
            "K": 1024,
            "M": 1024 * 1024,
            "G": 1024 * 1024 * 1024,
        }

        for suffix, multiplier in multipliers.items():
            if size_str.endswith(suffix):
                return int(float(size_str[:-1]) * multiplier)

        return int(size_str)

    def _configure_structlog(self) -> None:
        """Configure structlog with appropriate processors."""
        keys_to_redact = {k.lower() for k in self.settings.logging.redact_keys}

        def add_correlation_id(logger, name, event_dict):
            """Add correlation ID to log events if available"""
            correlation_id = CorrelationIdManager.get_correlation_id()
            if correlation_id:
                event_dict.setdefault('correlation_id', correlation_id)
                correlation_context = CorrelationIdManager.get_correlation_context()
                if correlation_context:
                    event_dict['correlation_context'] = correlation_context
            return event_dict

        def add_standard_context(logger, name, event_dict):
            """Bind standard context fields once from settings."""
            event_dict.setdefault('env', self.settings.environment.value)
            event_dict.setdefault('service', self.settings.app_name)
            event_dict.setdefault('version', self.settings.version)
            return event_dict

        def redact_sensitive(logger, name, event_dict):
            """Redact sensitive fields from event dict recursively."""

            def _redact(obj):
                if isinstance(obj, dict):
                    out = {}
                    for k, v in obj.items():
                        if isinstance(k, str) and k.lower() in keys_to_redact:
                            out[k] = '[REDACTED]'
                        else:
                            out[k] = _redact(v)
                    return out
                if isinstance(obj, list):
                    return [_redact(v) for v in obj]
                return obj

            return _redact(event_dict)

        def normalize_error(logger, name, event_dict):
            """Add normalized error fields if exception info is present."""
            exc_text = event_dict.get("exception")
            if exc_text and isinstance(exc_text, str):
                event_dict.setdefault("stack", exc_text)
                last_line = exc_text.strip().splitlines()[-1]
                if ":" in last_line:
                    etype, emsg = last_line.split(":", 1)
                    event_dict.setdefault("error_type", etype.strip())
                    event_dict.setdefault("error_message", emsg.strip())
            if "error" in event_dict and not event_dict.get("error_message"):
                event_dict["error_message"] = str(event_dict["error"])
            return event_dict

        processors = [
            add_correlation_id,
            add_standard_context,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            normalize_error,
            structlog.processors.UnicodeDecoder(),
            redact_sensitive,
            # Defer final rendering to handlers via ProcessorFormatter
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ]

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def get_logger(self, name: str, component: Optional[str] = None) -> structlog.BoundLogger:
        """Get a structured logger for a component."""
        key = f"{name}:{component}" if component else name
        if key in self.configured_loggers:
            return self.configured_loggers[key]

        logger = structlog.get_logger(name)

        if component:
            channel = get_channel_for_component(component)
            logger = logger.bind(component=component, channel=channel.value)
            if channel in self.channel_handlers:
                stdlib_logger = logging.getLogger(name)
                if self.channel_handlers[channel] not in stdlib_logger.handlers:
                    stdlib_logger.addHandler(self.channel_handlers[channel])

        self.configured_loggers[key] = logger
        return logger

    def get_channel_logger(self, name: str, channel: LogChannel) -> structlog.BoundLogger:
        """Get a logger for a specific channel."""
        logger = structlog.get_logger(name).bind(channel=channel.value)

        if channel in self.channel_handlers:
            stdlib_logger = logging.getLogger(name)
            if self.channel_handlers[channel] not in stdlib_logger.handlers:
                stdlib_logger.addHandler(self.channel_handlers[channel])

        return logger

    def get_statistics(self) -> Dict[str, Any]:
        """Get logging statistics."""
        stats = {
            "total_loggers": len(self.configured_loggers),
            "multi_channel_enabled": self.settings.logging.multi_channel_enabled,
            "file_logging_enabled": self.settings.logging.file_enabled,
            "console_logging_enabled": self.settings.logging.console_enabled,
            "json_format": self.settings.logging.json_format,
            "logs_directory": self.settings.logs_dir,
        }

        if self.settings.logging.multi_channel_enabled:
            stats.update(get_channel_statistics())

        stats["channel_handlers"] = {
            ch.value: {"attached": ch in self.channel_handlers} for ch in LogChannel
        }
        return stats


def configure_enhanced_logging(settings: Settings) -> None:
    """Configure enhanced logging system."""
    global _logger_manager, _enhanced_logging_configured

    if _enhanced_logging_configured:
        return

    _logger_manager = EnhancedLoggerManager(settings)
    _enhanced_logging_configured = True


def get_enhanced_logger(name: str, component: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    if _logger_manager is None:
        # Not configured yet (tests, library use): plain structlog defaults
        logger = structlog.get_logger(name)
        if component:
            logger = logger.bind(component=component)
        return logger

    return _logger_manager.get_logger(name, component)


def get_channel_logger(name: str, channel: LogChannel) -> structlog.BoundLogger:
    """Get a logger for a specific channel."""
    if _logger_manager is None:
        return structlog.get_logger(name).bind(channel=channel.value)

    return _logger_manager.get_channel_logger(name, channel)


def get_logging_statistics() -> Dict[str, Any]:
    """Get logging system statistics."""
    if _logger_manager is None:
        return {"error": "Logger manager not initialized"}

    return _logger_manager.get_statistics()


# Convenience functions for specific components
def get_market_data_logger(name: str) -> structlog.BoundLogger:
    """Get a market data logger."""
    return get_channel_logger(name, LogChannel.MARKET_DATA)


def get_agents_logger(name: str) -> structlog.BoundLogger:
    """Get an agent orchestration logger."""
    return get_channel_logger(name, LogChannel.AGENTS)


def get_api_logger(name: str) -> structlog.BoundLogger:
    """Get an API logger."""
    return get_channel_logger(name, LogChannel.API)


def get_performance_logger(name: str) -> structlog.BoundLogger:
    """Get a performance logger."""
    return get_channel_logger(name, LogChannel.PERFORMANCE)


def get_error_logger(name: str) -> structlog.BoundLogger:
    """Get an error logger."""
    return get_channel_logger(name, LogChannel.ERROR)
