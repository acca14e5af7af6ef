# Structured exception hierarchy for the Crypto Council orchestration core

from typing import Dict, Any, Optional
from datetime import datetime, timezone


class CouncilException(Exception):
    """Base exception for all Crypto Council specific errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 correlation_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.correlation_id = correlation_id
        self.timestamp = datetime.now(timezone.utc)


class TransientError(CouncilException):
    """Errors that may clear up on a later attempt (caller decides whether to retry)"""
    pass


class PermanentError(CouncilException):
    """Errors that will recur until the input or configuration changes"""
    pass


# Provider Errors
class ProviderError(TransientError):
    """Base class for failures talking to an external provider"""

    def __init__(self, message: str, provider: str, **kwargs):
        super().__init__(message, **kwargs)
        self.provider = provider


class RateLimitExceeded(ProviderError):
    """Local rate-limit acquisition denied - handled by falling back, never surfaced"""

    def __init__(self, provider: str, **kwargs):
        super().__init__(f"Rate limit exceeded for provider '{provider}'", provider, **kwargs)


class ProviderHTTPError(ProviderError):
    """Provider answered with a non-2xx status"""

    def __init__(self, message: str, provider: str, status: int,
                 response_text: Optional[str] = None, **kwargs):
        super().__init__(message, provider, **kwargs)
        self.status = status
        self.response_text = response_text


class ProviderParseError(ProviderError):
    """Provider payload could not be parsed into the expected shape"""
    pass


class UnsupportedProviderError(PermanentError):
    """No implementation is registered for the requested provider"""

    def __init__(self, provider: str, **kwargs):
        super().__init__(f"Unsupported provider: {provider}", **kwargs)
        self.provider = provider


class MissingCredential(PermanentError):
    """Provider requires an API key but none was supplied"""

    def __init__(self, provider: str, **kwargs):
        super().__init__(f"Provider '{provider}' requires an API key", **kwargs)
        self.provider = provider


# Orchestration Errors
class AgentTimeout(TransientError):
    """A single agent call exceeded its time budget"""

    def __init__(self, agent_id: str, timeout_seconds: float, **kwargs):
        super().__init__(f"Agent '{agent_id}' timed out after {timeout_seconds:g}s", **kwargs)
        self.agent_id = agent_id
        self.timeout_seconds = timeout_seconds


class NoEnabledAgents(PermanentError):
    """No agent is both enabled and carrying an API key - aborts the run before dispatch"""

    def __init__(self, message: str = "No enabled agents with an API key", **kwargs):
        super().__init__(message, **kwargs)


class InvalidTask(PermanentError):
    """Task is structurally invalid (missing symbol or question)"""

    def __init__(self, message: str, field: str, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


# Configuration Errors
class ConfigurationError(PermanentError):
    """Configuration validation errors"""

    def __init__(self, message: str, config_field: str, config_value: Any,
                 **kwargs):
        super().__init__(message, **kwargs)
        self.config_field = config_field
        self.config_value = config_value
