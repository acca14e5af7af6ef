"""
Per-provider request rate limiter with fixed minute and hour windows.
"""

import threading
import time
from dataclasses import dataclass, asdict
from typing import Callable, Dict, Optional, Any

from core.logging import get_market_data_logger_safe
from core.providers.registry import ProviderRegistry

MINUTE_SECONDS = 60
HOUR_SECONDS = 3600


@dataclass
class RateLimitState:
    """Counters for one provider; mutated only by RateLimiter.try_acquire"""
    provider_id: str
    minute_count: int = 0
    hour_count: int = 0
    minute_window_start: int = 0  # floor(now / 60)
    hour_window_start: int = 0    # floor(now / 3600)


class RateLimiter:
    """Fail-closed, non-blocking limiter gating calls to external providers.

    A denied acquisition is the caller's cue to fall back, not to retry.
    Counters are guarded by a lock; the critical section never awaits, so the
    limiter is safe to share between threads and asyncio tasks.
    """

    def __init__(self, registry: ProviderRegistry, clock: Callable[[], float] = time.time,
                 metrics_collector: Optional[Any] = None):
        self.registry = registry
        self.clock = clock
        self.metrics_collector = metrics_collector
        self._states: Dict[str, RateLimitState] = {}
        self._lock = threading.Lock()
        self.logger = get_market_data_logger_safe("rate_limiter")

    def try_acquire(self, provider_id: str) -> bool:
        """Count one request against the provider's limits if both windows allow it."""
        provider_id = provider_id.lower()
        config = self.registry.find(provider_id)
        if config is None:
            self.logger.warning("Rate limit check for unknown provider", provider=provider_id)
            return False

        now = self.clock()
        minute_index = int(now // MINUTE_SECONDS)
        hour_index = int(now // HOUR_SECONDS)

        with self._lock:
            state = self._states.get(provider_id)
            if state is None:
                state = RateLimitState(
                    provider_id=provider_id,
                    minute_window_start=minute_index,
                    hour_window_start=hour_index,
                )
                self._states[provider_id] = state

            if state.minute_window_start != minute_index:
                state.minute_count = 0
                state.minute_window_start = minute_index
            if state.hour_window_start != hour_index:
                state.hour_count = 0
                state.hour_window_start = hour_index

            limit = config.rate_limit
            allowed = state.minute_count < limit.per_minute and state.hour_count < limit.per_hour
            if allowed:
                state.minute_count += 1
                state.hour_count += 1
            minute_count, hour_count = state.minute_count, state.hour_count

        if not allowed:
            self.logger.warning(
                "Rate limit exceeded",
                provider=provider_id,
                minute_count=minute_count,
                hour_count=hour_count,
                per_minute=limit.per_minute,
                per_hour=limit.per_hour,
            )
            if self.metrics_collector:
                self.metrics_collector.record_rate_limit_denial(provider_id)
        return allowed

    def get_stats(self, provider_id: str) -> Dict[str, Any]:
        """Current window counts and configured limits for a provider"""
        provider_id = provider_id.lower()
        config = self.registry.get(provider_id)
        now = self.clock()
        minute_index = int(now // MINUTE_SECONDS)
        hour_index = int(now // HOUR_SECONDS)

        with self._lock:
            state = self._states.get(provider_id)
            snapshot = asdict(state) if state else asdict(RateLimitState(provider_id=provider_id))

        # Report zero for windows that have already rolled over
        minute_count = snapshot["minute_count"] if snapshot["minute_window_start"] == minute_index else 0
        hour_count = snapshot["hour_count"] if snapshot["hour_window_start"] == hour_index else 0

        return {
            "provider": provider_id,
            "minute_count": minute_count,
            "hour_count": hour_count,
            "per_minute": config.rate_limit.per_minute,
            "per_hour": config.rate_limit.per_hour,
            "minute_remaining": max(0, config.rate_limit.per_minute - minute_count),
            "hour_remaining": max(0, config.rate_limit.per_hour - hour_count),
        }

    def reset(self, provider_id: Optional[str] = None) -> None:
        """Clear counters for one provider, or for all providers"""
        with self._lock:
            if provider_id is None:
                self._states.clear()
            else:
                self._states.pop(provider_id.lower(), None)
