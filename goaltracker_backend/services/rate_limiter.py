"""
In-process sliding window rate limiter.

Request timestamps are kept per "<user_id>:<policy identifier>" key in a
module level dictionary guarded by a lock. The store lives in one process, so
each worker enforces its own limits.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from config.settings import AI_RATE_LIMIT_MAX_REQUESTS, AI_RATE_LIMIT_WINDOW_SECONDS

logger = logging.getLogger(__name__)

# Timestamps older than this are dropped whenever the store is pruned
MAX_TIMESTAMP_AGE_SECONDS = 60 * 60
PRUNE_INTERVAL_SECONDS = 5 * 60

@dataclass(frozen=True)
class RateLimitConfig:
    max_requests: int
    window_seconds: float
    identifier: Optional[str] = None

@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: datetime
    retry_after: Optional[int] = None

@dataclass
class RateLimitStatus:
    requests_in_window: int
    remaining: int
    reset_at: datetime

class RateLimitPresets:
    # AI generation endpoints
    AI_GENERATION = RateLimitConfig(
        max_requests=AI_RATE_LIMIT_MAX_REQUESTS,
        window_seconds=AI_RATE_LIMIT_WINDOW_SECONDS,
        identifier="ai-generation",
    )
    STRICT = RateLimitConfig(max_requests=5, window_seconds=60, identifier="strict")
    STANDARD = RateLimitConfig(max_requests=100, window_seconds=60, identifier="standard")

_request_timestamps: Dict[str, List[float]] = {}
_lock = threading.Lock()
_last_prune = time.time()

def _key(user_id: str, identifier: Optional[str]) -> str:
    return f"{user_id}:{identifier}" if identifier else user_id

def _to_datetime(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)

def _prune_locked(now: float) -> None:
    global _last_prune
    if now - _last_prune < PRUNE_INTERVAL_SECONDS:
        return
    _last_prune = now
    for key in list(_request_timestamps.keys()):
        fresh = [ts for ts in _request_timestamps[key] if now - ts < MAX_TIMESTAMP_AGE_SECONDS]
        if fresh:
            _request_timestamps[key] = fresh
        else:
            del _request_timestamps[key]

def check_rate_limit(user_id: str, config: RateLimitConfig, now: Optional[float] = None) -> RateLimitResult:
    """
    Record a request for the user unless the window is already full.

    A rejected request is not recorded, so hammering the endpoint does not
    push the reset time further away.
    """
    now = time.time() if now is None else now
    window_start = now - config.window_seconds
    key = _key(user_id, config.identifier)

    with _lock:
        _prune_locked(now)
        recent = [ts for ts in _request_timestamps.get(key, []) if ts > window_start]

        if len(recent) >= config.max_requests:
            _request_timestamps[key] = recent
            reset_at = min(recent) + config.window_seconds
            retry_after = max(1, math.ceil(reset_at - now))
            logger.info(f"Rate limit hit for {key}: {len(recent)}/{config.max_requests}, retry in {retry_after}s")
            return RateLimitResult(
                allowed=False,
                remaining=0,
                reset_at=_to_datetime(reset_at),
                retry_after=retry_after,
            )

        recent.append(now)
        _request_timestamps[key] = recent

    return RateLimitResult(
        allowed=True,
        remaining=config.max_requests - len(recent),
        reset_at=_to_datetime(now + config.window_seconds),
    )

def get_rate_limit_status(user_id: str, config: RateLimitConfig, now: Optional[float] = None) -> RateLimitStatus:
    """Current usage without consuming a request."""
    now = time.time() if now is None else now
    window_start = now - config.window_seconds
    with _lock:
        recent = [ts for ts in _request_timestamps.get(_key(user_id, config.identifier), []) if ts > window_start]
    return RateLimitStatus(
        requests_in_window=len(recent),
        remaining=max(0, config.max_requests - len(recent)),
        reset_at=_to_datetime(now + config.window_seconds),
    )

def reset_rate_limit(user_id: str, identifier: Optional[str] = None) -> None:
    with _lock:
        _request_timestamps.pop(_key(user_id, identifier), None)

def clear_all_rate_limits() -> None:
    """Drop every stored timestamp (mainly for testing)."""
    with _lock:
        _request_timestamps.clear()
