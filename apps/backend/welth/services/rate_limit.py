from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Callable, Optional, Protocol

import structlog

from welth.core.errors import Blocked, RateLimited

logger = structlog.get_logger(__name__)


class DenialReason(str, Enum):
    RATE_LIMIT = "RATE_LIMIT"
    BLOCKED = "BLOCKED"


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    reason: Optional[DenialReason] = None
    remaining: int = 0
    reset_in_seconds: float = 0.0

    @property
    def is_denied(self) -> bool:
        return not self.allowed


class RateGate(Protocol):
    def check(self, user_id: int, requested: int = 1) -> GateDecision: ...


def enforce(gate: RateGate, user_id: int, requested: int = 1) -> GateDecision:
    """Consult ``gate`` and raise when it denies the request."""
    decision = gate.check(user_id, requested)
    if not decision.is_denied:
        return decision
    if decision.reason == DenialReason.RATE_LIMIT:
        logger.warning(
            "gate.rate_limit_exceeded",
            user_id=user_id,
            remaining=decision.remaining,
            reset_in_seconds=round(decision.reset_in_seconds, 1),
        )
        raise RateLimited("Too many requests. Please try again later")
    logger.warning("gate.blocked", user_id=user_id)
    raise Blocked("Request blocked")


class TokenBucketGate:
    """In-process token bucket keyed by user id.

    ``refill`` tokens are added every ``interval`` seconds, up to ``capacity``.
    Users in ``blocked`` are always denied.
    """

    def __init__(
        self,
        capacity: int = 10,
        refill: int = 10,
        interval: float = 3600.0,
        *,
        blocked: set[int] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0 or refill <= 0 or interval <= 0:
            raise ValueError("capacity, refill and interval must be positive")
        self.capacity = capacity
        self.refill = refill
        self.interval = interval
        self.blocked = set(blocked or ())
        self._clock = clock
        self._buckets: dict[int, tuple[float, float]] = {}
        self._lock = Lock()

    def _refilled(self, user_id: int, now: float) -> float:
        tokens, last = self._buckets.get(user_id, (float(self.capacity), now))
        elapsed = max(0.0, now - last)
        return min(float(self.capacity), tokens + elapsed * self.refill / self.interval)

    def check(self, user_id: int, requested: int = 1) -> GateDecision:
        if user_id in self.blocked:
            return GateDecision(allowed=False, reason=DenialReason.BLOCKED)
        with self._lock:
            now = self._clock()
            tokens = self._refilled(user_id, now)
            if tokens >= requested:
                tokens -= requested
                self._buckets[user_id] = (tokens, now)
                return GateDecision(allowed=True, remaining=int(tokens))
            self._buckets[user_id] = (tokens, now)
            missing = requested - tokens
            reset = missing * self.interval / self.refill
            return GateDecision(
                allowed=False,
                reason=DenialReason.RATE_LIMIT,
                remaining=int(tokens),
                reset_in_seconds=reset,
            )


class AllowAllGate:
    def check(self, user_id: int, requested: int = 1) -> GateDecision:
        return GateDecision(allowed=True)
