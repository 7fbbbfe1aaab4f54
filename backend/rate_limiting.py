"""
Per-IP rate limiting middleware.

Token bucket keyed by client IP: each client starts with `burst` tokens and
regains one token every `replenish_seconds`. The bucket table is owned by the
limiter and guarded by its own lock; request handlers never touch it.
"""
import logging
import time
from threading import Lock
from typing import Callable, Dict, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger("solana_ix")

IDLE_BUCKET_SECONDS = 600
CLEANUP_THRESHOLD = 10_000
CLEANUP_INTERVAL_SECONDS = 60


class RateLimiter:
    def __init__(
        self,
        burst: int = 5,
        replenish_seconds: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.burst = burst
        self.replenish_seconds = replenish_seconds
        self.clock = clock
        self.buckets: Dict[str, Tuple[float, float]] = {}  # ip -> (tokens, last_refill)
        self.lock = Lock()
        self.last_cleanup = clock()

    def _refill(self, tokens: float, last_refill: float, now: float) -> float:
        if self.replenish_seconds <= 0:
            return float(self.burst)
        elapsed = max(now - last_refill, 0.0)
        return min(tokens + elapsed / self.replenish_seconds, float(self.burst))

    def allow(self, key: str) -> Tuple[bool, float]:
        """Take one token for `key`. Returns (allowed, seconds until next token)."""
        with self.lock:
            now = self.clock()
            if len(self.buckets) > CLEANUP_THRESHOLD and now - self.last_cleanup >= CLEANUP_INTERVAL_SECONDS:
                self._cleanup(now)
            tokens, last_refill = self.buckets.get(key, (float(self.burst), now))
            tokens = self._refill(tokens, last_refill, now)
            if tokens < 1:
                self.buckets[key] = (tokens, now)
                return False, (1 - tokens) * self.replenish_seconds
            self.buckets[key] = (tokens - 1, now)
            return True, 0.0

    def _cleanup(self, now: float) -> None:
        self.last_cleanup = now
        self.buckets = {
            key: bucket for key, bucket in self.buckets.items()
            if now - bucket[1] < IDLE_BUCKET_SECONDS
        }

    def reset(self) -> None:
        with self.lock:
            self.buckets.clear()


class GeneralRateLimitMiddleware(BaseHTTPMiddleware):
    EXEMPT_PATHS = ["/health", "/docs", "/redoc", "/openapi.json"]

    def __init__(self, app, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or any(request.url.path.startswith(p) for p in self.EXEMPT_PATHS):
            return await call_next(request)
        client_ip = request.client.host if request.client else "unknown"
        allowed, retry_after = self.limiter.allow(client_ip)
        if not allowed:
            logger.warning("rate_limited ip=%s path=%s", client_ip, request.url.path)
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "Too many requests"},
                headers={"Retry-After": str(max(int(retry_after + 0.999), 1))},
            )
        return await call_next(request)
