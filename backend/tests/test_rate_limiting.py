import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import rate_limiting
from rate_limiting import GeneralRateLimitMiddleware, RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestRateLimiter:
    def test_burst_then_blocked(self, clock):
        limiter = RateLimiter(burst=3, replenish_seconds=10, clock=clock)
        assert [limiter.allow("1.2.3.4")[0] for _ in range(3)] == [True, True, True]
        allowed, retry_after = limiter.allow("1.2.3.4")
        assert allowed is False
        assert retry_after == pytest.approx(10)

    def test_replenishes_one_token_per_interval(self, clock):
        limiter = RateLimiter(burst=1, replenish_seconds=10, clock=clock)
        assert limiter.allow("ip")[0] is True
        clock.advance(5)
        assert limiter.allow("ip")[0] is False
        clock.advance(5)
        assert limiter.allow("ip")[0] is True

    def test_never_exceeds_burst(self, clock):
        limiter = RateLimiter(burst=2, replenish_seconds=1, clock=clock)
        clock.advance(3600)
        assert [limiter.allow("ip")[0] for _ in range(3)] == [True, True, False]

    def test_clients_are_independent(self, clock):
        limiter = RateLimiter(burst=1, replenish_seconds=10, clock=clock)
        assert limiter.allow("a")[0] is True
        assert limiter.allow("a")[0] is False
        assert limiter.allow("b")[0] is True

    def test_reset(self, clock):
        limiter = RateLimiter(burst=1, replenish_seconds=10, clock=clock)
        limiter.allow("a")
        limiter.reset()
        assert limiter.allow("a")[0] is True

    def test_idle_buckets_pruned_at_most_once_per_interval(self, clock, monkeypatch):
        monkeypatch.setattr(rate_limiting, "CLEANUP_THRESHOLD", 3)
        limiter = RateLimiter(burst=5, replenish_seconds=10, clock=clock)
        calls = []
        original = limiter._cleanup
        monkeypatch.setattr(limiter, "_cleanup", lambda now: (calls.append(now), original(now)))

        for ip in ("a", "b", "c", "d"):
            limiter.allow(ip)
        clock.advance(rate_limiting.CLEANUP_INTERVAL_SECONDS)
        for ip in ("e", "f", "g"):
            limiter.allow(ip)
        assert len(calls) == 1

        clock.advance(rate_limiting.IDLE_BUCKET_SECONDS)
        limiter.allow("h")
        assert len(calls) == 2
        assert set(limiter.buckets) == {"h"}


def test_middleware_returns_429_envelope(clock):
    app = FastAPI()
    app.add_middleware(GeneralRateLimitMiddleware, limiter=RateLimiter(burst=2, replenish_seconds=10, clock=clock))

    @app.post("/keypair")
    def keypair():
        return {"success": True, "data": "ok"}

    @app.get("/health")
    def health():
        return {"success": True, "data": "Server is running"}

    with TestClient(app) as c:
        assert c.post("/keypair").status_code == 200
        assert c.post("/keypair").status_code == 200
        blocked = c.post("/keypair")
        assert blocked.status_code == 429
        assert blocked.json() == {"success": False, "error": "Too many requests"}
        assert blocked.headers["Retry-After"] == "10"
        # Health checks stay reachable.
        assert c.get("/health").status_code == 200
