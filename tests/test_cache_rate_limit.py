import pytest

from business_tools.cache import AnalysisCache
from business_tools.errors import RateLimitExceeded
from business_tools.rate_limit import RateLimiter, client_identifier


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_cache_keys_are_normalized_and_expire():
    clock = FakeClock()
    cache = AnalysisCache(ttl=3600, clock=clock)
    sentinel = object()
    cache.set("  https://Example.com/Page ", sentinel)

    assert cache.get("https://example.com/page") is sentinel
    clock.now += 3599
    assert cache.get("https://example.com/page") is sentinel
    clock.now += 1
    assert cache.get("https://example.com/page") is None
    assert len(cache) == 0


def test_cache_drops_expired_entries_on_write():
    clock = FakeClock()
    cache = AnalysisCache(ttl=60, clock=clock)
    for index in range(1000):
        cache.set(f"https://example.com/{index}", index)
    assert len(cache) == 1000

    clock.now += 61
    cache.set("https://example.com/fresh", "fresh")

    assert len(cache) == 1
    assert cache.get("https://example.com/fresh") == "fresh"


def test_cache_is_bounded():
    cache = AnalysisCache(maxsize=2, clock=FakeClock())
    for name in ("a", "b", "c"):
        cache.set(f"https://example.com/{name}", name)

    assert len(cache) == 2


def test_rate_limiter_rolling_window():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=3, window=60, clock=clock)
    for _ in range(3):
        limiter.check("ip_1")
    assert limiter.remaining("ip_1") == 0

    clock.now += 20
    with pytest.raises(RateLimitExceeded) as excinfo:
        limiter.check("ip_1")
    assert excinfo.value.retry_after == 40
    assert excinfo.value.to_dict()["code"] == "rate_limit_exceeded"

    limiter.check("ip_2")
    clock.now += 40
    limiter.check("ip_1")
    assert limiter.remaining("ip_1") == 2


def test_client_identifier():
    assert client_identifier(user_id=7) == "user_7"
    assert client_identifier({"X-Forwarded-For": "203.0.113.5, 10.0.0.1"}) == "ip_203.0.113.5"
    assert client_identifier({"CF-Connecting-IP": "198.51.100.2"}, remote_addr="10.0.0.1") == "ip_198.51.100.2"
    assert client_identifier({}, remote_addr="192.0.2.9") == "ip_192.0.2.9"
    assert client_identifier() == "ip_unknown"


def test_rate_limiter_forgets_idle_clients():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window=60, clock=clock)
    for index in range(1000):
        limiter.check(f"ip_{index}")
    assert len(limiter) == 1000

    clock.now += 60
    limiter.check("ip_new")

    assert len(limiter) == 1
    assert limiter.remaining("ip_0") == 5
    assert len(limiter) == 1
