"""Tests for the sliding-window rate limiter and its factory."""

from storefront.placement.request import RequestMeta
from storefront.ratelimit import ORDER_ROUTE_KEY, get_rate_limiter, reset_rate_limiter, set_rate_limiter
from storefront.ratelimit.memory_adapter import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _limiter(clock, **kwargs):
    kwargs.setdefault("max_attempts", 3)
    kwargs.setdefault("window_seconds", 300)
    return SlidingWindowRateLimiter(clock=clock, **kwargs)


META = RequestMeta(ip="10.0.0.1", subject="jane@x.com")


class TestSlidingWindow:
    def test_allows_up_to_max_attempts(self):
        limiter = _limiter(FakeClock())
        assert [limiter.check(ORDER_ROUTE_KEY, META) for _ in range(3)] == [False, False, False]
        assert limiter.check(ORDER_ROUTE_KEY, META) is True

    def test_window_slides(self):
        clock = FakeClock()
        limiter = _limiter(clock)
        for _ in range(3):
            limiter.check(ORDER_ROUTE_KEY, META)
        clock.now += 301
        assert limiter.check(ORDER_ROUTE_KEY, META) is False

    def test_retry_after_counts_down_to_oldest_hit(self):
        clock = FakeClock()
        limiter = _limiter(clock)
        for _ in range(3):
            limiter.check(ORDER_ROUTE_KEY, META)
        clock.now += 100
        assert limiter.retry_after(ORDER_ROUTE_KEY, META) == 200

    def test_retry_after_is_zero_when_not_blocked(self):
        limiter = _limiter(FakeClock())
        limiter.check(ORDER_ROUTE_KEY, META)
        assert limiter.retry_after(ORDER_ROUTE_KEY, META) == 0

    def test_keys_are_per_subject_and_ip(self):
        limiter = _limiter(FakeClock(), max_attempts=1)
        limiter.check(ORDER_ROUTE_KEY, META)
        assert limiter.check(ORDER_ROUTE_KEY, RequestMeta(ip="10.0.0.1", subject="other@x.com")) is False
        assert limiter.check(ORDER_ROUTE_KEY, RequestMeta(ip="10.0.0.2", subject="jane@x.com")) is False
        assert limiter.check(ORDER_ROUTE_KEY, META) is True

    def test_subject_is_case_insensitive(self):
        limiter = _limiter(FakeClock(), max_attempts=1)
        limiter.check(ORDER_ROUTE_KEY, META)
        assert limiter.check(ORDER_ROUTE_KEY, RequestMeta(ip="10.0.0.1", subject="JANE@x.com ")) is True

    def test_key_does_not_contain_raw_email(self):
        limiter = _limiter(FakeClock())
        assert "jane@x.com" not in limiter.key_for(ORDER_ROUTE_KEY, META)

    def test_successful_attempts_are_not_counted(self):
        limiter = _limiter(FakeClock(), max_attempts=2)
        for _ in range(5):
            assert limiter.check(ORDER_ROUTE_KEY, META) is False
            limiter.record_success(ORDER_ROUTE_KEY, META)

    def test_successes_count_when_not_skipped(self):
        limiter = _limiter(FakeClock(), max_attempts=2, skip_successful=False)
        for _ in range(2):
            limiter.check(ORDER_ROUTE_KEY, META)
            limiter.record_success(ORDER_ROUTE_KEY, META)
        assert limiter.check(ORDER_ROUTE_KEY, META) is True

    def test_key_count_is_bounded(self):
        limiter = _limiter(FakeClock(), max_keys=2)
        for ip in ("1.1.1.1", "2.2.2.2", "3.3.3.3"):
            limiter.check(ORDER_ROUTE_KEY, RequestMeta(ip=ip))
        assert len(limiter._hits) == 2


class TestRateLimiterFactory:
    def test_default_uses_settings(self, monkeypatch):
        monkeypatch.setenv("ORDER_RATE_LIMIT_MAX", "7")
        reset_rate_limiter()
        limiter = get_rate_limiter()
        assert isinstance(limiter, SlidingWindowRateLimiter)
        assert limiter.max_attempts == 7

    def test_default_is_shared(self):
        reset_rate_limiter()
        assert get_rate_limiter() is get_rate_limiter()

    def test_set_overrides(self):
        custom = SlidingWindowRateLimiter(max_attempts=1)
        set_rate_limiter(custom)
        assert get_rate_limiter() is custom
        reset_rate_limiter()
        assert get_rate_limiter() is not custom
