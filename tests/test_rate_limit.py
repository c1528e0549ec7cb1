from giftdraw.services.rate_limit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_blocks_after_max_calls_and_recovers():
    clock = FakeClock()
    limiter = RateLimiter(max_calls=2, period_seconds=10, clock=clock)
    assert limiter.allow(1, "add").allowed
    assert limiter.allow(1, "add").allowed

    blocked = limiter.allow(1, "add")
    assert not blocked.allowed
    assert blocked.retry_after == 10

    clock.now += 11
    assert limiter.allow(1, "add").allowed


def test_keys_are_per_user_and_action():
    limiter = RateLimiter(max_calls=1, period_seconds=10, clock=FakeClock())
    assert limiter.allow(1, "add").allowed
    assert limiter.allow(2, "add").allowed
    assert limiter.allow(1, "draw").allowed
    assert not limiter.allow(1, "add").allowed


def test_override_applies_to_its_action():
    clock = FakeClock()
    limiter = RateLimiter(max_calls=5, period_seconds=10, overrides={"reveal": (1, 60)}, clock=clock)
    assert limiter.allow(1, "reveal").allowed
    clock.now += 30
    result = limiter.allow(1, "reveal")
    assert not result.allowed
    assert result.retry_after == 30


def test_reset_forgets_history():
    limiter = RateLimiter(max_calls=1, period_seconds=10, clock=FakeClock())
    assert limiter.allow(1, "add").allowed
    limiter.reset()
    assert limiter.allow(1, "add").allowed
