from campus_connect.utils.rate_limit import FixedWindowRateLimiter


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_limit_applies_per_key_within_window():
    clock = _Clock()
    limiter = FixedWindowRateLimiter(2, 60, clock=clock)

    assert limiter.hit("a") == (True, 0)
    assert limiter.hit("a") == (True, 0)
    allowed, retry_after = limiter.hit("a")
    assert allowed is False
    assert retry_after == 60
    # Other clients are unaffected
    assert limiter.hit("b") == (True, 0)


def test_window_resets_after_expiry():
    clock = _Clock()
    limiter = FixedWindowRateLimiter(1, 10, clock=clock)
    assert limiter.hit("a")[0] is True
    assert limiter.hit("a")[0] is False

    clock.now += 4
    assert limiter.hit("a") == (False, 6)

    clock.now += 6
    assert limiter.hit("a") == (True, 0)


def test_reset_clears_state():
    limiter = FixedWindowRateLimiter(1, 60, clock=_Clock())
    limiter.hit("a")
    limiter.reset()
    assert limiter.hit("a") == (True, 0)
