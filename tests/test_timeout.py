from hoylink.timeout import TimeoutHelper


class FakeClock:
    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


def test_fresh_helper_occurs_after_time_zero():
    clock = FakeClock(0)
    helper = TimeoutHelper(clock)
    assert helper.occurred() is False
    clock.now = 1
    assert helper.occurred() is True


def test_set_occurs_only_strictly_after_timeout():
    clock = FakeClock(1000)
    helper = TimeoutHelper(clock)
    helper.set(500)
    clock.now = 1500
    assert helper.occurred() is False
    clock.now = 1501
    assert helper.occurred() is True


def test_extend_adds_to_timeout():
    clock = FakeClock(0)
    helper = TimeoutHelper(clock)
    helper.set(100)
    helper.extend(50)
    clock.now = 150
    assert helper.occurred() is False
    clock.now = 151
    assert helper.occurred() is True


def test_reset_restarts_from_now():
    clock = FakeClock(0)
    helper = TimeoutHelper(clock)
    helper.set(100)
    clock.now = 200
    assert helper.occurred() is True
    helper.reset()
    assert helper.occurred() is False
    clock.now = 301
    assert helper.occurred() is True


def test_default_clock_not_occurred_immediately_for_long_timeout():
    helper = TimeoutHelper()
    helper.set(60_000)
    assert helper.occurred() is False