from critico.sessions.debounce import Debouncer


def test_burst_collapses_into_one_call(timers):
    calls = []
    debouncer = Debouncer(0.5, lambda: calls.append(1), timer_factory=timers)

    for _ in range(5):
        debouncer.trigger()

    assert len(timers.timers) == 5
    assert len(timers.live) == 1
    assert timers.live[0].delay == 0.5
    assert timers.live[0].daemon is True
    assert debouncer.pending

    timers.fire_all()
    assert calls == [1]
    assert not debouncer.pending


def test_cancel_drops_the_pending_call(timers):
    calls = []
    debouncer = Debouncer(0.5, lambda: calls.append(1), timer_factory=timers)

    debouncer.trigger()
    debouncer.cancel()
    timers.fire_all()

    assert calls == []
    assert not debouncer.pending


def test_stale_timer_that_fires_anyway_is_ignored(timers):
    calls = []
    debouncer = Debouncer(0.5, lambda: calls.append(1), timer_factory=timers)

    debouncer.trigger()
    stale = timers.timers[0]
    debouncer.trigger()

    # a timer already past its wait cannot be cancelled
    stale.fn()
    assert calls == []

    timers.timers[1].fire()
    assert calls == [1]
