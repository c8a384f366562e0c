from actnet.local_waker import LocalWaker


def _recorder(log, name):
    return lambda: log.append(name)


def test_register_reports_previous_registration():
    waker = LocalWaker()
    assert waker.register(lambda: None) is False
    assert waker.register(lambda: None) is True


def test_wake_calls_last_registered_waker_only():
    log = []
    waker = LocalWaker()
    waker.register(_recorder(log, "first"))
    waker.register(_recorder(log, "second"))
    waker.wake()
    assert log == ["second"]


def test_wake_consumes_the_waker():
    log = []
    waker = LocalWaker()
    waker.register(_recorder(log, "a"))
    waker.wake()
    waker.wake()
    assert log == ["a"]
    assert waker.take() is None


def test_wake_before_register_is_noop():
    log = []
    waker = LocalWaker()
    waker.wake()
    waker.register(_recorder(log, "later"))
    assert log == []
    waker.wake()
    assert log == ["later"]


def test_take_returns_and_clears():
    waker = LocalWaker()
    assert waker.take() is None
    callback = lambda: None  # noqa: E731
    waker.register(callback)
    assert waker.take() is callback
    assert waker.take() is None
    assert waker.register(callback) is False


def test_repr():
    assert repr(LocalWaker()) == "LocalWaker"