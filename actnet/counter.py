"""A shared counter that wakes a waiting task when it drops below capacity."""

from __future__ import annotations

from .local_waker import LocalWaker, Waker


class _CounterState:
    __slots__ = ("count", "capacity", "task")

    def __init__(self, capacity: int) -> None:
        self.count = 0
        self.capacity = capacity
        self.task = LocalWaker()

    def inc(self) -> None:
        self.count += 1

    def dec(self) -> None:
        num = self.count
        self.count = num - 1
        if num == self.capacity:
            self.task.wake()

    def available(self, waker: Waker) -> bool:
        if self.count < self.capacity:
            return True
        self.task.register(waker)
        return False


class Counter:
    """Counts outstanding guards against a capacity.

    Every reference to the same ``Counter`` shares one count. When the count
    is at capacity, :meth:`available` registers a waker that is called as
    soon as a guard is released.
    """

    __slots__ = ("_state",)

    def __init__(self, capacity: int) -> None:
        self._state = _CounterState(capacity)

    def get(self) -> CounterGuard:
        """Return a new guard, incrementing the counter."""
        return CounterGuard(self._state)

    def available(self, waker: Waker) -> bool:
        """Return True if below capacity; otherwise register ``waker`` and return False."""
        return self._state.available(waker)

    def total(self) -> int:
        """Number of guards currently held."""
        return self._state.count

    @property
    def capacity(self) -> int:
        return self._state.capacity

    def __repr__(self) -> str:
        return f"Counter(count={self._state.count}, capacity={self._state.capacity})"


class CounterGuard:
    """Keeps its counter incremented until released, exited or collected."""

    __slots__ = ("_state",)

    def __init__(self, state: _CounterState) -> None:
        state.inc()
        self._state: _CounterState | None = state

    def release(self) -> None:
        """Decrement the counter. Further calls do nothing."""
        state, self._state = self._state, None
        if state is not None:
            state.dec()

    @property
    def released(self) -> bool:
        return self._state is None

    def __enter__(self) -> CounterGuard:
        return self

    def __exit__(self, *args: object) -> None:
        self.release()

    def __del__(self) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"CounterGuard(released={self.released})"