"""A single-slot holder for the callback that wakes a waiting task."""

from __future__ import annotations

from collections.abc import Callable

Waker = Callable[[], object]


class LocalWaker:
    """Holds the most recently registered waker and calls it on demand.

    Consumers call :meth:`register` before checking whether a result is
    available; producers call :meth:`wake` after producing it. Calling
    :meth:`wake` before anything is registered does nothing. One instance
    may be reused for any number of register/wake calls.
    """

    __slots__ = ("_waker",)

    def __init__(self) -> None:
        self._waker: Waker | None = None

    def register(self, waker: Waker) -> bool:
        """Store ``waker`` to be called on the next wake.

        Returns True if a waker was already registered (and is now replaced).
        """
        previous, self._waker = self._waker, waker
        return previous is not None

    def wake(self) -> None:
        """Call and forget the last registered waker, if there is one."""
        waker = self.take()
        if waker is not None:
            waker()

    def take(self) -> Waker | None:
        """Remove and return the registered waker, or None if there is none."""
        waker, self._waker = self._waker, None
        return waker

    def __repr__(self) -> str:
        return "LocalWaker"