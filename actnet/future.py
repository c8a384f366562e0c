"""Small awaitable building blocks: ready values, either-of-two and poll functions."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class _PendingType:
    __slots__ = ()

    def __repr__(self) -> str:
        return "PENDING"

    def __bool__(self) -> bool:
        return False


PENDING = _PendingType()
"""Returned by a poll function to signal that no value is available yet."""


_EMPTY = object()


class Ready(Generic[T]):
    """An awaitable that completes immediately with a value or an error.

    It may be awaited (or unwrapped) only once.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: T) -> None:
        self._value: Any = value
        self._error: BaseException | None = None

    @classmethod
    def _failed(cls, error: BaseException) -> Ready[Any]:
        instance = cls(None)
        instance._error = error
        return instance

    def _take(self, message: str) -> T:
        if self._value is _EMPTY:
            raise RuntimeError(message)
        value, error = self._value, self._error
        self._value, self._error = _EMPTY, None
        if error is not None:
            raise error
        return value

    def into_inner(self) -> T:
        """Return the value without awaiting; raises the stored error if any."""
        return self._take("Ready value already taken")

    def __await__(self) -> Generator[Any, None, T]:
        value = self._take("Ready polled after completion")
        if False:  # pragma: no cover - makes this method a generator
            yield
        return value

    def __repr__(self) -> str:
        if self._value is _EMPTY:
            return "Ready(<taken>)"
        if self._error is not None:
            return f"Ready(error={self._error!r})"
        return f"Ready({self._value!r})"


def ready(val: T) -> Ready[T]:
    """Create an awaitable that is immediately ready with ``val``."""
    return Ready(val)


def ok(val: T) -> Ready[T]:
    """Create an awaitable that immediately succeeds with ``val``."""
    return Ready(val)


def err(error: BaseException) -> Ready[Any]:
    """Create an awaitable that immediately raises ``error``."""
    if not isinstance(error, BaseException):
        raise TypeError("err() requires an exception instance")
    return Ready._failed(error)


@dataclass(frozen=True)
class Either(Generic[T]):
    """Holds one of two awaitables producing the same kind of result."""

    value: Any
    is_left: bool = True

    @classmethod
    def left(cls, value: Any) -> Either[Any]:
        return cls(value, True)

    @classmethod
    def right(cls, value: Any) -> Either[Any]:
        return cls(value, False)

    @property
    def is_right(self) -> bool:
        return not self.is_left

    def into_inner(self) -> Any:
        """Return the wrapped value, whichever side it is on."""
        return self.value

    def __await__(self) -> Generator[Any, None, Any]:
        awaitable: Awaitable[Any] = self.value
        return (yield from awaitable.__await__())


def _make_waker(fut: asyncio.Future[None]) -> Callable[[], None]:
    def wake() -> None:
        if not fut.done():
            fut.set_result(None)

    return wake


class PollFn(Generic[T]):
    """An awaitable driven by a function that receives a waker.

    The function returns a value to finish, or :data:`PENDING` to wait until
    the waker it was given is called.
    """

    __slots__ = ("_f",)

    def __init__(self, f: Callable[[Callable[[], None]], Any]) -> None:
        self._f = f

    def __await__(self) -> Generator[Any, None, T]:
        loop = asyncio.get_running_loop()
        while True:
            fut: asyncio.Future[None] = loop.create_future()
            result = self._f(_make_waker(fut))
            if result is not PENDING:
                return result
            if fut.done():
                # Woken already: give the loop a turn before polling again.
                yield
            else:
                yield from fut.__await__()

    def __repr__(self) -> str:
        return "PollFn"


def poll_fn(f: Callable[[Callable[[], None]], Any]) -> PollFn[Any]:
    """Create an awaitable driven by ``f``."""
    return PollFn(f)