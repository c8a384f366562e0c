"""A single-threaded multi-producer, single-consumer FIFO channel for asyncio."""

from __future__ import annotations

from collections import deque
from typing import Any, Generic, TypeVar

from .future import PENDING, poll_fn
from .local_waker import LocalWaker, Waker

T = TypeVar("T")

_END = object()


class SendError(Exception, Generic[T]):
    """Raised when sending after the receiver is gone or the channel was closed.

    The message that could not be sent is kept in :attr:`item`.
    """

    def __init__(self, item: T) -> None:
        super().__init__("send failed because receiver is gone")
        self.item = item

    def into_inner(self) -> T:
        """Return the message that failed to send."""
        return self.item

    def __str__(self) -> str:
        return "send failed because receiver is gone"

    def __repr__(self) -> str:
        return 'SendError("...")'


class _Shared(Generic[T]):
    __slots__ = ("buffer", "blocked_recv", "has_receiver", "senders")

    def __init__(self) -> None:
        self.buffer: deque[T] = deque()
        self.blocked_recv = LocalWaker()
        self.has_receiver = True
        self.senders = 0


def channel() -> tuple[Sender[Any], Receiver[Any]]:
    """Create an unbounded channel and return its sender and receiver."""
    shared: _Shared[Any] = _Shared()
    return Sender(shared), Receiver(shared)


class Sender(Generic[T]):
    """The sending end of a channel. Clone it to get more senders.

    A sender stays live until :meth:`drop` is called, its ``with`` block
    ends, or it is garbage collected. When the last sender goes away the
    receiver's stream ends once the buffer is drained.
    """

    __slots__ = ("_shared", "__weakref__")

    def __init__(self, shared: _Shared[T]) -> None:
        shared.senders += 1
        self._shared: _Shared[T] | None = shared

    def _state(self) -> _Shared[T]:
        if self._shared is None:
            raise RuntimeError("sender has been dropped")
        return self._shared

    def send(self, item: T) -> None:
        """Queue ``item``; raises SendError if the receiver is gone or closed."""
        shared = self._state()
        if not shared.has_receiver:
            raise SendError(item)
        shared.buffer.append(item)
        shared.blocked_recv.wake()

    def close(self) -> None:
        """Stop every sender from sending; buffered messages can still be received."""
        self._state().has_receiver = False

    def clone(self) -> Sender[T]:
        """Return another sender on the same channel."""
        return Sender(self._state())

    def drop(self) -> None:
        """Release this sender. Further calls do nothing."""
        shared, self._shared = self._shared, None
        if shared is None:
            return
        shared.senders -= 1
        if shared.has_receiver and shared.senders == 0:
            # the stream has ended: let a waiting receiver see that
            shared.blocked_recv.wake()

    @property
    def dropped(self) -> bool:
        return self._shared is None

    def __enter__(self) -> Sender[T]:
        return self

    def __exit__(self, *args: object) -> None:
        self.drop()

    def __del__(self) -> None:
        try:
            self.drop()
        except AttributeError:
            pass

    def __repr__(self) -> str:
        return f"Sender(dropped={self.dropped})"


class Receiver(Generic[T]):
    """The receiving end of a channel; an async iterator over its messages."""

    __slots__ = ("_shared", "_dropped", "__weakref__")

    def __init__(self, shared: _Shared[T]) -> None:
        self._shared = shared
        self._dropped = False

    def _poll(self, waker: Waker) -> Any:
        if self._dropped:
            raise RuntimeError("receiver has been dropped")
        shared = self._shared
        if shared.senders == 0:
            # all senders are gone: drain the buffer, then end the stream
            return shared.buffer.popleft() if shared.buffer else _END
        if shared.buffer:
            return shared.buffer.popleft()
        shared.blocked_recv.register(waker)
        return PENDING

    def poll_next(self, waker: Waker) -> Any:
        """Return the next message, None at the end of the stream, or PENDING.

        When PENDING is returned, ``waker`` is called once a message arrives
        or the last sender goes away.
        """
        result = self._poll(waker)
        return None if result is _END else result

    async def recv(self) -> T | None:
        """Wait for the next message; None once the channel has ended."""
        return await poll_fn(self.poll_next)

    def sender(self) -> Sender[T]:
        """Create a new sender for this channel."""
        return Sender(self._shared)

    def drop(self) -> None:
        """Discard buffered messages and refuse any further sends."""
        if self._dropped:
            return
        self._dropped = True
        self._shared.buffer.clear()
        self._shared.has_receiver = False

    def __aiter__(self) -> Receiver[T]:
        return self

    async def __anext__(self) -> T:
        result = await poll_fn(self._poll)
        if result is _END:
            raise StopAsyncIteration
        return result

    def __del__(self) -> None:
        try:
            self.drop()
        except AttributeError:
            pass

    def __repr__(self) -> str:
        return f"Receiver(dropped={self._dropped})"