"""Server-side TLS acceptor services with a per-thread concurrent handshake limit."""

from __future__ import annotations

import enum
import ssl
import threading
from collections.abc import Awaitable
from typing import Any

from .connector import TcpStream
from .connect import SocketAddr
from .counter import Counter, CounterGuard
from .local_waker import Waker

_DEFAULT_MAX_CONN = 256
_max_conn = _DEFAULT_MAX_CONN
_local = threading.local()


def _max_conn_counter() -> Counter:
    """Return this thread's handshake counter, creating it on first use."""
    counter = getattr(_local, "counter", None)
    if counter is None:
        counter = Counter(_max_conn)
        _local.counter = counter
    return counter


def max_concurrent_tls_connect(num: int) -> None:
    """Set the maximum per-worker number of concurrent TLS handshakes.

    Every acceptor on a thread stops accepting when the limit is reached.
    The limit is read when a thread first creates an acceptor service, so
    it applies to threads that have not done so yet. The default is 256.
    """
    global _max_conn
    if isinstance(num, bool) or not isinstance(num, int):
        raise TypeError(f"limit must be an int, not {type(num).__name__}")
    if num < 0:
        raise ValueError(f"limit must not be negative: {num}")
    _max_conn = num


class TlsErrorKind(enum.Enum):
    TLS = "tls"
    SERVICE = "service"


class TlsError(Exception):
    """A TLS error or an error from the service behind the TLS layer."""

    def __init__(self, kind: TlsErrorKind, error: BaseException) -> None:
        super().__init__(kind, error)
        self.kind = kind
        self.error = error

    @classmethod
    def tls(cls, error: BaseException) -> TlsError:
        return cls(TlsErrorKind.TLS, error)

    @classmethod
    def service(cls, error: BaseException) -> TlsError:
        return cls(TlsErrorKind.SERVICE, error)

    @property
    def is_tls(self) -> bool:
        return self.kind is TlsErrorKind.TLS

    @property
    def is_service(self) -> bool:
        return self.kind is TlsErrorKind.SERVICE

    def __str__(self) -> str:
        return f"{self.kind.value} error: {self.error}"

    def __repr__(self) -> str:
        label = "Tls" if self.is_tls else "Service"
        return f"TlsError.{label}({self.error!r})"


class TlsStream:
    """A TCP stream on which a server-side TLS handshake has completed."""

    __slots__ = ("_inner",)

    def __init__(self, inner: TcpStream) -> None:
        self._inner = inner

    @property
    def inner(self) -> TcpStream:
        """The underlying TCP stream."""
        return self._inner

    @property
    def reader(self) -> Any:
        return self._inner.reader

    @property
    def writer(self) -> Any:
        return self._inner.writer

    @property
    def ssl_object(self) -> ssl.SSLObject | None:
        return self._inner.writer.get_extra_info("ssl_object")

    def version(self) -> str | None:
        """The negotiated protocol version, such as ``"TLSv1.3"``."""
        obj = self.ssl_object
        return None if obj is None else obj.version()

    def selected_alpn_protocol(self) -> str | None:
        obj = self.ssl_object
        return None if obj is None else obj.selected_alpn_protocol()

    def peer_addr(self) -> SocketAddr:
        """The ``(ip, port)`` of the remote end."""
        return self._inner.peer_addr()

    def local_addr(self) -> SocketAddr:
        """The ``(ip, port)`` of the local end."""
        return self._inner.local_addr()

    def close(self) -> None:
        """Close the stream."""
        self._inner.close()

    def __repr__(self) -> str:
        return f"TlsStream(version={self.version()!r}, inner={self._inner!r})"


class Acceptor:
    """A factory of services that accept TLS on server-side TCP streams."""

    __slots__ = ("_context",)

    def __init__(self, context: ssl.SSLContext) -> None:
        if not isinstance(context, ssl.SSLContext):
            raise TypeError(
                f"Acceptor needs an ssl.SSLContext, not {type(context).__name__}"
            )
        self._context = context

    @property
    def context(self) -> ssl.SSLContext:
        return self._context

    async def new_service(self, config: Any = None) -> AcceptorService:
        """Create a service bound to the current thread's handshake counter."""
        return AcceptorService(self._context, _max_conn_counter())

    def __repr__(self) -> str:
        return "Acceptor"


class AcceptorService:
    """Performs TLS handshakes, holding a counter slot for each one in progress."""

    __slots__ = ("_context", "_conns")

    def __init__(self, context: ssl.SSLContext, conns: Counter) -> None:
        self._context = context
        self._conns = conns

    @property
    def counter(self) -> Counter:
        """The counter limiting concurrent handshakes."""
        return self._conns

    def available(self, waker: Waker) -> bool:
        """True if another handshake may start; otherwise ``waker`` is called later."""
        return self._conns.available(waker)

    def call(self, stream: TcpStream) -> Awaitable[TlsStream]:
        """Start a server-side handshake on ``stream``.

        The counter slot is taken at once and released when the handshake
        finishes or fails. The stream must come from a server connection.
        Handshake failures raise ``ssl.SSLError`` or another ``OSError``.
        """
        if not isinstance(stream, TcpStream):
            raise TypeError(f"expected a TcpStream, not {type(stream).__name__}")
        guard = self._conns.get()
        return self._accept(stream, guard)

    async def _accept(self, stream: TcpStream, guard: CounterGuard) -> TlsStream:
        with guard:
            await stream.writer.start_tls(self._context)
        return TlsStream(stream)

    def __repr__(self) -> str:
        return f"AcceptorService({self._conns!r})"