"""Client-side TLS: upgrade an established TCP connection with a handshake."""

from __future__ import annotations

import logging
import ssl
from collections.abc import Awaitable
from typing import Any

from .accept import TlsStream
from .connect import Connection
from .connector import TcpStream

log = logging.getLogger(__name__)


def _check_context(context: Any) -> ssl.SSLContext:
    if not isinstance(context, ssl.SSLContext):
        raise TypeError(f"expected an ssl.SSLContext, not {type(context).__name__}")
    return context


class TlsConnector:
    """A factory of services that perform client TLS handshakes.

    Every service it produces shares the same ``ssl.SSLContext``.
    """

    __slots__ = ("_context",)

    def __init__(self, context: ssl.SSLContext) -> None:
        self._context = _check_context(context)

    @property
    def context(self) -> ssl.SSLContext:
        return self._context

    def service(self) -> TlsConnectorService:
        """Create a connector service using this factory's context."""
        return TlsConnectorService(self._context)

    async def new_service(self, config: Any = None) -> TlsConnectorService:
        return self.service()

    def __repr__(self) -> str:
        return "TlsConnector"


class TlsConnectorService:
    """Performs the client side of a TLS handshake on a TCP connection."""

    __slots__ = ("_context",)

    def __init__(self, context: ssl.SSLContext) -> None:
        self._context = _check_context(context)

    @property
    def context(self) -> ssl.SSLContext:
        return self._context

    def available(self, waker: Any = None) -> bool:
        """Always ready."""
        return True

    def call(self, connection: Connection) -> Awaitable[Connection]:
        """Start a handshake on ``connection``'s stream, verifying its host.

        The awaitable returns a new connection holding a :class:`TlsStream`.
        A failed handshake closes the stream and raises ``OSError`` whose
        cause is the original error.
        """
        if not isinstance(connection, Connection):
            raise TypeError(f"expected a Connection, not {type(connection).__name__}")
        stream, bare = connection.replace_io(None)
        if not isinstance(stream, TcpStream):
            raise TypeError(f"expected a TcpStream inside the connection, not {type(stream).__name__}")
        return self._handshake(stream, bare)

    async def _handshake(self, stream: TcpStream, bare: Connection) -> Connection:
        host = bare.host()
        log.debug("SSL Handshake start for: %r", host)
        try:
            await stream.writer.start_tls(self._context, server_hostname=host or None)
        except (OSError, ValueError) as exc:
            log.debug("SSL Handshake error: %r", exc)
            stream.close()
            raise OSError(str(exc)) from exc
        log.debug("SSL Handshake success: %r", host)
        return bare.replace_io(TlsStream(stream))[1]

    def __repr__(self) -> str:
        return "TlsConnectorService"