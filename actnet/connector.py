"""TCP connector services: resolve a connect request, then open a stream to it."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .connect import Connect, Connection, IpAddress, SocketAddr
from .errors import ConnectIoError, UnresolvedError
from .resolve import Resolver, ResolverFactory

log = logging.getLogger(__name__)


class TcpStream:
    """An open TCP stream made of an asyncio reader and writer pair."""

    __slots__ = ("_reader", "_writer")

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer

    @property
    def reader(self) -> asyncio.StreamReader:
        return self._reader

    @property
    def writer(self) -> asyncio.StreamWriter:
        return self._writer

    def peer_addr(self) -> SocketAddr:
        """The ``(ip, port)`` of the remote end."""
        info = self._writer.get_extra_info("peername")
        return info[0], info[1]

    def local_addr(self) -> SocketAddr:
        """The ``(ip, port)`` of the local end."""
        info = self._writer.get_extra_info("sockname")
        return info[0], info[1]

    def close(self) -> None:
        """Close the stream."""
        self._writer.close()

    def __repr__(self) -> str:
        return f"TcpStream(peer={self._writer.get_extra_info('peername')!r})"


async def _open(addr: SocketAddr, local_addr: IpAddress | None) -> TcpStream:
    host, port = addr
    if local_addr is None:
        reader, writer = await asyncio.open_connection(host, port)
    else:
        reader, writer = await asyncio.open_connection(
            host, port, local_addr=(str(local_addr), 0)
        )
    return TcpStream(reader, writer)


class TcpConnector:
    """Connects to the addresses of a resolved request, in order."""

    __slots__ = ()

    def available(self, waker: Any = None) -> bool:
        """Always ready."""
        return True

    async def call(self, req: Connect) -> Connection:
        """Open a stream to the first address of ``req`` that accepts.

        Raises UnresolvedError if ``req`` has no addresses and ConnectIoError
        with the last failure if none of them can be reached.
        """
        if not req.has_addr():
            log.error("TCP connector: unresolved connection address")
            raise UnresolvedError()

        port = req.port()
        local_addr = req.local_addr
        hostname = req.hostname()
        log.debug("TCP connector: connecting to %s on port %s", hostname, port)

        last_error: OSError | None = None
        for addr in req.take_addrs():
            try:
                stream = await _open(addr, local_addr)
            except OSError as exc:
                log.debug("TCP connector: failed to connect to %r port: %s", hostname, port)
                last_error = exc
                continue
            log.debug(
                "TCP connector: successfully connected to %r - %r",
                hostname,
                stream.peer_addr(),
            )
            return Connection(stream, req.req)

        assert last_error is not None
        raise ConnectIoError(last_error) from last_error

    def __repr__(self) -> str:
        return "TcpConnector"


class TcpConnectorFactory:
    """Produces :class:`TcpConnector` services."""

    __slots__ = ()

    def service(self) -> TcpConnector:
        return TcpConnector()

    async def new_service(self, config: Any = None) -> TcpConnector:
        return self.service()

    def __repr__(self) -> str:
        return "TcpConnectorFactory"


class ConnectService:
    """Resolves a request, then connects to it over TCP."""

    __slots__ = ("_tcp", "_resolver")

    def __init__(self, tcp: TcpConnector, resolver: Resolver) -> None:
        self._tcp = tcp
        self._resolver = resolver

    def available(self, waker: Any = None) -> bool:
        """Always ready."""
        return True

    async def call(self, req: Connect) -> Connection:
        resolved = await self._resolver.call(req)
        return await self._tcp.call(resolved)

    def __repr__(self) -> str:
        return f"ConnectService(resolver={self._resolver!r})"


class ConnectServiceFactory:
    """Produces :class:`ConnectService` instances sharing one resolver."""

    __slots__ = ("_tcp", "_resolver")

    def __init__(self, resolver: Resolver) -> None:
        self._tcp = TcpConnectorFactory()
        self._resolver = ResolverFactory(resolver)

    def service(self) -> ConnectService:
        return ConnectService(self._tcp.service(), self._resolver.service())

    async def new_service(self, config: Any = None) -> ConnectService:
        return self.service()

    def __repr__(self) -> str:
        return f"ConnectServiceFactory(resolver={self._resolver.service()!r})"


def new_connector(resolver: Resolver) -> ConnectService:
    """Create a TCP connector service using ``resolver``."""
    return ConnectServiceFactory(resolver).service()


def new_connector_factory(resolver: Resolver) -> ConnectServiceFactory:
    """Create a TCP connector service factory using ``resolver``."""
    return ConnectServiceFactory(resolver)


def default_connector() -> ConnectService:
    """Create a connector service that uses the system resolver."""
    return new_connector(Resolver())


def default_connector_factory() -> ConnectServiceFactory:
    """Create a connector service factory that uses the system resolver."""
    return new_connector_factory(Resolver())