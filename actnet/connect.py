"""Connection requests, their resolved addresses, and established connections."""

from __future__ import annotations

import ipaddress
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Any

IpAddress = ipaddress.IPv4Address | ipaddress.IPv6Address
SocketAddr = tuple[str, int]

_MAX_PORT = 0xFFFF


class Address(ABC):
    """Something that can name a host and, optionally, a port."""

    @abstractmethod
    def hostname(self) -> str:
        """Return the hostname part."""

    def port(self) -> int | None:
        """Return the port part, or None when the address carries none."""
        return None


def _parse_port(text: str) -> int | None:
    """Parse ``text`` as a 16-bit port number, or return None."""
    body = text[1:] if text.startswith("+") else text
    if not body or not body.isascii() or not body.isdigit():
        return None
    value = int(body)
    return value if value <= _MAX_PORT else None


def parse_host(host: str) -> tuple[str, int | None]:
    """Split ``host`` at its first ':' into a hostname and an optional port."""
    hostname, sep, rest = host.partition(":")
    return hostname, (_parse_port(rest) if sep else None)


def _request_hostname(req: Any) -> str:
    if isinstance(req, str):
        return req
    if isinstance(req, Address):
        return req.hostname()
    raise TypeError(f"expected a str or an Address, not {type(req).__name__}")


def _request_port(req: Any) -> int | None:
    return req.port() if isinstance(req, Address) else None


def _socket_addr(addr: Any) -> SocketAddr:
    """Normalise an ``(ip, port)`` pair, validating both parts."""
    try:
        host, port = addr[0], addr[1]
    except (TypeError, IndexError, KeyError) as exc:
        raise TypeError(f"expected an (ip, port) pair, not {addr!r}") from exc
    ip = ipaddress.ip_address(host)
    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= _MAX_PORT:
        raise ValueError(f"invalid port: {port!r}")
    return str(ip), port


def _ip(addr: Any) -> IpAddress:
    if isinstance(addr, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return addr
    if isinstance(addr, (list, tuple, bytes, bytearray)):
        return ipaddress.ip_address(bytes(addr))
    return ipaddress.ip_address(addr)


class Connect:
    """A request to connect to a host, with any addresses resolved for it.

    The request itself is a ``str`` or an :class:`Address`. A port written
    after the first ':' of a string hostname becomes the default port.
    """

    __slots__ = ("req", "_port", "_addrs", "local_addr")

    def __init__(self, req: Any) -> None:
        _, port = parse_host(_request_hostname(req))
        self.req = req
        self._port = port if port is not None else 0
        self._addrs: tuple[SocketAddr, ...] = ()
        self.local_addr: IpAddress | None = None

    @classmethod
    def with_addr(cls, req: Any, addr: Any) -> Connect:
        """Create a request that already carries its address, skipping resolution."""
        _request_hostname(req)
        instance = cls.__new__(cls)
        instance.req = req
        instance._port = 0
        instance._addrs = (_socket_addr(addr),)
        instance.local_addr = None
        return instance

    def set_port(self, port: int) -> Connect:
        """Use ``port`` when the address does not provide one."""
        if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= _MAX_PORT:
            raise ValueError(f"invalid port: {port!r}")
        self._port = port
        return self

    def set_addr(self, addr: Any) -> Connect:
        """Set a single address, or clear the addresses with None."""
        self._addrs = () if addr is None else (_socket_addr(addr),)
        return self

    def set_addrs(self, addrs: Iterable[Any]) -> Connect:
        """Set the list of addresses to try, in order."""
        self._addrs = tuple(_socket_addr(addr) for addr in addrs)
        return self

    def set_local_addr(self, addr: Any) -> Connect:
        """Set the local IP address to bind before connecting."""
        self.local_addr = _ip(addr)
        return self

    def hostname(self) -> str:
        return _request_hostname(self.req)

    def port(self) -> int:
        """The request's own port if it has one, else the configured port."""
        port = _request_port(self.req)
        return self._port if port is None else port

    def addrs(self) -> Iterator[SocketAddr]:
        """Iterate over the resolved addresses."""
        return iter(self._addrs)

    def take_addrs(self) -> Iterator[SocketAddr]:
        """Remove the resolved addresses and iterate over them."""
        addrs, self._addrs = self._addrs, ()
        return iter(addrs)

    def has_addr(self) -> bool:
        """True once at least one address is known."""
        return bool(self._addrs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Connect):
            return NotImplemented
        return (self.req, self._port, self._addrs, self.local_addr) == (
            other.req,
            other._port,
            other._addrs,
            other.local_addr,
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"{self.hostname()}:{self.port()}"

    def __repr__(self) -> str:
        return (
            f"Connect(req={self.req!r}, port={self._port}, "
            f"addrs={list(self._addrs)!r}, local_addr={self.local_addr!r})"
        )


class Connection:
    """An established stream together with the request that produced it.

    Attributes not found on the connection are looked up on the stream.
    """

    __slots__ = ("_io", "_req")

    def __init__(self, io: Any, req: Any) -> None:
        self._io = io
        self._req = req

    @classmethod
    def from_parts(cls, io: Any, req: Any) -> Connection:
        return cls(io, req)

    def into_parts(self) -> tuple[Any, Any]:
        """Return the stream and the request."""
        return self._io, self._req

    def replace_io(self, io: Any) -> tuple[Any, Connection]:
        """Return the current stream and a new connection holding ``io``."""
        return self._io, Connection(io, self._req)

    @property
    def io(self) -> Any:
        return self._io

    @property
    def req(self) -> Any:
        return self._req

    def host(self) -> str:
        return _request_hostname(self._req)

    def __getattr__(self, name: str) -> Any:
        if name in ("_io", "_req"):
            raise AttributeError(name)
        return getattr(self._io, name)

    def __repr__(self) -> str:
        return f"Stream {{{self._io!r}}}"