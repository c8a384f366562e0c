"""Turning connect requests into socket addresses."""

from __future__ import annotations

import asyncio
import errno
import ipaddress
import logging
import socket
from abc import ABC, abstractmethod
from typing import Any

from .connect import Connect, SocketAddr, _parse_port
from .errors import NoRecordsError, ResolverError

log = logging.getLogger(__name__)


class Resolve(ABC):
    """An asynchronous DNS resolver."""

    @abstractmethod
    async def lookup(self, host: str, port: int) -> list[Any]:
        """Return the ``(ip, port)`` socket addresses for ``host`` and ``port``."""


def _parse_ip(text: str) -> str | None:
    try:
        return str(ipaddress.ip_address(text))
    except ValueError:
        return None


def _lookup_target(req: Connect) -> str:
    hostname, port = req.hostname(), req.port()
    last = hostname.split(":", 1)[-1]
    if _parse_port(last) == port:
        return hostname
    return f"{hostname}:{port}"


async def _system_lookup(target: str) -> list[SocketAddr]:
    host, sep, port_text = target.rpartition(":")
    if not sep:
        raise OSError(errno.EINVAL, "invalid socket address")
    port = _parse_port(port_text)
    if port is None:
        raise OSError(errno.EINVAL, "invalid port value")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    return [(info[4][0], info[4][1]) for info in infos]


class Resolver:
    """Resolves connect requests with the system resolver or a custom one."""

    __slots__ = ("_custom",)

    def __init__(self, custom: Resolve | None = None) -> None:
        self._custom = custom

    @classmethod
    def new_custom(cls, resolver: Resolve) -> Resolver:
        """Create a resolver that delegates lookups to ``resolver``."""
        return cls(resolver)

    @property
    def is_default(self) -> bool:
        return self._custom is None

    async def call(self, req: Connect) -> Connect:
        """Fill in ``req``'s addresses unless it already has some.

        Raises ResolverError if the lookup fails and NoRecordsError if it
        yields no addresses.
        """
        if req.has_addr():
            return req
        ip = _parse_ip(req.hostname())
        if ip is not None:
            return req.set_addr((ip, req.port()))

        log.debug("DNS resolver: resolving host %r", req.hostname())
        try:
            if self._custom is None:
                addrs = await _system_lookup(_lookup_target(req))
            else:
                addrs = await self._custom.lookup(req.hostname(), req.port())
        except Exception as exc:
            log.debug("DNS resolver: failed to resolve host %r err: %r", req.hostname(), exc)
            raise ResolverError(exc) from exc

        req.set_addrs(addrs)
        log.debug("DNS resolver: host %r resolved to %r", req.hostname(), list(req.addrs()))
        if not req.has_addr():
            raise NoRecordsError()
        return req

    def __repr__(self) -> str:
        return "Resolver(default)" if self._custom is None else f"Resolver({self._custom!r})"


class ResolverFactory:
    """Produces resolver services that share one resolver."""

    __slots__ = ("_resolver",)

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver

    def service(self) -> Resolver:
        return self._resolver

    async def new_service(self, config: Any = None) -> Resolver:
        return self._resolver