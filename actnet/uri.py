"""URIs as connection addresses, with default ports for well-known schemes."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from .connect import Address

_SCHEME_PORTS = {
    # HTTP
    "http": 80,
    "https": 443,
    # WebSockets
    "ws": 80,
    "wss": 443,
    # AMQP
    "amqp": 5672,
    "amqps": 5671,
    # MQTT
    "mqtt": 1883,
    "mqtts": 8883,
    # FTP
    "ftp": 1883,
    "ftps": 990,
}


def scheme_to_port(scheme: str | None) -> int | None:
    """Return the default port of a well-known URI scheme, or None."""
    if scheme is None:
        return None
    return _SCHEME_PORTS.get(scheme)


@dataclass(frozen=True)
class UriAddress(Address):
    """An address given as a URI; its port falls back to the scheme's default."""

    uri: str

    def __post_init__(self) -> None:
        # accessing the port validates it
        urlsplit(self.uri).port

    def hostname(self) -> str:
        return urlsplit(self.uri).hostname or ""

    def port(self) -> int | None:
        parts = urlsplit(self.uri)
        if parts.port is not None:
            return parts.port
        return scheme_to_port(parts.scheme or None)