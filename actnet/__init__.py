"""Asyncio building blocks for connectors, resolvers, TLS acceptors and local channels."""

__version__ = "0.1.0"

__all__ = [
    "accept",
    "bytestring",
    "channel",
    "connect",
    "connector",
    "counter",
    "errors",
    "future",
    "local_waker",
    "resolve",
    "tls_connect",
    "uri",
]