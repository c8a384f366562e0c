"""Errors raised while resolving and connecting."""

from __future__ import annotations


class ConnectError(Exception):
    """Base class of every connection error."""


class ResolverError(ConnectError):
    """The hostname could not be resolved."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(error)
        self.error = error

    def __str__(self) -> str:
        return f"Failed resolving hostname: {self.error}"


class NoRecordsError(ConnectError):
    """Resolution produced no addresses."""

    def __str__(self) -> str:
        return "No dns records found for the input"


class InvalidInputError(ConnectError):
    """The connect request was invalid."""

    def __str__(self) -> str:
        return "InvalidInput"


class UnresolvedError(ConnectError):
    """A connect request reached the connector without any address."""

    def __str__(self) -> str:
        return "Connector received `Connect` method with unresolved host"


class ConnectIoError(ConnectError):
    """An I/O error while establishing the connection."""

    def __init__(self, error: OSError) -> None:
        super().__init__(error)
        self.error = error

    def __str__(self) -> str:
        return str(self.error)