"""An immutable UTF-8 string backed by bytes."""

from __future__ import annotations

from functools import total_ordering
from typing import Any


@total_ordering
class ByteString:
    """An immutable UTF-8 encoded string stored as bytes.

    It compares and hashes like the ``str`` it holds; ordering between two
    byte strings is by their bytes. ``len`` is the length in bytes.
    """

    __slots__ = ("_data",)

    def __init__(self, value: str = "") -> None:
        if not isinstance(value, str):
            raise TypeError(
                f"ByteString() takes a str, not {type(value).__name__}; use try_from for bytes"
            )
        self._data: bytes = value.encode("utf-8")

    @classmethod
    def from_static(cls, src: str) -> ByteString:
        """Create a ByteString from a str."""
        return cls(src)

    @classmethod
    def from_bytes_unchecked(cls, src: bytes) -> ByteString:
        """Wrap bytes without checking that they are valid UTF-8."""
        instance = cls.__new__(cls)
        instance._data = bytes(src)
        return instance

    @classmethod
    def try_from(cls, value: Any) -> ByteString:
        """Create a ByteString from bytes-like data or an iterable of byte values.

        Raises UnicodeDecodeError if the data is not valid UTF-8.
        """
        if isinstance(value, ByteString):
            return value
        if isinstance(value, (str, int)):
            raise TypeError(f"cannot build ByteString bytes from {type(value).__name__}")
        data = bytes(value)
        data.decode("utf-8")
        return cls.from_bytes_unchecked(data)

    def as_bytes(self) -> bytes:
        return self._data

    def into_bytes(self) -> bytes:
        return self._data

    def __str__(self) -> str:
        return self._data.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return repr(str(self))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ByteString):
            return self._data == other._data
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, ByteString):
            return self._data < other._data
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return self._data