import ipaddress

import pytest

from actnet.connect import Address, Connect, Connection, parse_host

LOCALHOST = ("127.0.0.1", 8080)
UNSPECIFIED = ("0.0.0.0", 8080)


def test_host_parser():
    assert parse_host("example.com") == ("example.com", None)
    assert parse_host("example.com:8080") == ("example.com", 8080)
    assert parse_host("example:8080") == ("example", 8080)
    assert parse_host("example.com:false") == ("example.com", None)
    assert parse_host("example.com:false:false") == ("example.com", None)


def test_host_parser_rejects_out_of_range_port():
    assert parse_host("example.com:70000") == ("example.com", None)
    assert parse_host("example.com:") == ("example.com", None)


def test_addr_iter_multi():
    conn = Connect("hello").set_addrs([LOCALHOST, UNSPECIFIED])
    it = conn.addrs()
    assert next(it) == LOCALHOST
    assert next(it) == UNSPECIFIED
    assert next(it, None) is None

    owned = conn.take_addrs()
    assert next(owned) == LOCALHOST
    assert next(owned) == UNSPECIFIED
    assert next(owned, None) is None
    assert not conn.has_addr()
    assert list(conn.addrs()) == []


def test_addr_iter_single():
    conn = Connect("hello").set_addr(LOCALHOST)
    it = conn.addrs()
    assert next(it) == LOCALHOST
    assert next(it, None) is None

    empty = Connect("hello")
    assert next(empty.addrs(), None) is None
    assert not empty.has_addr()


def test_set_addrs_single_element():
    conn = Connect("hello").set_addrs([LOCALHOST])
    assert conn.has_addr()
    assert list(conn.addrs()) == [LOCALHOST]


def test_set_addr_none_clears():
    conn = Connect("hello").set_addr(LOCALHOST).set_addr(None)
    assert not conn.has_addr()


def test_local_addr():
    conn = Connect("hello").set_local_addr([127, 0, 0, 1])
    assert conn.local_addr == ipaddress.IPv4Address("127.0.0.1")


def test_local_addr_from_string():
    conn = Connect("hello").set_local_addr("::1")
    assert conn.local_addr == ipaddress.IPv6Address("::1")


def test_port_from_hostname():
    conn = Connect("example.com:8080")
    assert conn.port() == 8080
    assert conn.hostname() == "example.com:8080"


def test_port_default_and_set_port():
    conn = Connect("hello")
    assert conn.port() == 0
    assert str(conn) == "hello:0"
    assert conn.set_port(443).port() == 443


def test_set_port_rejects_invalid():
    with pytest.raises(ValueError):
        Connect("hello").set_port(70000)


def test_with_addr():
    conn = Connect.with_addr("10", LOCALHOST)
    assert conn.has_addr()
    assert list(conn.addrs()) == [LOCALHOST]
    assert conn.port() == 0


def test_invalid_addresses_rejected():
    with pytest.raises(ValueError):
        Connect("hello").set_addr(("not-an-ip", 80))
    with pytest.raises(ValueError):
        Connect("hello").set_addr(("127.0.0.1", -1))
    with pytest.raises(TypeError):
        Connect("hello").set_addr(5)


def test_request_must_be_address_or_str():
    with pytest.raises(TypeError):
        Connect(42)


def test_equality():
    assert Connect("hello") == Connect("hello")
    assert Connect("hello") != Connect("hello").set_port(1)


class _Named(Address):
    def __init__(self, name, port):
        self._name = name
        self._port = port

    def hostname(self):
        return self._name

    def port(self):
        return self._port


def test_address_port_overrides_configured_port():
    conn = Connect(_Named("svc", 9000)).set_port(1)
    assert conn.port() == 9000
    assert str(conn) == "svc:9000"


def test_address_without_port_uses_configured():
    conn = Connect(_Named("svc", None)).set_port(7)
    assert conn.port() == 7


class _Stream:
    def __init__(self, name):
        self.name = name

    def peer(self):
        return self.name

    def __repr__(self):
        return f"_Stream({self.name})"


def test_connection_parts():
    stream = _Stream("a")
    conn = Connection(stream, "example.com")
    io, req = conn.into_parts()
    assert io is stream
    assert req == "example.com"
    assert conn.host() == "example.com"


def test_connection_from_parts():
    conn = Connection.from_parts("io", "req")
    assert conn.into_parts() == ("io", "req")


def test_connection_replace_io():
    conn = Connection(_Stream("a"), "example.com")
    old, new = conn.replace_io(_Stream("b"))
    assert old.name == "a"
    assert new.io.name == "b"
    assert new.host() == "example.com"


def test_connection_forwards_to_stream():
    conn = Connection(_Stream("a"), "example.com")
    assert conn.peer() == "a"
    with pytest.raises(AttributeError):
        conn.missing_attribute


def test_connection_repr():
    conn = Connection(_Stream("a"), "example.com")
    assert repr(conn) == "Stream {_Stream(a)}"