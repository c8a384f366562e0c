import asyncio
import datetime
import ipaddress
import ssl

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from actnet.accept import TlsStream
from actnet.connect import Connect, Connection
from actnet.connector import default_connector
from actnet.tls_connect import TlsConnector, TlsConnectorService


@pytest.fixture
def cert_files(tmp_path):
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(
            x509.SubjectAlternativeName(
                [x509.DNSName("localhost"), x509.IPAddress(ipaddress.ip_address("127.0.0.1"))]
            ),
            critical=False,
        )
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    cert_path = tmp_path / "cert.pem"
    key_path = tmp_path / "key.pem"
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    return str(cert_path), str(key_path)


async def _start_server(cert_files):
    cert_path, key_path = cert_files
    server_ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    server_ctx.load_cert_chain(cert_path, key_path)

    async def handle(reader, writer):
        try:
            writer.write(b"test")
            await writer.drain()
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0, ssl=server_ctx)
    port = server.sockets[0].getsockname()[1]
    return server, port


async def _tcp(host, port):
    conn = default_connector()
    return await conn.call(Connect.with_addr(host, ("127.0.0.1", port)))


@pytest.mark.asyncio
async def test_handshake_succeeds(cert_files):
    server, port = await _start_server(cert_files)
    try:
        client_ctx = ssl.create_default_context(cafile=cert_files[0])
        service = TlsConnector(client_ctx).service()
        tcp = await _tcp("localhost", port)
        result = await service.call(tcp)
        try:
            assert isinstance(result, Connection)
            assert result.host() == "localhost"
            assert isinstance(result.io, TlsStream)
            assert result.io.version() is not None
            assert result.io.peer_addr() == ("127.0.0.1", port)
            data = await asyncio.wait_for(result.io.reader.readexactly(4), 5)
            assert data == b"test"
        finally:
            result.io.close()
    finally:
        server.close()


@pytest.mark.asyncio
async def test_new_service_handshake(cert_files):
    server, port = await _start_server(cert_files)
    try:
        client_ctx = ssl.create_default_context(cafile=cert_files[0])
        service = await TlsConnector(client_ctx).new_service(None)
        assert service.context is client_ctx
        result = await service.call(await _tcp("localhost", port))
        try:
            data = await asyncio.wait_for(result.io.reader.readexactly(4), 5)
            assert data == b"test"
        finally:
            result.io.close()
    finally:
        server.close()


@pytest.mark.asyncio
async def test_hostname_mismatch_raises(cert_files):
    server, port = await _start_server(cert_files)
    try:
        client_ctx = ssl.create_default_context(cafile=cert_files[0])
        service = TlsConnector(client_ctx).service()
        tcp = await _tcp("example.com", port)
        with pytest.raises(OSError) as info:
            await service.call(tcp)
        assert isinstance(info.value.__cause__, ssl.SSLError)
    finally:
        server.close()


@pytest.mark.asyncio
async def test_untrusted_certificate_raises(cert_files):
    server, port = await _start_server(cert_files)
    try:
        client_ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        service = TlsConnector(client_ctx).service()
        tcp = await _tcp("localhost", port)
        with pytest.raises(OSError) as info:
            await service.call(tcp)
        assert isinstance(info.value.__cause__, ssl.SSLCertVerificationError)
    finally:
        server.close()


def test_factory_rejects_non_context():
    with pytest.raises(TypeError):
        TlsConnector("not a context")


def test_service_rejects_non_tcp_stream():
    service = TlsConnectorService(ssl.create_default_context())
    with pytest.raises(TypeError):
        service.call(Connection(object(), "localhost"))


def test_service_rejects_non_connection():
    service = TlsConnectorService(ssl.create_default_context())
    with pytest.raises(TypeError):
        service.call("localhost")


def test_services_share_context():
    ctx = ssl.create_default_context()
    factory = TlsConnector(ctx)
    first, second = factory.service(), factory.service()
    assert first.context is ctx
    assert second.context is first.context
    assert first.available() is True