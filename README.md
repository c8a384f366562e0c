# actnet

Small asyncio building blocks for network services:

- `actnet.local_waker.LocalWaker`: a single-slot holder for a task's wakeup callback.
- `actnet.counter.Counter`: a shared counter of in-flight work. When it is at capacity,
  `available(waker)` registers the waker, and the waker is called once a `CounterGuard` is released.
- `actnet.future`: `ready`, `ok`, `err`, `Either` and `poll_fn`, which are simple awaitables.
- `actnet.bytestring.ByteString`: an immutable UTF-8 string backed by bytes.
- `actnet.channel`: an unbounded multi-producer, single-consumer queue for one event loop.
- `actnet.errors`: `ConnectError` and its subclasses `ResolverError`, `NoRecordsError`,
  `InvalidInputError`, `UnresolvedError` and `ConnectIoError`.
- `actnet.connect`: `Connect` requests, `Connection` results, the `Address` base class and `parse_host`.
- `actnet.uri`: `UriAddress` and `scheme_to_port`. A URI's port falls back to its scheme's
  default, for example 443 for `https`.
- `actnet.resolve`: `Resolver`, `ResolverFactory` and the `Resolve` base class for custom resolvers.
- `actnet.connector`: TCP connector services (`default_connector`, `new_connector` and their factories).
- `actnet.accept`: TLS acceptor services that limit how many handshakes run at the same time
  on each thread. The limit is set with `max_concurrent_tls_connect` and defaults to 256.
- `actnet.tls_connect`: TLS client connector services.

## Installation

```sh
pip install .
```

## Connecting

```python
import asyncio
from actnet.connect import Connect
from actnet.connector import default_connector

async def main():
    connector = default_connector()
    conn = await connector.call(Connect("localhost:8080"))
    stream, _ = conn.into_parts()
    print(stream.peer_addr())
    stream.close()

asyncio.run(main())
```

A request that already carries a socket address skips name resolution:

```python
Connect.with_addr("example.com", ("127.0.0.1", 8080))
```

When a request lists several addresses, the connector tries them in order. If none of them
can be reached, it raises `ConnectIoError`. A request that has no address when it reaches the
connector raises `UnresolvedError`.

## Custom resolvers

Subclass `actnet.resolve.Resolve`, implement `async lookup(host, port)` and return a list of
`(ip, port)` socket addresses. Wrap it with `Resolver.new_custom(...)` and pass the result to
`actnet.connector.new_connector` or `new_connector_factory`. A failed lookup raises
`ResolverError`, and an empty result raises `NoRecordsError`.

## TLS

`actnet.tls_connect.TlsConnector(context).service()` takes an `ssl.SSLContext`. Its `call(connection)`
performs a client handshake on a connection's `TcpStream` and returns a new `Connection` that
holds an `actnet.accept.TlsStream`.

On the server side, `actnet.accept.Acceptor(context)` produces an `AcceptorService` through
`await acceptor.new_service()`. Its `call(stream)` runs a server handshake on a `TcpStream` and
holds a slot in the thread's handshake counter until the handshake has finished.

## Channels

```python
from actnet.channel import channel

async def main():
    tx, rx = channel()
    tx.send("hello")
    item = await rx.recv()
```

`Receiver.recv()` returns `None` once every sender has been dropped and the buffer is empty.
The receiver can also be used with `async for`. `Sender.close()` makes any later send raise
`SendError`.

## What this package does not do

The package includes no server or listener loop and no command-line program. Acceptor services
work on streams that you have already accepted, for example from `asyncio.start_server`.

## Tests

```sh
pip install .[test]
pytest
```