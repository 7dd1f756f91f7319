"""Tests for the socket transport and word connector.

Uses a local asyncio server that speaks the RouterOS word framing.
"""

import asyncio
from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio

from routeros_api_client.infra.routeros.api_client import RouterOSApiClient
from routeros_api_client.infra.routeros.codec import decode_length, encode_word, prefix_size
from routeros_api_client.infra.routeros.exceptions import (
    RouterOSError,
    RouterOSNetworkError,
    RouterOSProtocolError,
    RouterOSQueryError,
    RouterOSTimeoutError,
)
from routeros_api_client.infra.routeros.parser import Reply
from routeros_api_client.infra.routeros.transport import RouterOSConnector, RouterOSTransport

Handler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


async def server_read_sentence(reader: asyncio.StreamReader) -> list[str]:
    words = []
    while True:
        first = await reader.readexactly(1)
        size = prefix_size(first[0])
        rest = await reader.readexactly(size - 1) if size > 1 else b""
        length = decode_length(first + rest)
        if length == 0:
            return words
        words.append((await reader.readexactly(length)).decode())


def server_write(writer: asyncio.StreamWriter, *words: str) -> None:
    writer.write(b"".join(encode_word(word) for word in words))


@pytest_asyncio.fixture
async def serve():
    """Start a local server with the given handler; yields its port."""
    servers: list[asyncio.Server] = []

    async def start(handler: Handler) -> int:
        server = await asyncio.start_server(handler, "127.0.0.1", 0)
        servers.append(server)
        return server.sockets[0].getsockname()[1]

    yield start

    for server in servers:
        server.close()
        await server.wait_closed()


class TestRouterOSTransport:
    """Tests for RouterOSTransport."""

    def test_initialization(self) -> None:
        transport = RouterOSTransport("192.168.88.1")

        assert transport.port == 8728
        assert transport.use_ssl is False
        assert transport.timeout_seconds == 10.0
        assert transport.get_socket() is None

    @pytest.mark.asyncio
    async def test_open_and_close(self, serve) -> None:
        async def handler(reader, writer) -> None:
            await reader.read()
            writer.close()

        port = await serve(handler)
        transport = RouterOSTransport("127.0.0.1", port)

        await transport.open_socket()
        assert transport.get_socket() is not None

        await transport.close_socket()
        assert transport.get_socket() is None
        await transport.close_socket()

    @pytest.mark.asyncio
    async def test_connection_refused(self) -> None:
        server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
        closed_port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()

        transport = RouterOSTransport("127.0.0.1", closed_port)
        with pytest.raises(RouterOSNetworkError, match="Unable to establish socket session"):
            await transport.open_socket()

    def test_connector_requires_open_socket(self) -> None:
        with pytest.raises(RouterOSNetworkError, match="not open"):
            RouterOSConnector(RouterOSTransport("127.0.0.1"))


class TestRouterOSConnector:
    """Tests for RouterOSConnector over a real socket."""

    @pytest.mark.asyncio
    async def test_words_roundtrip(self, serve) -> None:
        received: list[list[str]] = []

        async def handler(reader, writer) -> None:
            received.append(await server_read_sentence(reader))
            server_write(writer, "!re", "=comment=" + "x" * 300, "", "!done", "")
            await writer.drain()
            await reader.read()
            writer.close()

        port = await serve(handler)
        transport = RouterOSTransport("127.0.0.1", port)
        await transport.open_socket()
        connector = RouterOSConnector(transport)

        for word in ["/ip/address/print", "?interface=ether1", ""]:
            await connector.write_word(word)

        words = [await connector.read_word() for _ in range(5)]
        await transport.close_socket()

        assert received == [["/ip/address/print", "?interface=ether1"]]
        assert words == ["!re", "=comment=" + "x" * 300, "", "!done", ""]

    @pytest.mark.asyncio
    async def test_peer_close_raises_network_error(self, serve) -> None:
        async def handler(reader, writer) -> None:
            writer.close()

        port = await serve(handler)
        transport = RouterOSTransport("127.0.0.1", port)
        await transport.open_socket()
        connector = RouterOSConnector(transport)

        with pytest.raises(RouterOSNetworkError, match="closed by router"):
            await connector.read_word()
        await transport.close_socket()

    @pytest.mark.asyncio
    async def test_read_timeout(self, serve) -> None:
        async def handler(reader, writer) -> None:
            await asyncio.sleep(0.5)
            writer.close()

        port = await serve(handler)
        transport = RouterOSTransport("127.0.0.1", port, socket_timeout_seconds=0.05)
        await transport.open_socket()
        connector = RouterOSConnector(transport)

        with pytest.raises(RouterOSTimeoutError, match="Read timeout"):
            await connector.read_word()
        await transport.close_socket()

    @pytest.mark.asyncio
    async def test_reserved_control_byte(self, serve) -> None:
        async def handler(reader, writer) -> None:
            writer.write(b"\xf8")
            await writer.drain()
            await asyncio.sleep(0.1)
            writer.close()

        port = await serve(handler)
        transport = RouterOSTransport("127.0.0.1", port)
        await transport.open_socket()
        connector = RouterOSConnector(transport)

        with pytest.raises(RouterOSProtocolError, match="Reserved control byte"):
            await connector.read_word()
        await transport.close_socket()

    @pytest.mark.asyncio
    async def test_unencodable_word_discards_sentence(self, serve) -> None:
        received: list[list[str]] = []

        async def handler(reader, writer) -> None:
            received.append(await server_read_sentence(reader))
            await reader.read()
            writer.close()

        port = await serve(handler)
        transport = RouterOSTransport("127.0.0.1", port)
        await transport.open_socket()
        connector = RouterOSConnector(transport, encoding="ascii")

        await connector.write_word("/system/identity/set")
        with pytest.raises(RouterOSQueryError, match="cannot be encoded as ascii"):
            await connector.write_word("=name=rüter")

        for word in ["/system/identity/print", ""]:
            await connector.write_word(word)
        await asyncio.sleep(0.05)
        await transport.close_socket()

        assert received == [["/system/identity/print"]]


class TestEndToEnd:
    """RouterOSApiClient against a scripted router."""

    @pytest.mark.asyncio
    async def test_login_and_query(self, serve) -> None:
        received: list[list[str]] = []

        async def handler(reader, writer) -> None:
            received.append(await server_read_sentence(reader))
            server_write(writer, "!done", "")
            received.append(await server_read_sentence(reader))
            server_write(
                writer,
                "!re", "=address=10.0.0.2", "=mac-address=AA:BB:CC:DD:EE:01", "",
                "!re", "=address=10.0.0.3", "=mac-address=AA:BB:CC:DD:EE:02", "",
                "!done", "",
            )  # fmt: skip
            await writer.drain()
            await reader.read()
            writer.close()

        port = await serve(handler)
        params = {"host": "127.0.0.1", "port": port, "user": "admin", "pass": "secret"}

        async with RouterOSApiClient(params) as client:
            await client.query("/ip/dhcp-server/lease/print", where=[("dynamic", "true")])
            reply = await client.read()

        assert isinstance(reply, Reply)
        assert [row["address"] for row in reply] == ["10.0.0.2", "10.0.0.3"]
        assert received == [
            ["/login", "=name=admin", "=password=secret"],
            ["/ip/dhcp-server/lease/print", "?dynamic=true"],
        ]

    @pytest.mark.asyncio
    async def test_unencodable_password_fails_fast_and_closes(self, serve) -> None:
        connections: list[bytes] = []

        async def handler(reader, writer) -> None:
            connections.append(await reader.read())
            writer.close()

        port = await serve(handler)
        params = {
            "host": "127.0.0.1",
            "port": port,
            "user": "admin",
            "pass": "pässwörd",
            "encoding": "ascii",
            "attempts": 2,
            "delay": 0,
        }
        client = RouterOSApiClient(params)

        with pytest.raises(RouterOSError) as e:
            await client.connect()

        assert isinstance(e.value, RouterOSQueryError)
        assert client.connected is False
        assert client._transport is None
        await asyncio.sleep(0.05)
        assert connections == [b""]
