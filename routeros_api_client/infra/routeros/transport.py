"""Socket transport and word connector for the RouterOS API.

RouterOSTransport owns one TCP (or TLS) stream to the router and knows
nothing about words. RouterOSConnector binds to an open transport and
reads/writes single length-prefixed words through it.

Timeouts:
- timeout_seconds bounds opening the socket
- socket_timeout_seconds bounds every single read from the socket
"""

import asyncio
import logging
import ssl

from routeros_api_client.infra.routeros.codec import decode_length, encode_word, prefix_size
from routeros_api_client.infra.routeros.exceptions import (
    RouterOSNetworkError,
    RouterOSProtocolError,
    RouterOSQueryError,
    RouterOSTimeoutError,
)

logger = logging.getLogger(__name__)

StreamPair = tuple[asyncio.StreamReader, asyncio.StreamWriter]


class RouterOSTransport:
    """Async TCP/TLS socket to a RouterOS API service.

    Example:
        transport = RouterOSTransport("192.168.88.1", 8728)
        await transport.open_socket()
        reader, writer = transport.get_socket()
        ...
        await transport.close_socket()
    """

    def __init__(
        self,
        host: str,
        port: int = 8728,
        use_ssl: bool = False,
        timeout_seconds: float = 10.0,
        socket_timeout_seconds: float | None = 30.0,
        ssl_context: ssl.SSLContext | None = None,
    ) -> None:
        """Initialize transport.

        Args:
            host: Router hostname or IP
            port: API port (8728 plain, 8729 TLS)
            use_ssl: Wrap the socket in TLS
            timeout_seconds: Socket open timeout
            socket_timeout_seconds: Per-read timeout (None disables it)
            ssl_context: Custom TLS context (defaults to an unverified context,
                RouterOS ships self-signed certificates)
        """
        self.host = host
        self.port = port
        self.use_ssl = use_ssl
        self.timeout_seconds = timeout_seconds
        self.socket_timeout_seconds = socket_timeout_seconds
        self.ssl_context = ssl_context

        self._streams: StreamPair | None = None

    def _build_ssl_context(self) -> ssl.SSLContext:
        if self.ssl_context is not None:
            return self.ssl_context
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context

    async def open_socket(self) -> None:
        """Open the socket.

        Raises:
            RouterOSTimeoutError: If the router does not accept in time
            RouterOSNetworkError: On DNS/TCP/TLS errors
        """
        tls = self._build_ssl_context() if self.use_ssl else None

        try:
            self._streams = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port, ssl=tls),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as e:
            raise RouterOSTimeoutError(
                f"Connection timeout after {self.timeout_seconds}s: {self.host}:{self.port}"
            ) from e
        except OSError as e:
            raise RouterOSNetworkError(
                f"Unable to establish socket session: {self.host}:{self.port}: {e}"
            ) from e

        logger.debug(f"Socket opened: {self.host}:{self.port} (tls={self.use_ssl})")

    def get_socket(self) -> StreamPair | None:
        """Return (reader, writer) for the open socket, or None."""
        return self._streams

    async def close_socket(self) -> None:
        """Close the socket if it is open."""
        if self._streams is None:
            return

        _, writer = self._streams
        self._streams = None
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error while closing socket {self.host}:{self.port}: {e}")
        logger.debug(f"Socket closed: {self.host}:{self.port}")


class RouterOSConnector:
    """Reads and writes single RouterOS API words over an open transport."""

    def __init__(self, transport: RouterOSTransport, encoding: str = "utf-8") -> None:
        streams = transport.get_socket()
        if streams is None:
            raise RouterOSNetworkError("Transport socket is not open")

        self.transport = transport
        self.encoding = encoding
        self._reader, self._writer = streams
        self._pending = bytearray()

    async def write_word(self, word: str) -> None:
        """Buffer one word; the empty word terminates the sentence and sends it.

        A sentence reaches the socket only once it is complete, so a word
        that fails to encode discards the whole sentence.

        Raises:
            RouterOSQueryError: If the word cannot be encoded
            RouterOSNetworkError: If flushing the socket fails
        """
        try:
            self._pending += encode_word(word, self.encoding)
        except ValueError as e:
            self._pending.clear()
            raise RouterOSQueryError(f"Word cannot be encoded as {self.encoding}: {e}") from e

        if word != "":
            return

        data = bytes(self._pending)
        self._pending.clear()
        self._writer.write(data)
        try:
            await self._writer.drain()
        except OSError as e:
            raise RouterOSNetworkError(f"Write failed: {e}") from e

    async def _read_exactly(self, size: int) -> bytes:
        try:
            return await asyncio.wait_for(
                self._reader.readexactly(size),
                timeout=self.transport.socket_timeout_seconds,
            )
        except TimeoutError as e:
            raise RouterOSTimeoutError(
                f"Read timeout after {self.transport.socket_timeout_seconds}s"
            ) from e
        except asyncio.IncompleteReadError as e:
            raise RouterOSNetworkError("Connection closed by router") from e
        except OSError as e:
            raise RouterOSNetworkError(f"Read failed: {e}") from e

    async def read_word(self) -> str:
        """Read one word; returns "" for the zero-length terminator."""
        first = await self._read_exactly(1)
        try:
            size = prefix_size(first[0])
            rest = await self._read_exactly(size - 1) if size > 1 else b""
            length = decode_length(first + rest)
        except ValueError as e:
            raise RouterOSProtocolError(str(e)) from e

        if length == 0:
            return ""
        data = await self._read_exactly(length)
        return data.decode(self.encoding, errors="replace")
