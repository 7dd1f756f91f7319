"""RouterOS binary API client.

Provides an async client for the RouterOS API service (TCP 8728, TLS 8729):
- Connection attempts with a fixed delay between them
- Modern and legacy login with automatic legacy detection
- Query building with filters, operations and tags
- Reply reading and parsing into rows

The protocol is half-duplex: a query must be written completely before its
reply is read, and the reply must be read completely before the next query
is written. One client serves one caller; open more clients for parallelism.

Example:
    async with RouterOSApiClient({"host": "192.168.88.1", "user": "admin", "pass": "secret"}) as client:
        await client.query("/ip/dhcp-server/lease/print", where=[("dynamic", "true")])
        leases = await client.read()
        for lease in leases:
            print(lease["address"], lease.get("host-name"))
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from types import TracebackType
from typing import Any

from routeros_api_client.infra.routeros.auth import Authenticator, SessionState
from routeros_api_client.infra.routeros.exceptions import (
    RouterOSAuthenticationError,
    RouterOSConfigError,
    RouterOSConnectionError,
    RouterOSNetworkError,
)
from routeros_api_client.infra.routeros.parameters import ConnectionParameters
from routeros_api_client.infra.routeros.parser import (
    FATAL,
    ParsedReply,
    Record,
    parse_block,
    parse_reply,
    split_blocks,
)
from routeros_api_client.infra.routeros.query import Condition, Query, build_query, to_query
from routeros_api_client.infra.routeros.sentence import read_sentence, write_sentence
from routeros_api_client.infra.routeros.transport import RouterOSConnector, RouterOSTransport

logger = logging.getLogger(__name__)


class RouterOSApiClient:
    """Async client for the RouterOS binary API.

    A client is only usable after connect(); open() and "async with"
    connect immediately and raise if every attempt fails.
    """

    def __init__(self, params: ConnectionParameters | Mapping[str, Any]) -> None:
        """Initialize client.

        Args:
            params: Connection parameters (or a mapping with host/user/pass/...)

        Raises:
            RouterOSConfigError: If host, user or password is missing or empty
        """
        if not isinstance(params, ConnectionParameters):
            params = ConnectionParameters.from_mapping(params)

        missing = params.missing_required()
        if missing:
            raise RouterOSConfigError(
                f"One or more parameters '{', '.join(missing)}' are not set or empty"
            )

        self.params = params
        self.state = SessionState(legacy=params.legacy)

        self._transport: RouterOSTransport | None = None
        self._connector: RouterOSConnector | None = None

    @classmethod
    async def open(cls, params: ConnectionParameters | Mapping[str, Any]) -> "RouterOSApiClient":
        """Create a client and connect it.

        Raises:
            RouterOSConfigError: On missing parameters
            RouterOSConnectionError: If every connection attempt failed
        """
        client = cls(params)
        await client.connect()
        return client

    async def __aenter__(self) -> "RouterOSApiClient":
        if not self.state.connected:
            await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def address(self) -> str:
        return f"{self.params.host}:{self.params.effective_port}"

    @property
    def connected(self) -> bool:
        return self.state.connected

    def _create_transport(self) -> RouterOSTransport:
        return RouterOSTransport(
            host=self.params.host,
            port=self.params.effective_port,
            use_ssl=self.params.ssl,
            timeout_seconds=self.params.timeout,
            socket_timeout_seconds=self.params.socket_timeout,
        )

    async def _attempt(self) -> bool:
        self.state = SessionState(legacy=self.params.legacy)
        self._transport = self._create_transport()
        await self._transport.open_socket()

        if self._transport.get_socket() is None:
            return False

        self._connector = RouterOSConnector(self._transport, encoding=self.params.encoding)
        authenticator = Authenticator(self, self.params.user, self.params.password)
        return await authenticator.login(self.state)

    async def connect(self) -> None:
        """Open the socket and log in, retrying up to params.attempts times.

        Transport and authentication failures are retried. Any other error
        (e.g. a credential that cannot be encoded, or cancellation) closes
        the socket and propagates immediately.

        Raises:
            RouterOSConnectionError: If every attempt failed
            RouterOSQueryError: If a login word cannot be encoded
        """
        attempts = self.params.attempts
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                if await self._attempt():
                    self.state.connected = True
                    logger.info(
                        f"Connected to RouterOS API {self.address}"
                        f" (legacy login: {self.state.legacy})",
                        extra={"router_host": self.params.host, "attempt": attempt},
                    )
                    return
                logger.warning(
                    f"Login to {self.address} failed on attempt {attempt}/{attempts}",
                    extra={"router_host": self.params.host, "attempt": attempt},
                )
            except (RouterOSConnectionError, RouterOSAuthenticationError) as e:
                last_error = e
                logger.warning(
                    f"Connection attempt {attempt}/{attempts} to {self.address} failed: {e}",
                    extra={"router_host": self.params.host, "attempt": attempt},
                )
            except BaseException:
                await self._close_transport()
                raise

            await self._close_transport()

            if attempt < attempts:
                await asyncio.sleep(self.params.delay)

        raise RouterOSConnectionError(f"Unable to connect to {self.address}") from last_error

    async def _close_transport(self) -> None:
        self._connector = None
        if self._transport is not None:
            await self._transport.close_socket()
            self._transport = None

    async def close(self) -> None:
        """Close the connection."""
        was_connected = self.state.connected
        self.state.connected = False
        await self._close_transport()
        if was_connected:
            logger.info(f"Disconnected from RouterOS API {self.address}")

    def _require_connector(self) -> RouterOSConnector:
        if self._connector is None:
            raise RouterOSNetworkError(f"Not connected to {self.address}")
        return self._connector

    async def write(self, query: Query | str | Sequence[str]) -> "RouterOSApiClient":
        """Send a query to the router.

        Args:
            query: Query object, endpoint string, or [endpoint, *attribute words]

        Raises:
            RouterOSQueryError: If query cannot be converted to a Query
        """
        query = to_query(query)
        connector = self._require_connector()
        await write_sentence(connector, query)
        logger.debug(
            f"Sent {query.endpoint}",
            extra={
                "router_host": self.params.host,
                "endpoint": query.endpoint,
                "tag": query.get_tag(),
            },
        )
        return self

    async def query(
        self,
        endpoint: Query | str,
        where: Sequence[Condition] | None = None,
        operations: str | None = None,
        tag: str | None = None,
    ) -> "RouterOSApiClient":
        """Build a query and send it.

        Args:
            endpoint: Command path (e.g. "/ip/address/print") or a Query
            where: Filter conditions, each a tuple of (key), (key, value)
                or (key, operator, value)
            operations: Operations directive for the filter stack (e.g. "|")
            tag: Tag echoed back in the reply

        Raises:
            RouterOSQueryError: On a malformed endpoint or condition

        Example:
            await client.query("/interface/print", where=[("type", "=", "ether")])
            interfaces = await client.read()
        """
        return await self.write(build_query(endpoint, where, operations, tag))

    async def read(self, parse: bool = True) -> ParsedReply:
        """Read one complete reply.

        Args:
            parse: Parse into a Reply (False returns the raw word list)

        Returns:
            Reply with rows and trailing attributes, or the raw word list
            (for parse=False and for !fatal replies)

        Raises:
            RouterOSConnectionError: If the transport fails while reading
        """
        response = await read_sentence(self._require_connector())
        return parse_reply(response) if parse else response

    async def query_read(
        self,
        endpoint: Query | str,
        where: Sequence[Condition] | None = None,
        operations: str | None = None,
        tag: str | None = None,
        parse: bool = True,
    ) -> ParsedReply:
        """Send a query and read its reply."""
        await self.query(endpoint, where, operations, tag)
        return await self.read(parse=parse)

    async def read_iter(self) -> AsyncIterator[Record]:
        """Read one reply and yield its rows one by one.

        Rows are parsed lazily, block by block.
        """
        response = await read_sentence(self._require_connector())
        if FATAL in response:
            logger.error("RouterOS returned !fatal", extra={"router_host": self.params.host})
            return

        for block in split_blocks(response):
            parsed = parse_block(block)
            if isinstance(parsed, list):
                return
            if parsed.rows:
                yield parsed.rows[0]
