"""RouterOS integration module.

Provides an async client for the MikroTik RouterOS binary API:
- api_client: session controller (connect, query, read)
- auth: modern and legacy login handshake
- query / sentence / parser: sentence building, reading and reply parsing
- codec / transport: word framing and the socket underneath
- exceptions: Strongly-typed error handling
"""

from routeros_api_client.infra.routeros.api_client import RouterOSApiClient
from routeros_api_client.infra.routeros.auth import Authenticator, SessionState
from routeros_api_client.infra.routeros.exceptions import (
    RouterOSAuthenticationError,
    RouterOSConfigError,
    RouterOSConnectionError,
    RouterOSError,
    RouterOSNetworkError,
    RouterOSProtocolError,
    RouterOSQueryError,
    RouterOSTimeoutError,
)
from routeros_api_client.infra.routeros.parameters import ConnectionParameters
from routeros_api_client.infra.routeros.parser import Reply, parse_reply
from routeros_api_client.infra.routeros.query import Query

__all__ = [
    # Client
    "RouterOSApiClient",
    "ConnectionParameters",
    "Authenticator",
    "SessionState",
    "Query",
    "Reply",
    "parse_reply",
    # Exceptions
    "RouterOSError",
    "RouterOSConfigError",
    "RouterOSQueryError",
    "RouterOSConnectionError",
    "RouterOSTimeoutError",
    "RouterOSNetworkError",
    "RouterOSProtocolError",
    "RouterOSAuthenticationError",
]
