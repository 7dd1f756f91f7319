"""RouterOS API client exceptions.

Strongly-typed exceptions for the RouterOS binary API client.
Maps low-level socket/protocol failures to domain-level exceptions.

Exception hierarchy:
- RouterOSError (base)
  - RouterOSConfigError (missing or invalid connection parameters)
  - RouterOSQueryError (malformed query or filter condition)
  - RouterOSConnectionError (network/timeout)
    - RouterOSTimeoutError
    - RouterOSNetworkError
    - RouterOSProtocolError
  - RouterOSAuthenticationError (login rejected with !trap)
"""


class RouterOSError(Exception):
    """Base exception for all RouterOS client errors."""

    pass


class RouterOSConfigError(RouterOSError):
    """Raised when a required connection parameter is missing or empty."""

    pass


class RouterOSQueryError(RouterOSError):
    """Raised when a query or one of its filter conditions is malformed."""

    pass


# Connection errors
class RouterOSConnectionError(RouterOSError):
    """Base exception for connection/network failures."""

    pass


class RouterOSTimeoutError(RouterOSConnectionError):
    """Raised when connecting or reading times out."""

    pass


class RouterOSNetworkError(RouterOSConnectionError):
    """Raised for network connectivity issues (DNS, TCP connection, peer close)."""

    pass


class RouterOSProtocolError(RouterOSConnectionError):
    """Raised when the router sends bytes that are not a valid word."""

    pass


class RouterOSAuthenticationError(RouterOSError):
    """Raised when the router rejects the login credentials.

    Attributes:
        response: Raw reply words returned by the router (if available)
    """

    def __init__(
        self, message: str = "Invalid user name or password", response: list[str] | None = None
    ):
        super().__init__(message)
        self.response = response or []
