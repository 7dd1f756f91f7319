"""RouterOS API client - async client for the MikroTik RouterOS binary API.

This package provides an authenticated session over the RouterOS API socket
(TCP 8728 / TLS 8729), query building with filters and tags, and parsing of
streamed replies into rows.
"""

__version__ = "0.1.0"
__author__ = "RouterOS API Client Contributors"

from routeros_api_client.config import Settings, get_settings, load_settings_from_file, set_settings
from routeros_api_client.infra.routeros import (
    ConnectionParameters,
    Query,
    Reply,
    RouterOSApiClient,
)

__all__ = [
    "ConnectionParameters",
    "Query",
    "Reply",
    "RouterOSApiClient",
    "Settings",
    "__version__",
    "get_settings",
    "load_settings_from_file",
    "set_settings",
]
