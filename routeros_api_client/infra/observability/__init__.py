"""Observability infrastructure for the RouterOS API client.

Provides structured logging with correlation IDs for tracing one CLI run
or one session across log lines.
"""

from routeros_api_client.infra.observability.logging import (
    CorrelationIDFilter,
    JSONFormatter,
    correlation_id_var,
    get_correlation_id,
    set_correlation_id,
    setup_logging,
)

__all__ = [
    "correlation_id_var",
    "get_correlation_id",
    "set_correlation_id",
    "CorrelationIDFilter",
    "JSONFormatter",
    "setup_logging",
]
