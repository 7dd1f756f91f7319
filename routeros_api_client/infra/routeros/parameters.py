"""Connection parameters for one RouterOS API session."""

import codecs
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from routeros_api_client.infra.routeros.exceptions import RouterOSConfigError

DEFAULT_API_PORT = 8728
DEFAULT_API_SSL_PORT = 8729

REQUIRED_PARAMETERS = ("host", "user", "password")


class ConnectionParameters(BaseModel):
    """Immutable connection parameters for one RouterOS API session.

    Accepts the short key names used by RouterOS API tooling
    ("host", "user", "pass"), so a plain mapping can be passed:

        ConnectionParameters.from_mapping({"host": "10.0.0.1", "user": "admin", "pass": "x"})
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    host: str = Field(default="", description="Router hostname or IP")
    user: str = Field(default="", description="API user name")
    password: str = Field(default="", alias="pass", description="API user password", repr=False)
    port: int | None = Field(
        default=None, ge=1, le=65535, description="API port (default 8728, or 8729 with ssl)"
    )
    ssl: bool = Field(default=False, description="Connect with TLS (api-ssl service)")
    legacy: bool = Field(
        default=False, description="Use MD5 challenge-response login (RouterOS < 6.43)"
    )
    timeout: float = Field(default=10.0, gt=0, description="Socket open timeout in seconds")
    socket_timeout: float | None = Field(
        default=30.0, gt=0, description="Per-read timeout in seconds (None waits forever)"
    )
    attempts: int = Field(default=10, ge=1, description="Connection attempts")
    delay: float = Field(default=1.0, ge=0, description="Seconds between connection attempts")
    encoding: str = Field(default="utf-8", description="Text encoding of API words")

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Reject encodings unknown to the codec registry."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v

    @property
    def effective_port(self) -> int:
        """Port to connect to, falling back to the service default."""
        if self.port is not None:
            return self.port
        return DEFAULT_API_SSL_PORT if self.ssl else DEFAULT_API_PORT

    def missing_required(self) -> list[str]:
        """Names of required parameters that are empty."""
        return [name for name in REQUIRED_PARAMETERS if not getattr(self, name)]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConnectionParameters":
        """Build parameters from a plain mapping.

        Raises:
            RouterOSConfigError: If a value has the wrong type or range
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise RouterOSConfigError(f"Invalid connection parameters: {e}") from e
