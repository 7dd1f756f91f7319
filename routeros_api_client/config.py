"""Configuration module for the RouterOS API client.

Implements Pydantic v2 Settings for configuration management with support for:
- Environment variables (ROUTEROS_API_* prefix)
- YAML/TOML configuration files
- Command-line argument overrides
- Fail-fast validation at startup

Two layers:
- Settings: application-wide configuration (logging + router defaults)
- ConnectionParameters: immutable per-connection values used by the client

Configuration priority (later overrides earlier):
1. Built-in defaults
2. Configuration file (YAML/TOML)
3. Environment variables
4. Command-line arguments
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from routeros_api_client.infra.routeros.parameters import ConnectionParameters


class Settings(BaseSettings):
    """Application configuration with sensible defaults.

    Example:
        # Load from environment only
        settings = Settings()

        # Override specific values
        settings = Settings(router_host="192.168.88.1", router_user="admin")

        params = settings.to_connection_parameters()
    """

    model_config = SettingsConfigDict(
        env_prefix="ROUTEROS_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown fields
    )

    # ========================================
    # Application Settings
    # ========================================

    environment: Literal["lab", "staging", "prod"] = Field(
        default="lab", description="Deployment environment"
    )

    debug: bool = Field(default=False, description="Enable debug mode with verbose logging")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    log_format: Literal["json", "text"] = Field(default="text", description="Log output format")

    log_file: str | None = Field(default=None, description="Optional JSON log file")

    # ========================================
    # RouterOS API Connection
    # ========================================

    router_host: str = Field(default="", description="Router hostname or IP")

    router_user: str = Field(default="", description="API user name")

    router_password: str = Field(default="", description="API user password")

    router_port: int | None = Field(
        default=None, ge=1, le=65535, description="API port (8728 plain, 8729 TLS)"
    )

    router_ssl: bool = Field(default=False, description="Connect to the api-ssl service")

    router_legacy: bool = Field(
        default=False, description="Force the pre-6.43 MD5 challenge-response login"
    )

    router_timeout_seconds: float = Field(
        default=10.0, gt=0, le=300.0, description="Socket open timeout"
    )

    router_socket_timeout_seconds: float = Field(
        default=30.0, gt=0, le=3600.0, description="Per-read timeout"
    )

    router_attempts: int = Field(default=10, ge=1, le=100, description="Connection attempts")

    router_delay_seconds: float = Field(
        default=1.0, ge=0, le=60.0, description="Delay between connection attempts"
    )

    router_encoding: str = Field(default="utf-8", description="Text encoding of API words")

    # ========================================
    # Validators
    # ========================================

    @model_validator(mode="after")
    def validate_debug_log_level(self) -> "Settings":
        """Debug mode always logs at DEBUG level."""
        if self.debug:
            self.log_level = "DEBUG"
        return self

    # ========================================
    # Helper Methods
    # ========================================

    def to_connection_parameters(self) -> ConnectionParameters:
        """Build immutable connection parameters from router_* settings.

        Raises:
            RouterOSConfigError: If a router_* value is not a valid parameter
        """
        return ConnectionParameters.from_mapping(
            {
                "host": self.router_host,
                "user": self.router_user,
                "password": self.router_password,
                "port": self.router_port,
                "ssl": self.router_ssl,
                "legacy": self.router_legacy,
                "timeout": self.router_timeout_seconds,
                "socket_timeout": self.router_socket_timeout_seconds,
                "attempts": self.router_attempts,
                "delay": self.router_delay_seconds,
                "encoding": self.router_encoding,
            }
        )

    def to_dict(self) -> dict:
        """Convert settings to dictionary, masking secrets."""
        data = self.model_dump()
        if data.get("router_password"):
            data["router_password"] = "***REDACTED***"
        return data


# ========================================
# Global Settings Instance
# ========================================

_settings: Settings | None = None


def get_settings() -> Settings:
    """Get global settings instance (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set global settings instance."""
    global _settings
    _settings = settings


def load_settings_from_file(config_file: Path | str) -> Settings:
    """Load settings from YAML or TOML configuration file.

    Args:
        config_file: Path to configuration file

    Returns:
        Settings instance loaded from file

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file format is invalid

    Example:
        settings = load_settings_from_file("config/lab.yaml")
        set_settings(settings)
    """
    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    if suffix in [".yaml", ".yml"]:
        import yaml

        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}
    elif suffix == ".toml":
        import tomllib

        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)
    else:
        raise ValueError(f"Unsupported config file format: {suffix}. Use .yaml, .yml, or .toml")

    return Settings(**config_data)
