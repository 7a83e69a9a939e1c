"""
Configuration module for the saga HTTP transport.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .__version__ import __version__
from .exceptions import ConfigurationError


class TransportConfig(BaseModel):
    """
    Transport configuration.

    Supports environment variables through ``from_env``:
    - SAGA_TRANSPORT_TIMEOUT_CONNECT: connect timeout in seconds (default: 5)
    - SAGA_TRANSPORT_TIMEOUT_READ: read timeout in seconds (default: 30)
    - SAGA_TRANSPORT_MAX_RESPONSE_BYTES: response body cap (default: unbounded)
    - SAGA_TRANSPORT_DEBUG: enable debug logging (default: false)
    """

    model_config = ConfigDict(frozen=True)

    timeout_connect: float = Field(5.0, description="Connection timeout in seconds")
    timeout_read: float = Field(30.0, description="Read timeout in seconds")
    max_response_bytes: Optional[int] = Field(
        None, description="Largest response body buffered in memory, unbounded if unset"
    )
    user_agent: str = Field(f"saga-http-transport/{__version__}", description="User-Agent header")
    debug: bool = Field(False, description="Enable debug logging")

    @field_validator("timeout_connect", "timeout_read")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("max_response_bytes")
    @classmethod
    def validate_max_response_bytes(cls, v):
        if v is not None and v <= 0:
            raise ValueError("max_response_bytes must be positive")
        return v

    @property
    def timeout(self):
        """Timeout tuple in the ``(connect, read)`` form requests expects."""
        return (self.timeout_connect, self.timeout_read)

    @classmethod
    def from_env(cls, **overrides) -> "TransportConfig":
        """
        Build configuration from environment variables.

        Args:
            **overrides: Explicit values taking precedence over the environment

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        values = {}
        env = {
            "timeout_connect": "SAGA_TRANSPORT_TIMEOUT_CONNECT",
            "timeout_read": "SAGA_TRANSPORT_TIMEOUT_READ",
            "max_response_bytes": "SAGA_TRANSPORT_MAX_RESPONSE_BYTES",
            "debug": "SAGA_TRANSPORT_DEBUG",
        }
        for field, name in env.items():
            raw = os.getenv(name)
            if raw is not None and raw.strip():
                values[field] = raw.strip()
        values.update(overrides)

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid transport configuration: {e}") from e
