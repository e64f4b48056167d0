"""Runtime configuration of the notation server and client."""
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress, field_validator

ENV_PREFIX = "NOTATION_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ServerConfig(BaseModel):
    """
    Network and process settings shared by the server, the client and the CLI.

    Values come from the defaults below, then ``NOTATION_*`` environment
    variables, then command-line flags.
    """

    # Immutable once built, the same configuration is handed to the server and the client
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")
    max_workers: Optional[int] = Field(
        default=None, ge=1, description="Maximum concurrent worker processes, CPU count when unset"
    )
    log_level: str = Field(default="INFO", description="Logging level name")

    @field_validator("log_level")
    def log_level_must_be_known(cls, v: str) -> str:
        """Ensure the log level is one of the standard logging levels."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {v!r}, expected one of {', '.join(LOG_LEVELS)}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ServerConfig":
        """
        Build a configuration from ``NOTATION_*`` environment variables.

        :param Mapping environ: Environment to read, ``os.environ`` by default
        :param overrides: Values taking precedence over the environment (``None`` values are ignored)

        :return: Validated configuration
        :rtype: ServerConfig
        :raises pydantic.ValidationError: If a value is invalid
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            env_value = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if env_value:
                values[name] = env_value
        values.update({name: value for name, value in overrides.items() if value is not None})
        return cls(**values)
