"""Client configuration.

Every setting can come from the environment (IAMDS_*), falling back to
defaults suitable for the sandbox environment.
"""

import os
import socket
from enum import Enum

from pydantic import BaseModel, Field, model_validator

SDK_VERSION = "2.4.34"

ENV_PREFIX = "IAMDS_"


class Environment(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"
    OTHER = "other"


BASE_PATHS = {
    Environment.SANDBOX: "https://api.sbx.avalara.com/iam",
    Environment.PRODUCTION: "https://api.avalara.com/iam",
}


class Configuration(BaseModel):
    """Connection settings shared by the transports."""

    environment: Environment = Environment.SANDBOX
    base_path: str | None = None
    timeout: float = 100.0
    app_name: str = "iamds-client"
    app_version: str = SDK_VERSION
    machine_name: str = Field(default_factory=socket.gethostname)
    default_headers: dict[str, str] = {}
    access_token: str | None = None
    username: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def _check_base_path(self) -> "Configuration":
        if self.environment is Environment.OTHER and not self.base_path:
            raise ValueError("base_path is required when environment is 'other'")
        return self

    @property
    def resolved_base_path(self) -> str:
        return (self.base_path or BASE_PATHS[self.environment]).rstrip("/")

    def client_header(self) -> str:
        """Value of the X-Avalara-Client header."""
        return f"{self.app_name}; {self.app_version}; PythonRestClient; {SDK_VERSION}; {self.machine_name}"

    @classmethod
    def from_env(cls, **overrides) -> "Configuration":
        """Build a configuration from IAMDS_* variables; keyword arguments win."""
        values = {}
        for name in ("environment", "base_path", "timeout", "app_name", "app_version",
                     "machine_name", "access_token", "username", "password"):
            value = os.getenv(ENV_PREFIX + name.upper())
            if value:
                values[name] = value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
