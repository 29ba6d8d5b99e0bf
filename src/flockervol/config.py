"""Configuration using pydantic-settings.

Configuration hierarchy:
- ControlServiceConfig: Where the Flocker control service lives and how to reach it
- ProvisionConfig: Convergence wait timing and dataset defaults
- LoggingConfig: Logging behavior
- Settings: Main config aggregating all sub-configs

Example: FLOCKER_CONTROL_SERVICE_HOST=10.0.0.5 FLOCKER_CONTROL_SERVICE_PORT=4523
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# From flocker-docker-plugin adapter.py (100 GiB)
DEFAULT_MAXIMUM_SIZE = 107374182400


class ControlServiceConfig(BaseSettings):
    """Flocker control service connection configuration.

    host and port are kept as raw strings: ControlServiceClient validates
    them so a bad value surfaces as ConfigurationError instead of a
    settings validation failure at import time.
    """

    model_config = SettingsConfigDict(env_prefix="FLOCKER_CONTROL_SERVICE_")

    host: str = Field(default="", description="Control service host (required)")
    port: str = Field(default="", description="Control service port (required)")
    api_version: str = Field(default="v1", description="Versioned API root segment")
    request_timeout: float = Field(default=30.0, description="Per-request timeout (seconds)")

    # Mutual TLS
    use_tls: bool = Field(default=True)
    ca_file: str = Field(default="/etc/flocker/cluster.crt")
    client_key_file: str = Field(default="/etc/flocker/apiuser.key")
    client_cert_file: str = Field(default="/etc/flocker/apiuser.crt")


class ProvisionConfig(BaseSettings):
    """Dataset provisioning configuration.

    A dataset can take a long time to become live; wait_timeout bounds
    how long provisioning waits before giving up.
    """

    model_config = SettingsConfigDict(env_prefix="FLOCKER_PROVISION_")

    wait_timeout: float = Field(default=120.0, gt=0)  # seconds (2 minutes)
    poll_interval: float = Field(default=5.0, gt=0)  # seconds
    maximum_size: int = Field(default=DEFAULT_MAXIMUM_SIZE, gt=0)  # bytes


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Supports both text and JSON formats:
    - text: Human-readable for local development
    - json: Structured logging for production (log aggregation)
    """

    model_config = SettingsConfigDict(env_prefix="FLOCKER_LOGGING_")

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="text", description="Log format (text, json)")
    service_name: str = Field(default="flocker-volume", description="Service identifier in logs")
    poll_log_window: float = Field(
        default=5.0,
        description="Minimum seconds between repeated poll events for one dataset",
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_nested_delimiter="__")

    control_service: ControlServiceConfig = Field(default_factory=ControlServiceConfig)
    provision: ProvisionConfig = Field(default_factory=ProvisionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    return Settings()
