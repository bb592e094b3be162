"""
Core Configuration Module
Uses pydantic-settings for environment variable and YAML file management.
"""
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from input_node.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INPUT_NODE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    project_name: str = "input-node"
    environment: str = Field(default="development", description="development | staging | production")
    debug: bool = Field(default=False, description="Enable debug logging")

    # Node identity
    area: str = Field(..., min_length=1, description="Execution area label")
    flow_name: str = Field(..., min_length=1, description="Flow name label")

    # Initial destination
    target_ip: str = Field(..., description="Initial target IP")
    target_port: int = Field(..., ge=0, le=65535, description="Initial target port")

    # Local sockets
    bind_host: str = Field(default="0.0.0.0", description="Local address all sockets bind to")
    outbound_port_data: int = Field(..., ge=0, le=65535, description="Local port for telemetry")
    outbound_port_acks: int = Field(default=0, ge=0, le=65535, description="Local port for ACKs and ping replies")
    inbound_port: int = Field(..., ge=0, le=65535, description="Local port for commands")

    # Behaviour
    interval: int = Field(default=1000, gt=0, description="Telemetry interval in milliseconds")
    command_buffer_size: int = Field(default=1024, gt=0, description="Max bytes read per command datagram")
    abort_on_malformed_command: bool = Field(
        default=True,
        description="Abort the node on undecodable commands instead of dropping them",
    )

    # Sentry (Error Tracking)
    sentry_dsn: str = Field(default="", description="Sentry DSN for error tracking")

    # Prometheus
    metrics_enabled: bool = Field(default=False, description="Expose Prometheus metrics over HTTP")
    metrics_port: int = Field(default=9464, ge=1, le=65535, description="Prometheus exporter port")

    @property
    def interval_seconds(self) -> float:
        return self.interval / 1000


def load_settings(config_file: str | Path | None = None, **overrides: Any) -> Settings:
    """
    Build settings from an optional YAML file plus explicit overrides.

    Overrides set to None are ignored so unset CLI flags never mask file values.
    """
    values: dict[str, Any] = {}

    if config_file is not None:
        path = Path(config_file)
        if not path.is_file():
            raise ConfigurationError(
                f"Couldn't load config: {path} does not exist",
                details={"config_file": str(path)},
            )
        # The settings source merges the document as a mapping; check its shape first
        try:
            document = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, ValueError, OSError) as e:
            raise ConfigurationError(
                f"Couldn't load config: {path} is not valid YAML",
                details={"config_file": str(path), "error": str(e)},
            ) from e
        if document is not None and not isinstance(document, dict):
            raise ConfigurationError(
                f"Couldn't load config: {path} must contain a mapping",
                details={"config_file": str(path), "error": f"got {type(document).__name__}"},
            )
        values.update(YamlConfigSettingsSource(Settings, yaml_file=path)())

    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {len(e.errors())} error(s)",
            details={
                "validation_errors": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in e.errors()
                ]
            },
        ) from e
