"""Configuration management using Pydantic.

Provides:
- Typed configuration model with validation
- YAML file loading with defaults
- Environment variable overrides for the SSH target
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shipitctl.core.exceptions import ConfigurationError


# Default paths, relative to the working directory
DEFAULT_CONFIG_PATH = Path("shipitctl.yaml")
DEFAULT_SERVERS_FILE = Path("servers.list")
DEFAULT_AUDIT_LOG = Path("~/.local/state/shipitctl/audit.log")

DEFAULT_RELAY_HOST = "relay-cn.aosc.io"
DEFAULT_SSH_USER = "root"
DEFAULT_DEPLOY_DIR = "/buildroots/shipit"
DEFAULT_SERVICE_NAME = "shipit-worker.service"
DEFAULT_PUBKEYS_URL = (
    "https://raw.githubusercontent.com/AOSC-Dev/dev-pubkeys/master/install.sh"
)


class FleetConfig(BaseModel):
    """Root configuration model for the fleet.

    Loaded from ``shipitctl.yaml`` in the working directory when present.
    Every field has a default, so the file is optional.
    """

    # SSH target
    relay_host: str = DEFAULT_RELAY_HOST
    ssh_user: str = DEFAULT_SSH_USER
    ssh_binary: str = "ssh"
    ssh_timeout: Optional[float] = None  # seconds, None waits forever

    # Inputs
    servers_file: Path = DEFAULT_SERVERS_FILE

    # Remote layout
    deploy_dir: str = DEFAULT_DEPLOY_DIR
    service_name: str = DEFAULT_SERVICE_NAME
    pubkeys_url: str = DEFAULT_PUBKEYS_URL

    # Audit trail
    audit_enabled: bool = True
    audit_log: Path = DEFAULT_AUDIT_LOG

    @field_validator("relay_host", "ssh_user", "ssh_binary", "service_name")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("deploy_dir")
    @classmethod
    def validate_deploy_dir(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("deploy_dir must be an absolute path")
        return v

    @field_validator("pubkeys_url")
    @classmethod
    def validate_pubkeys_url(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError("pubkeys_url must be an http(s) URL")
        return v

    @field_validator("ssh_timeout")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("ssh_timeout must be positive")
        return v

    @property
    def ssh_target(self) -> str:
        """``user@relay`` destination for every SSH call."""
        return f"{self.ssh_user}@{self.relay_host}"

    @classmethod
    def load(cls, path: Path) -> "FleetConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Loaded configuration

        Raises:
            ConfigurationError: If file not found or invalid
        """
        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                hint="Check the --config path, or omit it to use the defaults",
            )

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {path}",
                details=[str(e)],
            ) from e
        except PermissionError:
            raise ConfigurationError(
                f"Cannot read configuration file: {path}",
                hint="Check file permissions",
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {path}",
            )

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {path}",
                details=[
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ],
            ) from e

    @classmethod
    def load_or_default(cls, path: Optional[Path] = None) -> "FleetConfig":
        """Load configuration, falling back to defaults if file doesn't exist."""
        if path is None:
            path = DEFAULT_CONFIG_PATH

        if path.exists():
            return cls.load(path)
        return cls()

    def with_overrides(self, overrides: "EnvOverrides") -> "FleetConfig":
        """Return a copy with environment overrides applied."""
        updates = overrides.model_dump(exclude_none=True)
        if not updates:
            return self
        try:
            return FleetConfig(**{**self.model_dump(), **updates})
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid value in SHIPITCTL_* environment variables",
                details=[str(err["msg"]) for err in e.errors()],
            ) from e

    def to_yaml(self) -> str:
        """Convert configuration to YAML string."""
        data = self.model_dump(mode="json", exclude_none=True)
        return yaml.dump(data, default_flow_style=False, sort_keys=False)


class EnvOverrides(BaseSettings):
    """SSH target overrides from ``SHIPITCTL_*`` environment variables.

    Lets a test run point the fleet at a mock relay without touching
    the config file.
    """

    model_config = SettingsConfigDict(env_prefix="SHIPITCTL_", extra="ignore")

    relay_host: Optional[str] = None
    ssh_user: Optional[str] = None
    ssh_binary: Optional[str] = None


def load_config(path: Optional[Path] = None) -> FleetConfig:
    """Load configuration and apply environment overrides.

    An explicitly given path must exist; without one, ``shipitctl.yaml``
    in the working directory is used when present.
    """
    if path is not None:
        config = FleetConfig.load(path)
    else:
        config = FleetConfig.load_or_default()
    return config.with_overrides(EnvOverrides())
