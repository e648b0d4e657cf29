"""portcheck configuration model."""

from __future__ import annotations

import ipaddress
import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from portcheck.errors import ConfigError

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_MAX_CONCURRENCY", "ScanConfig", "load_config"]

DEFAULT_MAX_CONCURRENCY = 100


class ScanConfig(BaseModel):
    """Scan configuration.

    Values can come from a JSON file (see ``load_config``) and are then
    overridden by command line flags.
    """

    # Ceiling on ports probed at the same time, keeps us clear of fd limits
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)

    # Look up the owning process of in-use ports
    resolve_process: bool = False

    # Address the prober binds to ("0.0.0.0" IPv4 wildcard, "::" IPv6 wildcard)
    bind_host: str = "0.0.0.0"

    # Root of the process information pseudo-filesystem
    proc_root: Path = Path("/proc")

    # None = auto (TTY and no NO_COLOR)
    color: bool | None = None

    model_config = {"extra": "ignore"}

    @field_validator("bind_host")
    @classmethod
    def _check_bind_host(cls, value: str) -> str:
        try:
            ipaddress.ip_address(value)
        except ValueError as e:
            raise ValueError(f"bind_host must be an IPv4 or IPv6 address, got '{value}'") from e
        return value


def load_config(config_path: Path) -> ScanConfig:
    """Load configuration from a JSON file.

    Args:
        config_path: Path to the config file

    Returns:
        ScanConfig built from the file contents

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or does not
            match the configuration model
    """
    if not config_path.exists():
        raise ConfigError(str(config_path), "file not found")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(str(config_path), f"invalid JSON: {e}") from e
    except OSError as e:
        raise ConfigError(str(config_path), str(e)) from e

    if not isinstance(data, dict):
        raise ConfigError(str(config_path), "top-level value must be an object")

    try:
        config = ScanConfig(**data)
    except ValidationError as e:
        raise ConfigError(str(config_path), str(e)) from e

    logger.info(f"Loaded config from {config_path}")
    return config
