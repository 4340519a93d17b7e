"""Configuration model, validation and YAML loading.

The raw configuration is a plain mapping, e.g.::

    ecs_cluster:
      cluster: my-cluster
      service_names: ["web-.*", "worker"]
      region: eu-west-1
      name_prefix: app
      poll_interval_ms: 5000
      address_mode: ipv4

``validate_config`` distinguishes two failure classes: a *missing*
required key raises :class:`ConfigError` (caller bug, fatal), while a
key that is present but ill-formed raises :class:`ConfigValidationError`
which a poll converts into a soft failure.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ConfigError, ConfigValidationError
from .models import AddressMode

DEFAULT_NAME_PREFIX = "app"
DEFAULT_POLL_INTERVAL_MS = 5_000
DEFAULT_REQUEST_TIMEOUT_S = 10.0

# Current key → accepted legacy spelling
_LEGACY_KEYS = {
    "service_names": "service_name",
    "name_prefix": "app_prefix",
    "poll_interval_ms": "polling_interval",
}


class DiscoveryConfig(BaseModel):
    """Validated, immutable discovery configuration."""

    model_config = ConfigDict(frozen=True)

    cluster: str = Field(..., description="Name or ARN of the ECS cluster to look in.")
    service_names: tuple[str, ...] = Field(..., description="Service names or regex patterns.")
    region: str = Field(..., description="AWS region of the ECS endpoint.")
    name_prefix: str = Field(default=DEFAULT_NAME_PREFIX, description="Prepended to member addresses.")
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0)
    address_mode: AddressMode = Field(default=AddressMode.IPV4)
    request_timeout_s: float = Field(default=DEFAULT_REQUEST_TIMEOUT_S, gt=0)

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0


def _lookup(config: Mapping[str, Any], key: str) -> tuple[bool, Any]:
    if key in config:
        return True, config[key]
    legacy = _LEGACY_KEYS.get(key)
    if legacy is not None and legacy in config:
        return True, config[legacy]
    return False, None


def _is_config_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _wrap(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def require_config_keys(config: Mapping[str, Any]) -> None:
    """Raise :class:`ConfigError` if a structurally required key is absent."""
    if not isinstance(config, Mapping):
        raise ConfigError("config")
    for key in ("cluster", "region", "service_names"):
        present, _ = _lookup(config, key)
        if not present:
            raise ConfigError(key)


def validate_config(config: Mapping[str, Any]) -> DiscoveryConfig:
    """Check *config* and return it as a :class:`DiscoveryConfig`.

    Checks run in a fixed order and the first violation wins:
    ``cluster``, ``region``, ``service_names``, ``name_prefix``,
    ``poll_interval_ms``, ``address_mode``, ``request_timeout_s``.

    Raises:
        ConfigError: A required key is missing entirely.
        ConfigValidationError: A key is present but ill-formed.
    """
    require_config_keys(config)

    _, cluster = _lookup(config, "cluster")
    if not _is_config_string(cluster):
        raise ConfigValidationError("cluster", "must be a non-empty string")

    _, region = _lookup(config, "region")
    if not _is_config_string(region):
        raise ConfigValidationError("region", "must be a non-empty string")

    _, raw_names = _lookup(config, "service_names")
    service_names = _wrap(raw_names)
    if not service_names or not all(_is_config_string(n) for n in service_names):
        raise ConfigValidationError(
            "service_names", "must be a non-empty list of non-empty strings"
        )

    present, name_prefix = _lookup(config, "name_prefix")
    if not present or name_prefix is None:
        name_prefix = DEFAULT_NAME_PREFIX
    elif not isinstance(name_prefix, str):
        raise ConfigValidationError("name_prefix", "must be a string")

    present, poll_interval_ms = _lookup(config, "poll_interval_ms")
    if not present:
        poll_interval_ms = DEFAULT_POLL_INTERVAL_MS
    elif (
        isinstance(poll_interval_ms, bool)
        or not isinstance(poll_interval_ms, int)
        or poll_interval_ms <= 0
    ):
        raise ConfigValidationError("poll_interval_ms", "must be a positive integer")

    raw_mode = config.get("address_mode", AddressMode.IPV4.value)
    try:
        address_mode = AddressMode(raw_mode)
    except ValueError:
        raise ConfigValidationError(
            "address_mode", f"must be one of {[m.value for m in AddressMode]}"
        ) from None

    timeout = config.get("request_timeout_s", DEFAULT_REQUEST_TIMEOUT_S)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigValidationError("request_timeout_s", "must be a positive number")

    return DiscoveryConfig(
        cluster=cluster,
        service_names=tuple(service_names),
        region=region,
        name_prefix=name_prefix,
        poll_interval_ms=poll_interval_ms,
        address_mode=address_mode,
        request_timeout_s=float(timeout),
    )


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a raw discovery configuration mapping from a YAML file.

    The mapping under the top-level ``ecs_cluster`` key is returned when
    present, otherwise the whole document.
    """
    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at: {config_path}")

    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ConfigError("ecs_cluster")
    section = raw_config.get("ecs_cluster", raw_config)
    if not isinstance(section, dict):
        raise ConfigError("ecs_cluster")
    return dict(section)
