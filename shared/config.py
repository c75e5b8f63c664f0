from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from shared.log import get_logger

logger = get_logger(__name__)

# Hub defaults for client peers
DEFAULT_URL = "ws://localhost:8080"
DEFAULT_MAX_MESSAGE_SIZE = 2048
DEFAULT_PING_INTERVAL = 10.0
DEFAULT_PING_TIMEOUT = 20.0

AUTH_MODES = ("plain", "digest")

_ENV_OVERRIDES = {
    "WSCHAT_URL": "url",
    "WSCHAT_SECRET": "secret",
    "WSCHAT_LOG_LEVEL": "log_level",
}


class ConfigError(Exception):
    """Raised when a configuration file or value is invalid."""
    pass


@dataclass(frozen=True)
class ClientConfig:
    url: str = DEFAULT_URL
    secret: str = ""
    identifier_encoding: str = "numeric"   # numeric | codepoint
    auth_mode: str = "plain"               # plain | digest
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE
    ping_interval: float = DEFAULT_PING_INTERVAL
    ping_timeout: float = DEFAULT_PING_TIMEOUT
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.auth_mode not in AUTH_MODES:
            raise ConfigError(f"auth_mode must be one of {AUTH_MODES}, got {self.auth_mode!r}")
        if self.max_message_size <= 0:
            raise ConfigError("max_message_size must be positive")
        if not self.url.startswith(("ws://", "wss://")):
            raise ConfigError(f"url must be a ws:// or wss:// URL, got {self.url!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)


def default_config_path() -> Path:
    return Path(os.getenv("WSCHAT_CONFIG", Path.home() / ".wschat" / "config.yaml"))


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at top level")
    # Allow the settings to live under a `client:` section
    if isinstance(data.get("client"), dict):
        data = data["client"]
    return data


def load_config(path: Optional[Path] = None, **overrides: Any) -> ClientConfig:
    """
    Load client configuration.

    Precedence, lowest first: dataclass defaults, YAML file, WSCHAT_*
    environment variables, keyword overrides (CLI options). Overrides
    whose value is None are ignored.
    """
    data: Dict[str, Any] = {}
    config_path = Path(path) if path is not None else default_config_path()
    if config_path.exists():
        data.update(_read_yaml(config_path))
        logger.debug("Loaded config from %s", config_path)
    elif path is not None:
        raise ConfigError(f"Config file not found: {config_path}")

    for env_name, key in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            data[key] = value

    config = ClientConfig.from_dict(data)
    explicit = {k: v for k, v in overrides.items() if v is not None}
    if explicit:
        config = replace(config, **explicit)
    return config
