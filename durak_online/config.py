"""
Server configuration.

Values come from, lowest to highest priority: the defaults below, the
process environment, and explicit overrides (usually command-line flags).
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

DEFAULT_CONFIG: Dict[str, Any] = {
    "host": "localhost",
    "port": 3000,
    "log_level": "INFO",
    "seed": None,
    "hand_size": 6,
    "max_table_slots": 6,
}

# Environment variable -> config key; later entries win
ENV_VARS = (
    ("PORT", "port"),
    ("DURAK_HOST", "host"),
    ("DURAK_PORT", "port"),
    ("DURAK_LOG_LEVEL", "log_level"),
    ("DURAK_SEED", "seed"),
)


class ConfigError(ValueError):
    """Raised for configuration values that cannot be used."""


@dataclass(frozen=True)
class ServerConfig:
    """Settings for one server process."""

    host: str = DEFAULT_CONFIG["host"]
    port: int = DEFAULT_CONFIG["port"]
    log_level: str = DEFAULT_CONFIG["log_level"]
    seed: Optional[int] = DEFAULT_CONFIG["seed"]
    hand_size: int = DEFAULT_CONFIG["hand_size"]
    max_table_slots: int = DEFAULT_CONFIG["max_table_slots"]

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    def engine_config(self) -> Dict[str, Any]:
        """Configuration handed to every new game engine."""
        return {
            "hand_size": self.hand_size,
            "max_table_slots": self.max_table_slots,
            "seed": self.seed,
        }


def _to_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServerConfig:
    """
    Build a validated ServerConfig.

    Args:
        overrides: Values that win over everything else; None entries are ignored
        environ: Environment to read (defaults to os.environ)

    Returns:
        The merged configuration

    Raises:
        ConfigError: if a value has the wrong type or is out of range
    """
    environ = os.environ if environ is None else environ

    config = dict(DEFAULT_CONFIG)
    for env_var, key in ENV_VARS:
        value = environ.get(env_var)
        if value not in (None, ""):
            config[key] = value

    if overrides:
        config.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(config) - set(DEFAULT_CONFIG)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    port = _to_int("port", config["port"])
    if not 0 <= port <= 65535:
        raise ConfigError(f"port must be between 0 and 65535, got {port}")

    log_level = str(config["log_level"]).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"Unknown log level {config['log_level']!r}")

    seed = config["seed"]
    if seed is not None:
        seed = _to_int("seed", seed)

    hand_size = _to_int("hand_size", config["hand_size"])
    max_table_slots = _to_int("max_table_slots", config["max_table_slots"])
    if hand_size < 1 or max_table_slots < 1:
        raise ConfigError("hand_size and max_table_slots must be positive")

    return ServerConfig(
        host=str(config["host"]),
        port=port,
        log_level=log_level,
        seed=seed,
        hand_size=hand_size,
        max_table_slots=max_table_slots,
    )
