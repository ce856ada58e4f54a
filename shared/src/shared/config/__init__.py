"""Layered YAML + environment configuration shared by guichet and causerie."""

from shared.config.layered import (
    ENVIRONMENTS,
    LOG_LEVELS,
    LayeredConfig,
    check_log_level,
    read_yaml,
)

__all__ = [
    "ENVIRONMENTS",
    "LOG_LEVELS",
    "LayeredConfig",
    "check_log_level",
    "read_yaml",
]
