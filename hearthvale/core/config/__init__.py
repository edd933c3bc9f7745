"""
Configuration package for Hearthvale.

- `Config`: static, environment-driven process settings
- `ConfigManager` (in `hearthvale.core.config.manager`): layered YAML
  gameplay tunables with runtime overrides
"""

from hearthvale.core.config.config import Config, Environment
from hearthvale.core.config.errors import (
    ConfigError,
    ConfigInitializationError,
    ConfigWriteError,
)

__all__ = [
    "Config",
    "Environment",
    "ConfigError",
    "ConfigInitializationError",
    "ConfigWriteError",
]
