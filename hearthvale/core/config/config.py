"""
Static configuration for Hearthvale.

Purpose
-------
Provide process-level settings loaded once from environment variables (with
`.env` support) and validated with bounds checking. Gameplay tunables do not
live here; they come from YAML through `ConfigManager`.

Responsibilities
----------------
- Load settings from the environment with documented defaults
- Parse ints, floats and booleans safely, falling back with a warning
- Track which values came from the environment versus defaults
- Expose environment checks and a non-sensitive summary

Architecture Notes
------------------
- Class attributes + classmethods, no instantiation
- `Config.load()` runs on import; `Config.validate()` can be called again at
  startup to re-read and sanity-check values
- Paths are relative to the project root so a checkout runs as-is

Environment Variables
---------------------
- ENVIRONMENT: development | testing | staging | production (default: development)
- DEBUG: debug flag (default: False)
- LOG_LEVEL: logging level (default: INFO)
- LOG_JSON: force JSON console logs (default: on in production only)
- LOG_COLORS: colored console logs on a TTY (default: True)
- LOG_TO_FILE: also write a rotating JSON log file (default: False)
- LOG_QUEUE_SIZE: bounded log queue capacity (default: 10000)
- LOG_BACKUP_COUNT: rotated log files kept (default: 2)
- SLOW_HOOK_WARNING_MS: lifecycle hooks slower than this warn (default: 50.0)
- HEARTHVALE_CONFIG_DIR: directory holding YAML defaults (default: <root>/config)
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("moon") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logging is not configured yet at this point.
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


class _ConfigLoadMetrics:
    """Tracks which values came from the environment and any parse errors."""

    def __init__(self) -> None:
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, default: Any) -> None:
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str) -> None:
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
            "last_reload": self.last_reload,
        }


class Config:
    """
    Centralized static configuration for Hearthvale.

    Usage
    -----
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    >>> logger.info("Config loaded", extra=Config.get_config_summary())
    """

    _metrics: Optional[_ConfigLoadMetrics] = None
    _validated: bool = False

    # =========================================================================
    # Environment
    # =========================================================================

    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True
    LOG_TO_FILE: bool = False
    LOG_QUEUE_SIZE: int = 10_000
    LOG_BACKUP_COUNT: int = 2
    SLOW_HOOK_WARNING_MS: float = 50.0

    # =========================================================================
    # Directories
    # =========================================================================

    PROJECT_ROOT = Path(__file__).resolve().parents[3]
    LOGS_DIR = PROJECT_ROOT / "logs"
    CONFIG_DIR = PROJECT_ROOT / "config"

    # =========================================================================
    # Game Metadata
    # =========================================================================

    GAME_NAME: str = "Hearthvale"
    GAME_VERSION: str = "0.1.0"

    # =========================================================================
    # Safe parsers
    # =========================================================================

    @classmethod
    def _init_metrics(cls) -> None:
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _record(cls, key: str, from_env: bool, default: Any) -> None:
        cls._init_metrics()
        if cls._metrics:
            cls._metrics.record_env_load(key, from_env, default)

    @classmethod
    def _reject(cls, key: str, error: str) -> None:
        logging.warning(error)
        cls._init_metrics()
        if cls._metrics:
            cls._metrics.record_validation_error(key, error)

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        value = os.getenv(key, default)
        cls._record(key, key in os.environ, default)
        return value

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Safely parse integer from environment with validation.

        Example
        -------
        >>> Config._safe_int("LOG_BACKUP_COUNT", 2, min_val=0, max_val=30)
        2
        """
        raw_value = os.getenv(key)
        if raw_value is None:
            cls._record(key, False, default)
            return default

        try:
            value = int(raw_value)
        except ValueError:
            cls._reject(key, f"{key}='{raw_value}' is not a valid integer, using default {default}")
            return default

        if min_val is not None and value < min_val:
            cls._reject(key, f"{key}={value} is below minimum {min_val}, using default {default}")
            return default
        if max_val is not None and value > max_val:
            cls._reject(key, f"{key}={value} exceeds maximum {max_val}, using default {default}")
            return default

        cls._record(key, True, default)
        return value

    @classmethod
    def _safe_float(
        cls,
        key: str,
        default: float,
        min_val: Optional[float] = None,
        max_val: Optional[float] = None,
    ) -> float:
        raw_value = os.getenv(key)
        if raw_value is None:
            cls._record(key, False, default)
            return default

        try:
            value = float(raw_value)
        except ValueError:
            cls._reject(key, f"{key}='{raw_value}' is not a valid number, using default {default}")
            return default

        if (min_val is not None and value < min_val) or (
            max_val is not None and value > max_val
        ):
            cls._reject(
                key,
                f"{key}={value} is outside [{min_val}, {max_val}], using default {default}",
            )
            return default

        cls._record(key, True, default)
        return value

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).
        """
        raw_value = os.getenv(key)
        if raw_value is None:
            cls._record(key, False, default)
            return default

        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            cls._reject(key, f"{key}='{raw_value}' is not a valid boolean, using default {default}")
            return default

        cls._record(key, True, default)
        return value

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """Load all configuration from environment variables."""
        cls._init_metrics()

        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("ENVIRONMENT", "development")
        ).value
        cls.DEBUG = bool(cls._safe_bool("DEBUG", False))
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        cls.LOG_JSON = cls._safe_bool("LOG_JSON", None)
        cls.LOG_COLORS = bool(cls._safe_bool("LOG_COLORS", True))
        cls.LOG_TO_FILE = bool(cls._safe_bool("LOG_TO_FILE", False))
        cls.LOG_QUEUE_SIZE = cls._safe_int("LOG_QUEUE_SIZE", 10_000, min_val=100, max_val=1_000_000)
        cls.LOG_BACKUP_COUNT = cls._safe_int("LOG_BACKUP_COUNT", 2, min_val=0, max_val=30)
        cls.SLOW_HOOK_WARNING_MS = cls._safe_float(
            "SLOW_HOOK_WARNING_MS", 50.0, min_val=0.0, max_val=60_000.0
        )

        config_dir = os.getenv("HEARTHVALE_CONFIG_DIR")
        if config_dir:
            cls.CONFIG_DIR = Path(config_dir).expanduser().resolve()
        logs_dir = os.getenv("HEARTHVALE_LOGS_DIR")
        if logs_dir:
            cls.LOGS_DIR = Path(logs_dir).expanduser().resolve()

        if cls._metrics:
            cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Re-load and sanity-check configuration at startup.

        Raises
        ------
        ValueError:
            If the environment is production and a critical check fails.
        """
        if cls._validated:
            return

        logger = logging.getLogger(__name__)
        cls.load()

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if cls.LOG_LEVEL.upper() not in valid_log_levels:
            logger.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
            cls.LOG_LEVEL = "INFO"

        if not cls.CONFIG_DIR.exists():
            logger.warning(
                "Config directory not found; gameplay tunables will use built-in defaults",
                extra={"config_dir": str(cls.CONFIG_DIR)},
            )

        if cls.is_production() and cls.DEBUG:
            logger.warning("DEBUG mode enabled in production!")

        cls._validated = True

        if cls._metrics:
            logger.info("Configuration loaded", extra=cls._metrics.get_summary())
            if cls._metrics.validation_errors:
                logger.warning(
                    "Configuration warnings",
                    extra={"validation_errors": dict(cls._metrics.validation_errors)},
                )

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT.lower() == Environment.PRODUCTION.value

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT.lower() == Environment.DEVELOPMENT.value

    @classmethod
    def is_testing(cls) -> bool:
        return cls.ENVIRONMENT.lower() == Environment.TESTING.value

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Optional[_ConfigLoadMetrics]:
        return cls._metrics

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """Get non-sensitive configuration summary for debugging."""
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "log_json": cls.LOG_JSON,
            "log_to_file": cls.LOG_TO_FILE,
            "log_queue_size": cls.LOG_QUEUE_SIZE,
            "slow_hook_warning_ms": cls.SLOW_HOOK_WARNING_MS,
            "config_dir": str(cls.CONFIG_DIR),
            "game_version": cls.GAME_VERSION,
        }


Config.load()
