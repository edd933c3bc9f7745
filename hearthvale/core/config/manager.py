"""
ConfigManager: layered gameplay configuration for Hearthvale.

Purpose
-------
Serve gameplay and engine tunables (frame step, growth intervals, crop
catalogue, ...) from YAML files with in-memory overrides layered on top,
through a dot-notation read API.

Responsibilities
----------------
- Deep-merge every `*.yaml` / `*.yml` under the config directory
- Layer built-in infra defaults < YAML < runtime overrides
- Typed getters (`get_int`, `get_float`, `get_bool`) with fallbacks
- Type-checked `set()` for runtime overrides
- `reload()` that re-reads YAML, keeps overrides and announces the reload
  on the event bus as `Data.ConfigReloaded`
- Lightweight read/write metrics

Design Decisions
----------------
- Instance-based: the `GameContext` owns one manager and injects it. Tests
  build their own against a temporary directory.
- Missing directories and broken files degrade to defaults with a warning
  unless `strict=True`, in which case `ConfigInitializationError` is raised.
- A value of `None` in YAML counts as "absent" for dot-notation reads.

Dependencies
------------
- PyYAML (`yaml.safe_load`)
- `hearthvale.core.event.channels` for the reload channel name
"""

from __future__ import annotations

import copy
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, MutableMapping, Optional

import yaml

from hearthvale.core.config.config import Config
from hearthvale.core.config.errors import ConfigInitializationError, ConfigWriteError
from hearthvale.core.event.channels import DataEvents
from hearthvale.core.logging.logger import get_logger

if TYPE_CHECKING:
    from hearthvale.core.event.bus import EventBus

logger = get_logger(__name__)

_MISSING = object()

# Non-gameplay fallbacks; YAML and overrides win over these.
BUILTIN_DEFAULTS: Dict[str, Any] = {
    "core": {
        "event": {"metrics_enabled": True},
        "lifecycle": {"raise_on_init_failure": True, "debug_mode": False},
        "loop": {"fixed_delta_time": 0.02, "max_frame_delta": 0.25},
    },
}


@dataclass
class ConfigMetrics:
    """Counters for ConfigManager observability."""

    gets: int = 0
    sets: int = 0
    hits: int = 0
    misses: int = 0
    reloads: int = 0
    errors: int = 0
    files_loaded: int = 0
    total_get_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["hit_rate"] = round(self.hits / self.gets * 100, 2) if self.gets else 0.0
        return data


class ConfigManager:
    """
    Layered configuration with dot-notation access.

    Example
    -------
    >>> config = ConfigManager(Path("config"))
    >>> config.initialize()
    >>> config.get_float("core.loop.fixed_delta_time", 0.02)
    0.02
    >>> config.set("farming.growth_update_interval", 0.5)
    """

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        *,
        defaults: Optional[Mapping[str, Any]] = None,
        event_bus: Optional["EventBus"] = None,
        strict: bool = False,
    ) -> None:
        self._config_dir = Path(config_dir) if config_dir is not None else Config.CONFIG_DIR
        self._builtin: Dict[str, Any] = copy.deepcopy(BUILTIN_DEFAULTS)
        if defaults:
            self._deep_merge_dict(self._builtin, copy.deepcopy(dict(defaults)))
        self._event_bus = event_bus
        self._strict = strict

        self._defaults: Dict[str, Any] = {}
        self._overrides: Dict[str, Any] = {}
        self._cache: Dict[str, Any] = {}
        self._initialized = False
        self._metrics = ConfigMetrics()

    # =========================================================================
    # YAML LOADING & DEFAULTS
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: Mapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = value

    def _fail_or_warn(self, message: str, extra: Dict[str, Any]) -> None:
        self._metrics.errors += 1
        if self._strict:
            logger.error(message, extra=extra)
            raise ConfigInitializationError(f"{message}: {self._config_dir}")
        logger.warning(message, extra=extra)

    def _load_yaml_configs(self) -> Dict[str, Any]:
        """
        Load all YAML files under the config directory into a fresh mapping.

        Files are merged in sorted path order so later files win.
        """
        merged: Dict[str, Any] = copy.deepcopy(self._builtin)
        config_dir = self._config_dir

        if not config_dir.exists():
            self._fail_or_warn(
                "Config directory not found; using built-in defaults only",
                {"config_dir": str(config_dir)},
            )
            return merged

        yaml_files = sorted(
            list(config_dir.rglob("*.yaml")) + list(config_dir.rglob("*.yml"))
        )
        if not yaml_files:
            logger.info(
                "No YAML config files discovered; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return merged

        loaded_count = 0
        for yaml_file in yaml_files:
            relative = str(yaml_file.relative_to(config_dir))
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except (OSError, yaml.YAMLError) as exc:
                self._fail_or_warn(
                    "Failed to load YAML config",
                    {
                        "file": relative,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                )
                continue

            if isinstance(data, dict):
                self._deep_merge_dict(merged, data)
                loaded_count += 1
                logger.debug("Loaded YAML config", extra={"file": relative})
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={"file": relative, "root_type": type(data).__name__},
                )

        self._metrics.files_loaded = loaded_count
        logger.info(
            "YAML configs loaded",
            extra={"yaml_file_count": loaded_count, "config_dir": str(config_dir)},
        )
        return merged

    def _rebuild_cache(self) -> None:
        cache = copy.deepcopy(self._defaults)
        self._deep_merge_dict(cache, copy.deepcopy(self._overrides))
        self._cache = cache

    # =========================================================================
    # INITIALIZATION / RELOAD
    # =========================================================================

    def initialize(self) -> None:
        """Load YAML defaults (idempotent)."""
        if self._initialized:
            return

        start = time.perf_counter()
        self._defaults = self._load_yaml_configs()
        self._rebuild_cache()
        self._initialized = True

        logger.info(
            "ConfigManager initialized",
            extra={
                "top_level_keys": len(self._cache),
                "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )

    def reload(self) -> List[str]:
        """
        Re-read YAML from disk, keeping runtime overrides.

        Returns the top-level keys after the reload, which are also published
        on the attached bus as the single argument of `Data.ConfigReloaded`.
        """
        self._defaults = self._load_yaml_configs()
        self._rebuild_cache()
        self._initialized = True
        self._metrics.reloads += 1

        keys = self.get_all_keys()
        logger.info(
            "ConfigManager reloaded",
            extra={"top_level_keys": keys, "reload_count": self._metrics.reloads},
        )
        if self._event_bus is not None:
            self._event_bus.publish(DataEvents.CONFIG_RELOADED, keys)
        return keys

    def attach_event_bus(self, event_bus: Optional["EventBus"]) -> None:
        self._event_bus = event_bus

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    # =========================================================================
    # READ API
    # =========================================================================

    @staticmethod
    def _traverse(root: Mapping[str, Any], key: str) -> Any:
        value: Any = root
        for part in key.split("."):
            if not isinstance(value, Mapping):
                return _MISSING
            value = value.get(part, _MISSING)
            if value is _MISSING or value is None:
                return _MISSING
        return value

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            logger.warning(
                "ConfigManager accessed before explicit initialization; loading now"
            )
            self.initialize()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Examples
        --------
        >>> config.get("farming.crops.wheat.sell_price")
        12
        >>> config.get("farming.missing", 0)
        0
        """
        start = time.perf_counter()
        self._ensure_initialized()
        self._metrics.gets += 1
        try:
            value = self._traverse(self._cache, key)
            if value is _MISSING:
                self._metrics.misses += 1
                return default
            self._metrics.hits += 1
            return value
        finally:
            self._metrics.total_get_time_ms += (time.perf_counter() - start) * 1000

    def _get_typed(self, key: str, default: Any, kind: type, convert: Any) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            return default
        if isinstance(value, kind) and not (kind is not bool and isinstance(value, bool)):
            return value
        try:
            return convert(value)
        except (TypeError, ValueError):
            self._metrics.errors += 1
            logger.warning(
                "Config value has wrong type; using default",
                extra={
                    "config_key": key,
                    "value_type": type(value).__name__,
                    "expected": kind.__name__,
                    "default": default,
                },
            )
            return default

    def get_int(self, key: str, default: int = 0) -> int:
        return self._get_typed(key, default, int, _to_int)

    def get_float(self, key: str, default: float = 0.0) -> float:
        return self._get_typed(key, default, float, _to_float)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self._get_typed(key, default, bool, _to_bool)

    def get_all_keys(self) -> List[str]:
        """Return the top-level configuration keys currently in effect."""
        self._ensure_initialized()
        return sorted(self._cache.keys())

    def as_dict(self) -> Dict[str, Any]:
        """Deep copy of the effective configuration."""
        self._ensure_initialized()
        return copy.deepcopy(self._cache)

    # =========================================================================
    # WRITE API
    # =========================================================================

    def set(self, key: str, value: Any) -> None:
        """
        Set a runtime override for `key`.

        Raises
        ------
        ConfigWriteError
            If `key` already resolves to a scalar whose type differs from
            `value` (int is accepted where float is expected), or if the
            path runs through a non-mapping value.
        """
        self._ensure_initialized()
        existing = self._traverse(self._cache, key)
        if existing is not _MISSING and not _compatible(existing, value):
            self._metrics.errors += 1
            logger.error(
                "Rejected config override with mismatched type",
                extra={
                    "config_key": key,
                    "expected": type(existing).__name__,
                    "actual": type(value).__name__,
                },
            )
            raise ConfigWriteError(
                f"Config key '{key}' expects {type(existing).__name__}, "
                f"got {type(value).__name__}"
            )

        parts = key.split(".")
        node: Dict[str, Any] = self._overrides
        for part in parts[:-1]:
            child = node.get(part)
            if child is None:
                child = node[part] = {}
            elif not isinstance(child, dict):
                raise ConfigWriteError(
                    f"Config key '{key}' runs through non-mapping segment '{part}'"
                )
            node = child
        node[parts[-1]] = value

        self._rebuild_cache()
        self._metrics.sets += 1
        logger.info("Config override set", extra={"config_key": key})

    def clear_overrides(self) -> None:
        self._overrides.clear()
        self._rebuild_cache()

    # =========================================================================
    # METRICS
    # =========================================================================

    def get_metrics(self) -> Dict[str, Any]:
        data = self._metrics.to_dict()
        data["initialized"] = self._initialized
        data["override_count"] = len(self._overrides)
        return data

    def reset_metrics(self) -> None:
        self._metrics = ConfigMetrics()


def _compatible(existing: Any, value: Any) -> bool:
    if isinstance(existing, dict):
        return isinstance(value, dict)
    if isinstance(existing, bool) or isinstance(value, bool):
        return isinstance(existing, bool) and isinstance(value, bool)
    if isinstance(existing, float):
        return isinstance(value, (int, float))
    if isinstance(existing, (int, str, list)):
        return isinstance(value, type(existing))
    return True


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not an int config value")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{value} is not integral")
    return int(value)


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("bool is not a float config value")
    return float(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "yes", "1", "on"}:
            return True
        if normalized in {"false", "no", "0", "off"}:
            return False
        raise ValueError(f"'{value}' is not a boolean")
    if isinstance(value, int):
        return bool(value)
    raise TypeError(f"{type(value).__name__} is not a boolean")
