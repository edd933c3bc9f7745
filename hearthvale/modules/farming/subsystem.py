"""
Farming subsystem: plots, crop growth and harvests.

Growth is measured in game time accumulated from `on_update`, so it stops
while the subsystem is paused. Growth is re-evaluated every
`farming.growth_update_interval` seconds rather than every frame.

Publishes
---------
- `Farming.CropPlanted` (plot_id, crop)
- `Farming.CropGrown` (plot_id, crop)
- `Farming.CropHarvested` (crop, quantity, value)

Config
------
- `farming.growth_update_interval` (float seconds, default 1.0)
- `farming.max_plots` (int, default 100)
- `farming.crops`: mapping of crop name to
  `{growth_time: float, base_yield: int, sell_price: int}`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from hearthvale.core.event.channels import FarmingEvents
from hearthvale.core.exceptions import ConfigurationError
from hearthvale.core.lifecycle.base import BaseSubsystem, resolve_debug_mode

if TYPE_CHECKING:
    from hearthvale.core.config.manager import ConfigManager
    from hearthvale.core.event.bus import EventBus


@dataclass(frozen=True)
class CropSpec:
    name: str
    growth_time: float
    base_yield: int
    sell_price: int

    @classmethod
    def from_config(cls, name: str, raw: Any) -> "CropSpec":
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"farming.crops.{name}", "crop entry must be a mapping")
        try:
            spec = cls(
                name=name,
                growth_time=float(raw["growth_time"]),
                base_yield=int(raw.get("base_yield", 1)),
                sell_price=int(raw.get("sell_price", 0)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"farming.crops.{name}", f"invalid crop entry: {exc}") from exc
        if spec.growth_time <= 0:
            raise ConfigurationError(f"farming.crops.{name}", "growth_time must be positive")
        return spec


@dataclass
class FarmPlot:
    plot_id: int
    crop: str
    planted_at: float
    growth_progress: float = 0.0
    is_grown: bool = False


@dataclass(frozen=True)
class Harvest:
    crop: str
    quantity: int
    value: int


DEFAULT_CROPS: Dict[str, Dict[str, Any]] = {
    "turnip": {"growth_time": 60.0, "base_yield": 1, "sell_price": 10},
}


class FarmingSubsystem(BaseSubsystem):
    """Plot bookkeeping with interval-based crop growth."""

    PRIORITY = 1

    def __init__(
        self,
        event_bus: Optional["EventBus"] = None,
        config: Optional["ConfigManager"] = None,
        *,
        debug_mode: Optional[bool] = None,
    ) -> None:
        super().__init__(
            event_bus, debug_mode=resolve_debug_mode(config, debug_mode), name="Farming"
        )
        self._config = config
        self._crops: Dict[str, CropSpec] = {}
        self._plots: Dict[int, FarmPlot] = {}
        self._growth_update_interval = 1.0
        self._max_plots = 100
        self._update_timer = 0.0
        self._game_time = 0.0

    # ------------------------------------------------------------------ #
    # Hooks
    # ------------------------------------------------------------------ #

    def on_initialize(self) -> None:
        raw_crops: Any = DEFAULT_CROPS
        if self._config is not None:
            self._growth_update_interval = self._config.get_float(
                "farming.growth_update_interval", 1.0
            )
            self._max_plots = self._config.get_int("farming.max_plots", 100)
            raw_crops = self._config.get("farming.crops", DEFAULT_CROPS)

        if self._growth_update_interval <= 0:
            raise ConfigurationError(
                "farming.growth_update_interval",
                f"must be positive, got {self._growth_update_interval}",
            )
        if not isinstance(raw_crops, Mapping):
            raise ConfigurationError("farming.crops", "must be a mapping of crop name to entry")

        self._crops = {name: CropSpec.from_config(name, raw) for name, raw in raw_crops.items()}
        self.logger.debug(
            "Crop catalogue loaded",
            extra={"crops": sorted(self._crops), "interval": self._growth_update_interval},
        )

    def on_start(self) -> None:
        self._update_timer = 0.0

    def on_update(self, delta_time: float) -> None:
        self._game_time += delta_time
        self._update_timer += delta_time
        if self._update_timer >= self._growth_update_interval:
            self._update_growth()
            self._update_timer = 0.0

    def on_shutdown(self) -> None:
        self._plots.clear()

    def on_reset(self) -> None:
        self._plots.clear()
        self._update_timer = 0.0
        self._game_time = 0.0

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @property
    def crops(self) -> Dict[str, CropSpec]:
        return dict(self._crops)

    @property
    def active_plot_count(self) -> int:
        return len(self._plots)

    @property
    def ready_to_harvest_count(self) -> int:
        return sum(1 for plot in self._plots.values() if plot.is_grown)

    def get_plot(self, plot_id: int) -> Optional[FarmPlot]:
        return self._plots.get(plot_id)

    def can_plant_at(self, plot_id: int) -> bool:
        return plot_id not in self._plots and len(self._plots) < self._max_plots

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    def plant(self, plot_id: int, crop: str) -> bool:
        if not self.is_initialized:
            self.logger.warning("Farming not initialized; cannot plant")
            return False
        if len(self._plots) >= self._max_plots:
            self.logger.warning("Plot limit reached", extra={"max_plots": self._max_plots})
            return False
        if plot_id in self._plots:
            self.logger.warning("Plot already planted", extra={"plot_id": plot_id})
            return False
        if crop not in self._crops:
            self.logger.warning("Unknown crop", extra={"crop": crop})
            return False

        self._plots[plot_id] = FarmPlot(plot_id=plot_id, crop=crop, planted_at=self._game_time)
        self.publish(FarmingEvents.CROP_PLANTED, plot_id, crop)
        return True

    def harvest(self, plot_id: int) -> Optional[Harvest]:
        plot = self._plots.get(plot_id)
        if plot is None:
            self.logger.warning("Nothing planted on plot", extra={"plot_id": plot_id})
            return None
        if not plot.is_grown:
            self.logger.warning(
                "Crop not ready",
                extra={"plot_id": plot_id, "progress": round(plot.growth_progress, 3)},
            )
            return None

        spec = self._crops[plot.crop]
        del self._plots[plot_id]
        harvest = Harvest(
            crop=spec.name,
            quantity=spec.base_yield,
            value=spec.base_yield * spec.sell_price,
        )
        self.publish(FarmingEvents.CROP_HARVESTED, harvest.crop, harvest.quantity, harvest.value)
        return harvest

    def _update_growth(self) -> None:
        for plot in list(self._plots.values()):
            if plot.is_grown:
                continue
            spec = self._crops.get(plot.crop)
            if spec is None:
                continue
            plot.growth_progress = min(1.0, (self._game_time - plot.planted_at) / spec.growth_time)
            if plot.growth_progress >= 1.0:
                plot.is_grown = True
                self.logger.debug("Crop grown", extra={"plot_id": plot.plot_id, "crop": plot.crop})
                self.publish(FarmingEvents.CROP_GROWN, plot.plot_id, plot.crop)
