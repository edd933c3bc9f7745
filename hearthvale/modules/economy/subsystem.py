"""
Economy subsystem: the player's gold wallet.

Publishes
---------
- `Economy.GoldGained` (amount, new_total)
- `Economy.GoldSpent` (amount, new_total)

Listens
-------
- `Farming.CropHarvested` (crop, quantity, value): credits `value`

Config
------
- `economy.initial_gold` (int, default 100)
- `economy.history_limit` (int, default 100): transactions kept in memory
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Deque, List, Optional

from hearthvale.core.event.channels import EconomyEvents, FarmingEvents
from hearthvale.core.lifecycle.base import BaseSubsystem, resolve_debug_mode

if TYPE_CHECKING:
    from hearthvale.core.config.manager import ConfigManager
    from hearthvale.core.event.bus import EventBus


@dataclass(frozen=True)
class Transaction:
    amount: int
    balance: int
    source: str

    @property
    def is_income(self) -> bool:
        return self.amount > 0


class EconomySubsystem(BaseSubsystem):
    """Gold wallet that also turns harvests into income."""

    PRIORITY = 0

    def __init__(
        self,
        event_bus: Optional["EventBus"] = None,
        config: Optional["ConfigManager"] = None,
        *,
        debug_mode: Optional[bool] = None,
    ) -> None:
        super().__init__(
            event_bus, debug_mode=resolve_debug_mode(config, debug_mode), name="Economy"
        )
        self._config = config
        self._gold = 0
        self._history: Deque[Transaction] = deque(maxlen=100)

    # ------------------------------------------------------------------ #
    # Hooks
    # ------------------------------------------------------------------ #

    def on_initialize(self) -> None:
        initial_gold = 100
        history_limit = 100
        if self._config is not None:
            initial_gold = self._config.get_int("economy.initial_gold", initial_gold)
            history_limit = self._config.get_int("economy.history_limit", history_limit)
        if initial_gold < 0:
            raise ValueError(f"economy.initial_gold must be non-negative, got {initial_gold}")

        self._gold = initial_gold
        self._history = deque(maxlen=max(1, history_limit))
        self.subscribe(FarmingEvents.CROP_HARVESTED, self._on_crop_harvested)
        self.logger.debug("Economy ready", extra={"gold": self._gold})

    def on_start(self) -> None:
        self.logger.info("Economy started", extra={"gold": self._gold})

    def on_update(self, delta_time: float) -> None:
        pass

    def on_reset(self) -> None:
        self._history.clear()

    # ------------------------------------------------------------------ #
    # Wallet
    # ------------------------------------------------------------------ #

    @property
    def gold(self) -> int:
        return self._gold

    @property
    def transactions(self) -> List[Transaction]:
        return list(self._history)

    def add_gold(self, amount: int, source: str = "unknown") -> int:
        """Credit `amount`; non-positive amounts are rejected. Returns the balance."""
        if amount <= 0:
            self.logger.warning("Ignoring non-positive gold credit", extra={"amount": amount})
            return self._gold

        self._gold += amount
        self._history.append(Transaction(amount, self._gold, source))
        self.publish(EconomyEvents.GOLD_GAINED, amount, self._gold)
        return self._gold

    def spend_gold(self, amount: int, source: str = "unknown") -> bool:
        """Debit `amount` if affordable."""
        if amount <= 0:
            self.logger.warning("Ignoring non-positive gold debit", extra={"amount": amount})
            return False
        if amount > self._gold:
            self.logger.info(
                "Insufficient gold",
                extra={"amount": amount, "gold": self._gold, "source": source},
            )
            return False

        self._gold -= amount
        self._history.append(Transaction(-amount, self._gold, source))
        self.publish(EconomyEvents.GOLD_SPENT, amount, self._gold)
        return True

    def _on_crop_harvested(self, crop: str, quantity: int, value: int) -> None:
        self.logger.debug(
            "Harvest sold",
            extra={"crop": crop, "quantity": quantity, "value": value},
        )
        self.add_gold(value, source=f"harvest:{crop}")
