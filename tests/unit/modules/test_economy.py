"""
Unit tests for EconomySubsystem.

Tests the wallet, its events and harvest income.
"""

import logging

import pytest

from hearthvale.core.event.channels import EconomyEvents, FarmingEvents
from hearthvale.modules.economy import EconomySubsystem


@pytest.fixture
def economy(event_bus, config_manager):
    subsystem = EconomySubsystem(event_bus, config_manager)
    subsystem.initialize()
    subsystem.start()
    return subsystem


@pytest.fixture
def gold_events(event_bus):
    seen = []
    event_bus.register(EconomyEvents.GOLD_GAINED, lambda amount, total: seen.append(("gained", amount, total)))
    event_bus.register(EconomyEvents.GOLD_SPENT, lambda amount, total: seen.append(("spent", amount, total)))
    return seen


@pytest.mark.unit
class TestEconomySetup:
    def test_initial_gold_from_config(self, economy):
        assert economy.name == "Economy"
        assert economy.priority == 0
        assert economy.gold == 50

    def test_default_initial_gold_without_config(self, event_bus):
        economy = EconomySubsystem(event_bus)
        economy.initialize()

        assert economy.gold == 100

    def test_debug_mode_follows_config(self, event_bus, config_manager):
        config_manager.set("core.lifecycle.debug_mode", True)

        economy = EconomySubsystem(event_bus, config_manager)
        quiet = EconomySubsystem(event_bus, config_manager, debug_mode=False)

        try:
            assert economy.debug_mode is True
            assert economy.logger.level == logging.DEBUG
            assert quiet.debug_mode is False
        finally:
            economy.logger.setLevel(logging.NOTSET)

    def test_negative_initial_gold_fails_initialization(self, event_bus, config_manager):
        config_manager.set("economy.initial_gold", -5)
        economy = EconomySubsystem(event_bus, config_manager)

        with pytest.raises(ValueError):
            economy.initialize()

        assert not economy.is_initialized


@pytest.mark.unit
class TestWallet:
    """Test credits and debits."""

    def test_add_gold_publishes(self, economy, gold_events):
        balance = economy.add_gold(25, source="quest")

        assert balance == 75
        assert gold_events == [("gained", 25, 75)]
        assert economy.transactions[-1].source == "quest"
        assert economy.transactions[-1].is_income

    def test_non_positive_credit_ignored(self, economy, gold_events):
        assert economy.add_gold(0) == 50
        assert economy.add_gold(-3) == 50
        assert gold_events == []

    def test_spend_gold(self, economy, gold_events):
        assert economy.spend_gold(20, source="seeds") is True

        assert economy.gold == 30
        assert gold_events == [("spent", 20, 30)]
        assert not economy.transactions[-1].is_income

    def test_spend_more_than_balance(self, economy, gold_events):
        assert economy.spend_gold(51) is False
        assert economy.gold == 50
        assert gold_events == []

    def test_spend_non_positive_rejected(self, economy):
        assert economy.spend_gold(0) is False

    def test_history_limit(self, event_bus, config_manager):
        config_manager.set("economy.history_limit", 2)
        economy = EconomySubsystem(event_bus, config_manager)
        economy.initialize()

        for amount in (1, 2, 3):
            economy.add_gold(amount)

        assert [t.amount for t in economy.transactions] == [2, 3]


@pytest.mark.unit
class TestHarvestIncome:
    """Test the Farming.CropHarvested subscription."""

    def test_harvest_credits_value(self, economy, event_bus, gold_events):
        event_bus.publish(FarmingEvents.CROP_HARVESTED, "potato", 3, 24)

        assert economy.gold == 74
        assert gold_events == [("gained", 24, 74)]
        assert economy.transactions[-1].source == "harvest:potato"

    def test_shutdown_stops_listening(self, economy, event_bus):
        economy.shutdown()

        assert event_bus.publish(FarmingEvents.CROP_HARVESTED, "potato", 3, 24) == 0
        assert economy.gold == 50
