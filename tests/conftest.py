"""
Pytest Configuration and Fixtures for the Hearthvale Test Suite
===============================================================

Purpose
-------
Shared fixtures for the core engine tests: an isolated event bus, a
ConfigManager reading a temporary YAML directory, an orchestrator wired to
the bus and a journal for recording subsystems.

Architecture Notes
------------------
- Nothing touches the real `config/` directory or configures logging;
  log assertions go through pytest's `caplog`.
- Ambient log context is cleared around every test.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from hearthvale.core.config.manager import ConfigManager
from hearthvale.core.event.bus import EventBus
from hearthvale.core.lifecycle.orchestrator import SubsystemOrchestrator
from hearthvale.core.logging.logger import clear_log_context
from tests.support import Journal

TEST_CONFIG_YAML = """\
core:
  event:
    metrics_enabled: true
  lifecycle:
    raise_on_init_failure: false
  loop:
    fixed_delta_time: 0.25
    max_frame_delta: 1.0

economy:
  initial_gold: 50

farming:
  growth_update_interval: 1.0
  max_plots: 3
  crops:
    turnip:
      growth_time: 2.0
      base_yield: 1
      sell_price: 10
    potato:
      growth_time: 4.0
      base_yield: 3
      sell_price: 8
"""


# ============================================================================
# LOG CONTEXT
# ============================================================================


@pytest.fixture(autouse=True)
def clean_log_context() -> Iterator[None]:
    clear_log_context()
    yield
    clear_log_context()


# ============================================================================
# CONFIG FIXTURES
# ============================================================================


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Temporary config directory holding one `game.yaml`."""
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "game.yaml").write_text(TEST_CONFIG_YAML, encoding="utf-8")
    return directory


@pytest.fixture
def config_manager(config_dir: Path) -> ConfigManager:
    manager = ConfigManager(config_dir)
    manager.initialize()
    return manager


# ============================================================================
# CORE FIXTURES
# ============================================================================


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus(enable_metrics=True)


@pytest.fixture
def orchestrator(event_bus: EventBus) -> SubsystemOrchestrator:
    """Orchestrator that reports init failures instead of raising."""
    return SubsystemOrchestrator(event_bus=event_bus, raise_on_init_failure=False)


@pytest.fixture
def journal() -> Journal:
    return []
