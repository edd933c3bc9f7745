"""
Unit tests for BaseSubsystem.

Tests the guard conditions around every lifecycle entry point, exception
wrapping, pause suppression and the event helpers.
"""

import logging

import pytest

from hearthvale.core.lifecycle.base import BaseSubsystem, resolve_debug_mode
from hearthvale.core.lifecycle.contract import GameSubsystem
from hearthvale.core.lifecycle.state import LifecyclePhase, SubsystemState
from hearthvale.core.logging.logger import get_log_context
from tests.support import AlphaSubsystem, PlainSubsystem, RecordingSubsystem


# ============================================================================
# CONTRACT
# ============================================================================


@pytest.mark.unit
class TestContract:
    """Test structural conformance to GameSubsystem."""

    def test_base_subclass_satisfies_contract(self, journal):
        assert isinstance(AlphaSubsystem(journal), GameSubsystem)

    def test_plain_class_satisfies_contract(self):
        """No inheritance needed, only the members."""
        assert isinstance(PlainSubsystem(), GameSubsystem)

    def test_unrelated_object_does_not_satisfy_contract(self):
        assert not isinstance(object(), GameSubsystem)

    def test_base_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            BaseSubsystem()

    def test_identity_defaults(self, journal):
        class TownSubsystem(RecordingSubsystem):
            PRIORITY = 4

        subsystem = TownSubsystem(journal)

        assert subsystem.name == "TownSubsystem"
        assert subsystem.priority == 4
        assert subsystem.state is SubsystemState.UNINITIALIZED
        assert not subsystem.is_initialized
        assert not subsystem.is_running

    def test_identity_overrides(self, journal):
        subsystem = AlphaSubsystem(journal, name="Alpha", priority=-2)

        assert subsystem.name == "Alpha"
        assert subsystem.priority == -2
        assert repr(subsystem) == "AlphaSubsystem(name='Alpha', priority=-2, state=uninitialized)"


# ============================================================================
# INITIALIZE / START
# ============================================================================


@pytest.mark.unit
class TestInitializeAndStart:
    """Test initialize/start guards and failure handling."""

    def test_initialize_runs_hook_once(self, journal, caplog):
        # Arrange
        subsystem = AlphaSubsystem(journal, name="A")

        # Act
        subsystem.initialize()
        with caplog.at_level(logging.WARNING):
            subsystem.initialize()

        # Assert
        assert journal == [("A", "initialize")]
        assert subsystem.state is SubsystemState.INITIALIZED
        assert "already initialized" in caplog.text

    def test_initialize_failure_reraises_and_records(self, journal, caplog):
        subsystem = AlphaSubsystem(journal, name="A", fail_on={"initialize"})

        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError):
                subsystem.initialize()

        assert not subsystem.is_initialized
        assert isinstance(subsystem.last_error, RuntimeError)
        assert "initialization failed" in caplog.text

    def test_initialize_can_be_retried_after_failure(self, journal):
        subsystem = AlphaSubsystem(journal, name="A", fail_on={"initialize"})
        with pytest.raises(RuntimeError):
            subsystem.initialize()

        subsystem.fail_on.clear()
        subsystem.initialize()

        assert subsystem.is_initialized
        assert subsystem.last_error is None

    def test_start_before_initialize_is_rejected(self, journal, caplog):
        subsystem = AlphaSubsystem(journal, name="A")

        with caplog.at_level(logging.ERROR):
            subsystem.start()

        assert journal == []
        assert not subsystem.is_running
        assert "not initialized; cannot start" in caplog.text

    def test_start_sets_running(self, journal):
        subsystem = AlphaSubsystem(journal, name="A")
        subsystem.initialize()

        subsystem.start()

        assert subsystem.is_running
        assert subsystem.state is SubsystemState.RUNNING
        assert journal == [("A", "initialize"), ("A", "start")]

    def test_start_twice_is_ignored(self, journal, caplog):
        subsystem = AlphaSubsystem(journal, name="A")
        subsystem.initialize()
        subsystem.start()

        with caplog.at_level(logging.WARNING):
            subsystem.start()

        assert journal.count(("A", "start")) == 1
        assert "already running" in caplog.text

    def test_start_failure_is_swallowed(self, journal, caplog):
        """A failing on_start leaves the subsystem initialized but not running."""
        subsystem = AlphaSubsystem(journal, name="A", fail_on={"start"})
        subsystem.initialize()

        with caplog.at_level(logging.ERROR):
            subsystem.start()

        assert subsystem.is_initialized
        assert not subsystem.is_running
        assert isinstance(subsystem.last_error, RuntimeError)
        assert "start hook failed" in caplog.text


# ============================================================================
# UPDATE / PAUSE
# ============================================================================


@pytest.mark.unit
class TestUpdateAndPause:
    """Test per-frame forwarding and pause suppression."""

    @pytest.fixture
    def running(self, journal):
        subsystem = AlphaSubsystem(journal, name="A")
        subsystem.initialize()
        subsystem.start()
        journal.clear()
        return subsystem

    def test_update_ignored_before_start(self, journal):
        subsystem = AlphaSubsystem(journal, name="A")
        subsystem.initialize()

        subsystem.update(0.5)
        subsystem.fixed_update(0.5)

        assert subsystem.deltas == []
        assert subsystem.fixed_deltas == []

    def test_update_forwards_delta(self, running):
        running.update(0.5)
        running.fixed_update(0.25)

        assert running.deltas == [0.5]
        assert running.fixed_deltas == [0.25]

    def test_update_failure_is_swallowed(self, running):
        running.fail_on.add("update")

        running.update(0.5)

        assert isinstance(running.last_error, RuntimeError)
        assert running.is_running

    def test_last_error_cleared_by_next_call(self, running):
        running.fail_on.add("update")
        running.update(0.5)
        running.fail_on.clear()

        running.update(0.5)

        assert running.last_error is None

    def test_pause_suppresses_updates(self, running):
        running.pause()

        running.update(0.5)
        running.fixed_update(0.5)

        assert running.is_paused
        assert running.state is SubsystemState.PAUSED
        assert running.deltas == []
        assert running.fixed_deltas == []

    def test_resume_restores_updates(self, running):
        running.pause()
        running.resume()

        running.update(0.5)

        assert not running.is_paused
        assert running.deltas == [0.5]

    def test_pause_not_running_is_rejected(self, journal, caplog):
        subsystem = AlphaSubsystem(journal, name="A")
        subsystem.initialize()

        with caplog.at_level(logging.WARNING):
            subsystem.pause()

        assert not subsystem.is_paused
        assert "cannot pause" in caplog.text

    def test_pause_twice_and_resume_unpaused_warn(self, running, caplog):
        with caplog.at_level(logging.WARNING):
            running.resume()
            running.pause()
            running.pause()

        assert running.journal == [("A", "pause")]
        assert "not paused; cannot resume" in caplog.text
        assert "already paused" in caplog.text

    def test_reset_keeps_lifecycle_state(self, running):
        running.reset()

        assert running.journal == [("A", "reset")]
        assert running.is_running

    def test_reset_runs_inside_log_context(self, journal):
        class ContextCapture(RecordingSubsystem):
            def on_reset(self) -> None:
                self.seen_context = get_log_context()

        subsystem = ContextCapture(journal, name="Capture")

        subsystem.reset()

        assert subsystem.seen_context["subsystem"] == "Capture"
        assert subsystem.seen_context["operation"] == LifecyclePhase.RESET.value

    def test_reset_failure_is_swallowed(self, running, caplog):
        running.fail_on.add("reset")

        with caplog.at_level(logging.ERROR):
            running.reset()

        assert isinstance(running.last_error, RuntimeError)
        assert running.is_running
        assert "Subsystem reset hook failed" in caplog.text


# ============================================================================
# SHUTDOWN
# ============================================================================


@pytest.mark.unit
class TestShutdown:
    """Test shutdown flag reset and subscription release."""

    def test_shutdown_resets_all_flags(self, journal):
        subsystem = AlphaSubsystem(journal, name="A")
        subsystem.initialize()
        subsystem.start()
        subsystem.pause()

        subsystem.shutdown()

        assert subsystem.state is SubsystemState.UNINITIALIZED
        assert not subsystem.is_paused
        assert journal[-1] == ("A", "shutdown")

    def test_shutdown_uninitialized_is_noop(self, journal):
        subsystem = AlphaSubsystem(journal, name="A")

        subsystem.shutdown()

        assert journal == []

    def test_shutdown_resets_flags_even_when_hook_fails(self, journal):
        subsystem = AlphaSubsystem(journal, name="A", fail_on={"shutdown"})
        subsystem.initialize()
        subsystem.start()

        subsystem.shutdown()

        assert not subsystem.is_initialized
        assert not subsystem.is_running
        assert isinstance(subsystem.last_error, RuntimeError)

    def test_subsystem_can_reinitialize_after_shutdown(self, journal):
        subsystem = AlphaSubsystem(journal, name="A")
        subsystem.initialize()
        subsystem.shutdown()

        subsystem.initialize()

        assert subsystem.is_initialized
        assert journal.count(("A", "initialize")) == 2


# ============================================================================
# EVENT HELPERS
# ============================================================================


class _Listener(RecordingSubsystem):
    """Subscribes in on_initialize, as gameplay subsystems do."""

    def on_initialize(self) -> None:
        super().on_initialize()
        self.received = []
        self.subscribe("Player.LevelUp", self._on_level_up)

    def _on_level_up(self, level):
        self.received.append(level)


class _HalfInitialized(RecordingSubsystem):
    """Subscribes first, then fails the rest of its setup."""

    def on_initialize(self) -> None:
        self.received = []
        self.subscribe("Player.LevelUp", self._on_level_up)
        self._record("initialize")

    def _on_level_up(self, level):
        self.received.append(level)


@pytest.mark.unit
class TestEventHelpers:
    """Test publish/subscribe through the injected bus."""

    def test_subscribe_and_publish(self, journal, event_bus):
        listener = _Listener(journal, event_bus)
        listener.initialize()

        invoked = listener.publish("Player.LevelUp", 3)

        assert invoked == 1
        assert listener.received == [3]
        assert listener.subscription_count == 1

    def test_shutdown_releases_subscriptions(self, journal, event_bus):
        listener = _Listener(journal, event_bus)
        listener.initialize()

        listener.shutdown()

        assert event_bus.get_listener_count("Player.LevelUp") == 0
        assert listener.subscription_count == 0

    def test_failed_initialize_releases_subscriptions(self, journal, event_bus):
        subsystem = _HalfInitialized(journal, event_bus, name="Half", fail_on={"initialize"})

        with pytest.raises(RuntimeError):
            subsystem.initialize()
        event_bus.publish("Player.LevelUp", 3)

        assert subsystem.received == []
        assert subsystem.subscription_count == 0
        assert event_bus.get_listener_count("Player.LevelUp") == 0

    def test_retry_after_failed_initialize_subscribes_cleanly(self, journal, event_bus):
        subsystem = _HalfInitialized(journal, event_bus, name="Half", fail_on={"initialize"})
        with pytest.raises(RuntimeError):
            subsystem.initialize()

        subsystem.fail_on.clear()
        subsystem.initialize()
        event_bus.publish("Player.LevelUp", 4)

        assert subsystem.is_initialized
        assert subsystem.received == [4]
        assert event_bus.get_listener_count("Player.LevelUp") == 1

    def test_failed_subsystem_is_silent_after_shutdown_all(self, journal, event_bus, orchestrator):
        subsystem = _HalfInitialized(journal, event_bus, name="Half", fail_on={"initialize"})
        orchestrator.register_subsystem(subsystem)
        orchestrator.initialize_all()

        orchestrator.shutdown_all()
        event_bus.publish("Player.LevelUp", 3)

        assert subsystem.received == []
        assert not event_bus.has_listeners("Player.LevelUp")

    def test_unsubscribe(self, journal, event_bus):
        listener = _Listener(journal, event_bus)
        listener.initialize()

        assert listener.unsubscribe("Player.LevelUp", listener._on_level_up)
        assert listener.subscription_count == 0
        assert not event_bus.has_listeners("Player.LevelUp")

    def test_duplicate_subscribe_not_tracked_twice(self, journal, event_bus):
        listener = _Listener(journal, event_bus)
        listener.initialize()

        assert listener.subscribe("Player.LevelUp", listener._on_level_up) is False
        assert listener.subscription_count == 1

    def test_publish_without_bus_is_dropped(self, journal, caplog):
        subsystem = AlphaSubsystem(journal, name="A")

        with caplog.at_level(logging.WARNING):
            invoked = subsystem.publish("Player.LevelUp", 1)

        assert invoked == 0
        assert "No event bus attached" in caplog.text

    def test_subscribe_without_bus_fails(self, journal):
        subsystem = AlphaSubsystem(journal, name="A")

        assert subsystem.subscribe("Player.LevelUp", lambda level: None) is False
        assert subsystem.unsubscribe("Player.LevelUp", lambda level: None) is False

    def test_attach_event_bus(self, journal, event_bus):
        subsystem = AlphaSubsystem(journal, name="A")
        subsystem.attach_event_bus(event_bus)

        assert subsystem.event_bus is event_bus

    def test_debug_mode_lowers_logger_level(self):
        class DebugOnlySubsystem(BaseSubsystem):
            def on_initialize(self):
                pass

            def on_start(self):
                pass

            def on_update(self, delta_time):
                pass

        subsystem = DebugOnlySubsystem(name="DebugOnly", debug_mode=True)

        assert subsystem.debug_mode is True
        assert subsystem.logger.name == "hearthvale.subsystem.DebugOnly"
        assert subsystem.logger.level == logging.DEBUG

    def test_resolve_debug_mode(self, config_manager):
        assert resolve_debug_mode(None, None) is False
        assert resolve_debug_mode(config_manager, None) is False
        assert resolve_debug_mode(config_manager, True) is True

        config_manager.set("core.lifecycle.debug_mode", True)

        assert resolve_debug_mode(config_manager, None) is True
        assert resolve_debug_mode(config_manager, False) is False
