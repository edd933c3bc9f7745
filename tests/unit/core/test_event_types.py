"""
Unit tests for the EventBus building blocks: arity inference, Subscription,
ChannelRegistry, metrics snapshots and the channel catalogue.
"""

import functools

import pytest

from hearthvale.core.event.channels import FarmingEvents, SystemEvents, all_channels
from hearthvale.core.event.metrics import EventMetrics, EventMetricsRecorder
from hearthvale.core.event.registry import ChannelRegistry
from hearthvale.core.event.types import Subscription, callback_name, infer_arity


# ============================================================================
# ARITY INFERENCE
# ============================================================================


@pytest.mark.unit
class TestInferArity:
    """Test signature-based arity detection."""

    @pytest.mark.parametrize(
        "callback, expected",
        [
            (lambda: None, (0, False)),
            (lambda a: None, (1, False)),
            (lambda a, b, c, d: None, (4, False)),
            (lambda a, b=2: None, (1, False)),
            (lambda *args: None, (0, True)),
            (lambda a, *args: None, (1, True)),
            (lambda a, *, flag=False: None, (1, False)),
        ],
    )
    def test_signatures(self, callback, expected):
        assert infer_arity(callback) == expected

    def test_bound_method_excludes_self(self):
        class Listener:
            def on_harvest(self, crop, quantity, value):
                pass

        assert infer_arity(Listener().on_harvest) == (3, False)

    def test_partial_counts_remaining_arguments(self):
        def handler(prefix, crop, quantity):
            pass

        assert infer_arity(functools.partial(handler, "log")) == (2, False)

    def test_required_keyword_only_parameter_raises(self):
        def handler(crop, *, quantity):
            pass

        with pytest.raises(TypeError, match="keyword-only"):
            infer_arity(handler)

    def test_callback_name_uses_qualname(self):
        def on_grown(plot_id, crop):
            pass

        name = callback_name(on_grown)

        assert name.endswith("test_callback_name_uses_qualname.<locals>.on_grown")


# ============================================================================
# SUBSCRIPTION
# ============================================================================


@pytest.mark.unit
class TestSubscription:
    """Test Subscription construction and matching."""

    def test_from_callback_infers_arity_and_identifier(self):
        def on_planted(plot_id, crop):
            pass

        subscription = Subscription.from_callback(FarmingEvents.CROP_PLANTED, on_planted)

        assert subscription.arity == 2
        assert subscription.variadic is False
        assert subscription.active is True
        assert subscription.identifier.endswith(f"on_planted@{FarmingEvents.CROP_PLANTED}")

    def test_explicit_arity_disables_variadic(self):
        subscription = Subscription.from_callback("Debug.Trace", lambda *args: None, arity=3)

        assert subscription.variadic is False
        assert subscription.accepts(3)
        assert not subscription.accepts(4)

    def test_variadic_accepts_minimum_and_above(self):
        subscription = Subscription.from_callback("Debug.Trace", lambda a, *rest: None)

        assert not subscription.accepts(0)
        assert subscription.accepts(1)
        assert subscription.accepts(4)

    def test_custom_identifier(self):
        subscription = Subscription.from_callback("Game.Paused", lambda: None, identifier="hud")

        assert subscription.identifier == "hud"

    def test_matches_by_equality(self):
        def handler():
            pass

        subscription = Subscription.from_callback("Game.Paused", handler)

        assert subscription.matches(handler)
        assert not subscription.matches(lambda: None)


# ============================================================================
# CHANNEL REGISTRY
# ============================================================================


@pytest.mark.unit
class TestChannelRegistry:
    """Test per-channel subscription storage."""

    @staticmethod
    def _sub(channel, callback):
        return Subscription.from_callback(channel, callback)

    def test_add_rejects_duplicate_callback(self):
        registry = ChannelRegistry()

        def handler():
            pass

        assert registry.add("Game.Paused", self._sub("Game.Paused", handler))
        assert not registry.add("Game.Paused", self._sub("Game.Paused", handler))
        assert registry.count("Game.Paused") == 1

    def test_remove_deactivates_record(self):
        registry = ChannelRegistry()

        def handler():
            pass

        registry.add("Game.Paused", self._sub("Game.Paused", handler))
        snapshot = registry.snapshot("Game.Paused")

        removed = registry.remove("Game.Paused", handler)

        assert removed is snapshot[0]
        assert removed.active is False
        assert registry.remove("Game.Paused", handler) is None
        assert not registry.has_channel("Game.Paused")

    def test_snapshot_is_independent_of_later_changes(self):
        registry = ChannelRegistry()
        registry.add("Game.Paused", self._sub("Game.Paused", lambda: None))

        snapshot = registry.snapshot("Game.Paused")
        registry.add("Game.Paused", self._sub("Game.Paused", lambda: None))

        assert len(snapshot) == 1
        assert registry.count("Game.Paused") == 2

    def test_snapshot_of_unknown_channel_is_empty(self):
        assert ChannelRegistry().snapshot("Nope") == ()

    def test_counts_and_channel_listing(self):
        registry = ChannelRegistry()
        registry.add("Game.Resumed", self._sub("Game.Resumed", lambda: None))
        registry.add("Game.Paused", self._sub("Game.Paused", lambda: None))
        registry.add("Game.Paused", self._sub("Game.Paused", lambda: None))

        assert registry.count() == 3
        assert registry.count("Game.Paused") == 2
        assert registry.count("Unknown") == 0
        assert registry.channels() == ["Game.Paused", "Game.Resumed"]

    def test_clear_returns_removed_count(self):
        registry = ChannelRegistry()
        subscription = self._sub("Game.Paused", lambda: None)
        registry.add("Game.Paused", subscription)

        assert registry.clear() == 1
        assert subscription.active is False
        assert registry.count() == 0


# ============================================================================
# METRICS
# ============================================================================


@pytest.mark.unit
class TestEventMetrics:
    """Test the recorder and its frozen snapshots."""

    def test_snapshot_is_decoupled_from_recorder(self):
        recorder = EventMetricsRecorder()
        recorder.record_publish("Game.Started")

        snapshot = recorder.snapshot(total_listeners=2)
        recorder.record_publish("Game.Started")

        assert snapshot.events_published == {"Game.Started": 1}
        assert snapshot.total_listeners == 2

    def test_summary_error_rate(self):
        metrics = EventMetrics(
            events_published={"Player.LevelUp": 40},
            listener_errors={"Player.LevelUp": 2},
            total_listeners=10,
        )

        summary = metrics.get_summary()

        assert summary["total_events_published"] == 40
        assert summary["total_errors"] == 2
        assert summary["error_rate"] == 5.0

    def test_reset_clears_counters(self):
        recorder = EventMetricsRecorder()
        recorder.record_publish("Game.Started")
        recorder.record_invocation("Game.Started")
        recorder.record_error("Game.Started")

        recorder.reset()
        snapshot = recorder.snapshot()

        assert snapshot.events_published == {}
        assert snapshot.callbacks_invoked == {}
        assert snapshot.listener_errors == {}


# ============================================================================
# CHANNEL CATALOGUE
# ============================================================================


@pytest.mark.unit
class TestChannelCatalogue:
    def test_all_channels_sorted_and_unique(self):
        channels = all_channels()

        assert channels == sorted(set(channels))
        assert SystemEvents.INITIALIZED in channels
        assert FarmingEvents.CROP_HARVESTED in channels

    def test_channel_names_are_dot_namespaced(self):
        assert all("." in channel for channel in all_channels())
