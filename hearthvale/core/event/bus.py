"""
Hearthvale EventBus: synchronous, string-keyed publish/subscribe.

Purpose
-------
Let gameplay modules notify and react to each other through named channels
carrying 0 to 4 positional arguments, without holding references to one
another.

Responsibilities
----------------
- Register / unregister callbacks per channel, rejecting duplicates
- Publish synchronously, in registration order, to subscriptions whose
  arity matches the argument count
- Tolerate subscribers unregistering themselves or others mid-publish
- One-shot (`once=True`) subscriptions
- Metrics and introspection
- LogContext integration for structured logging

Design Decisions
----------------
- **Instance-based**: the `GameContext` owns one bus; tests build their own.
- **Snapshot dispatch**: each publish iterates a tuple captured at the
  start of the call. Removal clears the record's `active` flag, and the
  loop skips inactive records. Subscriptions added during a publish first
  run on the next publish.
- **Failures propagate**: a raising subscriber aborts the publish and the
  exception reaches the publisher, after being logged and counted.
  Isolation belongs to subsystem-level wrapping.
- **Duplicates are logged, not raised**: `register` returns False.
- **Arity errors are raised**: more than 4 arguments is a programming
  error at the call site (`EventArityError`, a `ValueError`).
- Re-entrant publishing is allowed and not cycle-detected.

Dependencies
------------
- hearthvale.core.logging.logger (structured logging)
- hearthvale.core.config.manager (optional, `core.event.metrics_enabled`)
- hearthvale.core.event.types / registry / metrics / context
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from hearthvale.core.event.context import event_log_context
from hearthvale.core.event.metrics import EventMetrics, EventMetricsRecorder
from hearthvale.core.event.registry import ChannelRegistry
from hearthvale.core.event.types import MAX_ARITY, Callback, Subscription
from hearthvale.core.exceptions import EventArityError, EventBusError
from hearthvale.core.logging.logger import get_logger

if TYPE_CHECKING:
    from hearthvale.core.config.manager import ConfigManager

logger = get_logger(__name__)


class EventBus:
    """
    Synchronous EventBus for Hearthvale.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.register("Player.LevelUp", lambda level: print(level))
    True
    >>> bus.publish("Player.LevelUp", 5)
    5
    1
    """

    def __init__(
        self,
        registry: Optional[ChannelRegistry] = None,
        metrics: Optional[EventMetricsRecorder] = None,
        config_manager: Optional["ConfigManager"] = None,
        *,
        enable_metrics: Optional[bool] = None,
    ) -> None:
        """
        Parameters
        ----------
        registry:
            Optional ChannelRegistry. Creates a fresh one if None.
        metrics:
            Optional EventMetricsRecorder. Creates a fresh one if None.
        config_manager:
            Optional ConfigManager used to resolve `core.event.metrics_enabled`.
        enable_metrics:
            Explicit override; wins over config.
        """
        self._registry = registry or ChannelRegistry()
        self._metrics = metrics or EventMetricsRecorder()
        self._metrics_enabled = self._resolve_metrics_flag(config_manager, enable_metrics)

        logger.info(
            "EventBus initialized",
            extra={"metrics_enabled": self._metrics_enabled, "max_arity": MAX_ARITY},
        )

    @staticmethod
    def _resolve_metrics_flag(
        config_manager: Optional["ConfigManager"],
        override: Optional[bool],
    ) -> bool:
        if override is not None:
            return bool(override)
        if config_manager is None:
            return True
        return config_manager.get_bool("core.event.metrics_enabled", True)

    @staticmethod
    def _validate_channel(operation: str, channel: str) -> None:
        if not isinstance(channel, str) or not channel:
            raise EventBusError(operation, repr(channel), "channel name must be a non-empty string")

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    def register(
        self,
        channel: str,
        callback: Callback,
        *,
        arity: Optional[int] = None,
        once: bool = False,
        identifier: Optional[str] = None,
    ) -> bool:
        """
        Subscribe `callback` to `channel`.

        Parameters
        ----------
        channel:
            Channel name, e.g. `"Farming.CropHarvested"`.
        callback:
            Callable taking the channel's positional payload.
        arity:
            Number of payload arguments. Inferred from the signature if None.
        once:
            Remove the subscription before its first invocation.
        identifier:
            Optional label for logs. Defaults to `module.qualname@channel`.

        Returns
        -------
        bool:
            True if added; False if `callback` was already registered on
            `channel` (logged as an error, existing subscription kept).

        Raises
        ------
        EventArityError:
            If the arity is outside 0..4.
        TypeError:
            If `callback` is not callable or its arity cannot be determined.
        """
        self._validate_channel("register", channel)
        if not callable(callback):
            raise TypeError(f"EventBus callback for '{channel}' is not callable: {callback!r}")

        subscription = Subscription.from_callback(
            channel,
            callback,
            arity=arity,
            identifier=identifier,
            once=once,
        )
        if not 0 <= subscription.arity <= MAX_ARITY:
            raise EventArityError("register", channel, subscription.arity, MAX_ARITY)

        if not self._registry.add(channel, subscription):
            logger.error(
                "EventBus: duplicate registration rejected",
                extra={"channel": channel, "listener_id": subscription.identifier},
            )
            return False

        logger.debug(
            "EventBus: registered listener",
            extra={
                "channel": channel,
                "listener_id": subscription.identifier,
                "arity": subscription.arity,
                "variadic": subscription.variadic,
                "once": subscription.once,
            },
        )
        return True

    def unregister(self, channel: str, callback: Callback) -> bool:
        """
        Remove `callback` from `channel`.

        Absent callbacks and unknown channels are a no-op returning False.
        If a publish on `channel` is in progress, the removed callback is
        not invoked for the rest of it.
        """
        removed = self._registry.remove(channel, callback)
        if removed is None:
            return False

        logger.debug(
            "EventBus: unregistered listener",
            extra={
                "channel": channel,
                "listener_id": removed.identifier,
                "channel_removed": not self._registry.has_channel(channel),
            },
        )
        return True

    def clear(self) -> None:
        """
        Remove every subscription from every channel.

        Intended for tests and full resets.
        """
        total = self._registry.clear()
        logger.info(
            "EventBus: cleared all listeners",
            extra={"previous_listener_count": total},
        )

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    def publish(self, channel: str, *args: Any) -> int:
        """
        Invoke every matching subscriber on `channel` with `args`.

        Returns
        -------
        int:
            Number of callbacks invoked. Zero for channels with no
            subscribers, which is never an error.

        Raises
        ------
        EventArityError:
            If more than 4 arguments are given.
        Exception:
            Whatever a subscriber raises, after logging. Remaining
            subscribers in that publish are not invoked.

        Examples
        --------
        >>> bus.publish("Farming.CropHarvested", "wheat", 3, 36)
        2
        """
        arg_count = len(args)
        if arg_count > MAX_ARITY:
            raise EventArityError("publish", channel, arg_count, MAX_ARITY)

        if self._metrics_enabled:
            self._metrics.record_publish(channel)

        subscriptions = self._registry.snapshot(channel)
        if not subscriptions:
            return 0

        invoked = 0
        with event_log_context(channel, arg_count):
            for subscription in subscriptions:
                if not subscription.active or not subscription.accepts(arg_count):
                    continue
                if subscription.once:
                    self._registry.discard(channel, subscription)

                try:
                    subscription.callback(*args)
                except Exception:
                    if self._metrics_enabled:
                        self._metrics.record_error(channel)
                    logger.error(
                        "EventBus: listener raised during publish",
                        extra={
                            "channel": channel,
                            "listener_id": subscription.identifier,
                            "arity": arg_count,
                        },
                        exc_info=True,
                    )
                    raise

                invoked += 1
                if self._metrics_enabled:
                    self._metrics.record_invocation(channel)

        return invoked

    # ------------------------------------------------------------------ #
    # Metrics & Introspection
    # ------------------------------------------------------------------ #

    def get_metrics(self) -> Optional[EventMetrics]:
        """Immutable snapshot of metrics, or None when disabled."""
        if not self._metrics_enabled:
            return None
        return self._metrics.snapshot(total_listeners=self._registry.count())

    def get_metrics_summary(self) -> dict[str, Any]:
        metrics = self.get_metrics()
        if metrics is None:
            return {}
        return metrics.get_summary()

    def reset_metrics(self) -> None:
        self._metrics.reset()

    def get_listener_count(self, channel: Optional[str] = None) -> int:
        """
        Number of subscriptions on `channel`, or across all channels.

        Examples
        --------
        >>> bus.get_listener_count()
        7
        >>> bus.get_listener_count("Economy.GoldGained")
        2
        """
        return self._registry.count(channel)

    def has_listeners(self, channel: str) -> bool:
        return self._registry.has_channel(channel)

    def is_registered(self, channel: str, callback: Callback) -> bool:
        return self._registry.find(channel, callback) is not None

    def get_all_channels(self) -> list[str]:
        """Sorted names of channels that currently have subscribers."""
        return self._registry.channels()

    @property
    def metrics_enabled(self) -> bool:
        return self._metrics_enabled

    def enable_metrics(self) -> None:
        self._metrics_enabled = True
        logger.info("EventBus: metrics enabled")

    def disable_metrics(self) -> None:
        self._metrics_enabled = False
        logger.info("EventBus: metrics disabled")

    def __repr__(self) -> str:
        return (
            f"EventBus(channels={len(self._registry.channels())}, "
            f"listeners={self._registry.count()})"
        )

