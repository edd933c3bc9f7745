"""
ChannelRegistry: storage for EventBus subscriptions.

Responsibilities
----------------
- Keep one ordered subscription list per channel, in registration order
- Reject a callback already registered on the same channel
- Create channels lazily and delete them when their list empties
- Hand out immutable snapshots for dispatch
- Provide introspection (counts, channel names)

Not thread-safe; the core runs on a single logical thread.
"""

from __future__ import annotations

from typing import Optional

from hearthvale.core.event.types import Callback, Subscription


class ChannelRegistry:
    """
    Registry of channel name -> ordered subscriptions.

    Examples
    --------
    >>> registry = ChannelRegistry()
    >>> sub = Subscription.from_callback("Player.LevelUp", on_level_up)
    >>> registry.add("Player.LevelUp", sub)
    True
    >>> registry.add("Player.LevelUp", Subscription.from_callback("Player.LevelUp", on_level_up))
    False
    """

    def __init__(self) -> None:
        self._channels: dict[str, list[Subscription]] = {}

    # ------------------------------------------------------------------ #
    # Modification
    # ------------------------------------------------------------------ #

    def add(self, channel: str, subscription: Subscription) -> bool:
        """Append `subscription`; False if its callback is already on `channel`."""
        existing = self._channels.get(channel)
        if existing is not None and self.find(channel, subscription.callback) is not None:
            return False
        if existing is None:
            existing = self._channels[channel] = []
        existing.append(subscription)
        return True

    def find(self, channel: str, callback: Callback) -> Optional[Subscription]:
        for subscription in self._channels.get(channel, ()):
            if subscription.matches(callback):
                return subscription
        return None

    def remove(self, channel: str, callback: Callback) -> Optional[Subscription]:
        """
        Remove the subscription for `callback` on `channel`.

        Returns the removed (now inactive) record, or None when absent.
        """
        subscription = self.find(channel, callback)
        if subscription is None:
            return None
        self.discard(channel, subscription)
        return subscription

    def discard(self, channel: str, subscription: Subscription) -> None:
        """Remove a specific record (used for one-shot pruning)."""
        subscription.active = False
        subscriptions = self._channels.get(channel)
        if subscriptions is None:
            return
        for index, candidate in enumerate(subscriptions):
            if candidate is subscription:
                del subscriptions[index]
                break
        if not subscriptions:
            del self._channels[channel]

    def clear(self) -> int:
        """Deactivate and drop everything; returns the number removed."""
        total = 0
        for subscriptions in self._channels.values():
            for subscription in subscriptions:
                subscription.active = False
            total += len(subscriptions)
        self._channels.clear()
        return total

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def snapshot(self, channel: str) -> tuple[Subscription, ...]:
        return tuple(self._channels.get(channel, ()))

    def count(self, channel: Optional[str] = None) -> int:
        if channel is not None:
            return len(self._channels.get(channel, ()))
        return sum(len(subscriptions) for subscriptions in self._channels.values())

    def has_channel(self, channel: str) -> bool:
        return channel in self._channels

    def channels(self) -> list[str]:
        return sorted(self._channels)
