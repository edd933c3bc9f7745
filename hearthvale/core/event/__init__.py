"""
Hearthvale event system.

Exports the synchronous EventBus, its subscription types and the channel
catalogue.
"""

from hearthvale.core.event.bus import EventBus
from hearthvale.core.event.channels import (
    CombatEvents,
    DataEvents,
    EconomyEvents,
    FarmingEvents,
    GameEvents,
    ItemEvents,
    NPCEvents,
    PlayerEvents,
    QuestEvents,
    ShopEvents,
    SkillEvents,
    SystemEvents,
    UIEvents,
    all_channels,
)
from hearthvale.core.event.metrics import EventMetrics, EventMetricsRecorder
from hearthvale.core.event.registry import ChannelRegistry
from hearthvale.core.event.types import MAX_ARITY, Subscription, infer_arity

__all__ = [
    "EventBus",
    "ChannelRegistry",
    "Subscription",
    "EventMetrics",
    "EventMetricsRecorder",
    "MAX_ARITY",
    "infer_arity",
    "all_channels",
    "GameEvents",
    "PlayerEvents",
    "SkillEvents",
    "ItemEvents",
    "NPCEvents",
    "QuestEvents",
    "CombatEvents",
    "EconomyEvents",
    "FarmingEvents",
    "UIEvents",
    "DataEvents",
    "SystemEvents",
    "ShopEvents",
]
