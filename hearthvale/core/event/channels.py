"""
Conventional channel names for the Hearthvale EventBus.

Names are flat strings, dot-namespaced by domain for readability only; the
bus never parses them. Each channel's payload shape is a convention shared
by its publishers and subscribers, noted next to the channels the core and
demo modules publish.
"""

from __future__ import annotations


class GameEvents:
    STATE_CHANGED = "Game.StateChanged"  # (GameStateChange)
    STARTED = "Game.Started"
    PAUSED = "Game.Paused"  # ()
    RESUMED = "Game.Resumed"  # ()
    ENDED = "Game.Ended"
    RESTARTED = "Game.Restarted"


class PlayerEvents:
    CREATED = "Player.Created"
    LOADED = "Player.Loaded"
    LEVEL_UP = "Player.LevelUp"
    PROFESSION_CHANGED = "Player.ProfessionChanged"
    POSITION_CHANGED = "Player.PositionChanged"
    HEALTH_CHANGED = "Player.HealthChanged"
    MANA_CHANGED = "Player.ManaChanged"
    EXPERIENCE_GAINED = "Player.ExperienceGained"
    DEATH = "Player.Death"
    RESPAWN = "Player.Respawn"


class SkillEvents:
    LEARNED = "Skill.Learned"
    UPGRADED = "Skill.Upgraded"
    USED = "Skill.Used"
    COOLDOWN_STARTED = "Skill.CooldownStarted"
    COOLDOWN_FINISHED = "Skill.CooldownFinished"
    POINTS_GAINED = "Skill.PointsGained"


class ItemEvents:
    ACQUIRED = "Item.Acquired"
    USED = "Item.Used"
    DROPPED = "Item.Dropped"
    EQUIPPED = "Item.Equipped"
    UNEQUIPPED = "Item.Unequipped"
    CRAFTED = "Item.Crafted"


class NPCEvents:
    DIALOGUE_STARTED = "NPC.DialogueStarted"
    DIALOGUE_ENDED = "NPC.DialogueEnded"
    INTERACTION_STARTED = "NPC.InteractionStarted"
    INTERACTION_ENDED = "NPC.InteractionEnded"
    CREATED = "NPC.Created"
    DESTROYED = "NPC.Destroyed"


class QuestEvents:
    ACCEPTED = "Quest.Accepted"
    COMPLETED = "Quest.Completed"
    FAILED = "Quest.Failed"
    PROGRESS_UPDATED = "Quest.ProgressUpdated"
    OBJECTIVE_COMPLETED = "Quest.ObjectiveCompleted"
    ABANDONED = "Quest.Abandoned"


class CombatEvents:
    STARTED = "Combat.Started"
    ENDED = "Combat.Ended"
    DAMAGE_DEALT = "Combat.DamageDealt"
    DAMAGE_RECEIVED = "Combat.DamageReceived"
    ENEMY_DEFEATED = "Combat.EnemyDefeated"
    CRITICAL_HIT = "Combat.CriticalHit"


class EconomyEvents:
    GOLD_GAINED = "Economy.GoldGained"  # (amount, new_total)
    GOLD_SPENT = "Economy.GoldSpent"  # (amount, new_total)
    ITEM_BOUGHT = "Economy.ItemBought"
    ITEM_SOLD = "Economy.ItemSold"
    SHOP_OPENED = "Economy.ShopOpened"
    SHOP_CLOSED = "Economy.ShopClosed"


class FarmingEvents:
    CROP_PLANTED = "Farming.CropPlanted"  # (plot_id, crop)
    CROP_GROWN = "Farming.CropGrown"  # (plot_id, crop)
    CROP_HARVESTED = "Farming.CropHarvested"  # (crop, quantity, value)
    PLOT_CREATED = "Farming.PlotCreated"
    PLOT_DESTROYED = "Farming.PlotDestroyed"


class UIEvents:
    PANEL_OPENED = "UI.PanelOpened"
    PANEL_CLOSED = "UI.PanelClosed"
    BUTTON_CLICKED = "UI.ButtonClicked"
    INPUT_CHANGED = "UI.InputChanged"


class DataEvents:
    SAVED = "Data.Saved"
    LOADED = "Data.Loaded"
    SETTINGS_CHANGED = "Data.SettingsChanged"
    CONFIG_RELOADED = "Data.ConfigReloaded"  # (top_level_keys)


class SystemEvents:
    INITIALIZED = "System.Initialized"  # ()
    STARTED = "System.Started"  # ()
    PAUSED = "System.Paused"  # ()
    RESUMED = "System.Resumed"  # ()
    SHUTDOWN = "System.Shutdown"  # ()


class ShopEvents:
    CREATED = "Shop.Created"
    CLOSED = "Shop.Closed"
    ITEM_ADDED = "Shop.ItemAdded"
    ITEM_REMOVED = "Shop.ItemRemoved"
    RENT_EXPIRED = "Shop.RentExpired"
    INVENTORY_UPDATED = "Shop.InventoryUpdated"


CHANNEL_GROUPS = (
    GameEvents,
    PlayerEvents,
    SkillEvents,
    ItemEvents,
    NPCEvents,
    QuestEvents,
    CombatEvents,
    EconomyEvents,
    FarmingEvents,
    UIEvents,
    DataEvents,
    SystemEvents,
    ShopEvents,
)


def all_channels() -> list[str]:
    """Every catalogued channel name, sorted."""
    names = {
        value
        for group in CHANNEL_GROUPS
        for attr, value in vars(group).items()
        if attr.isupper() and isinstance(value, str)
    }
    return sorted(names)
