"""Application kernel and host loop."""

from hearthvale.core.infra.application_context import GameContext, GameState, GameStateChange
from hearthvale.core.infra.game_loop import FrameResult, GameLoop

__all__ = ["GameContext", "GameState", "GameStateChange", "GameLoop", "FrameResult"]
