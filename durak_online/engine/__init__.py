"""
Game engine for durak_online.

This package provides the engine that owns a game's state, implementing the
game logic in a transport-agnostic way.
"""

from durak_online.engine.durak import DurakEngine, MoveResult
from durak_online.engine.view import PlayerView, StateView

__all__ = ["DurakEngine", "MoveResult", "PlayerView", "StateView"]
