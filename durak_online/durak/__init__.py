"""
Durak card game module.

This module provides the implementation for the two-player Durak card game,
including state models, legality rules and state transitions.
"""

from durak_online.durak.constants import RejectReason as RejectReason
from durak_online.durak.state import (
    GameState as GameState,
    PlayerState as PlayerState,
    TableSlot as TableSlot,
    GamePhase as GamePhase,
    GameRules as GameRules,
    Role as Role,
)
from durak_online.durak.rules import can_beat as can_beat
from durak_online.durak.transitions import (
    MoveRejected as MoveRejected,
    StateTransitionEngine as StateTransitionEngine,
)

__all__ = [
    "GameState",
    "PlayerState",
    "TableSlot",
    "GamePhase",
    "GameRules",
    "Role",
    "RejectReason",
    "MoveRejected",
    "StateTransitionEngine",
    "can_beat",
]
