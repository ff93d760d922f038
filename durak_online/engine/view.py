"""
Per-viewer projections of the Durak game state.

A `StateView` is what one participant is allowed to see: their own hand in
full, only a card count for the opponent, and the public table.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from durak_online.common.card import Card, Suit
from durak_online.durak.state import GamePhase, GameState, Role, TableSlot


@dataclass(frozen=True)
class PlayerView:
    """A player as seen by the viewer. `hand` is None unless it is the viewer."""

    id: str
    name: str
    role: Role
    card_count: int
    hand: Optional[List[Card]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "cardCount": self.card_count,
            "hand": [c.to_dict() for c in self.hand] if self.hand is not None else None,
        }


@dataclass(frozen=True)
class StateView:
    """
    Read-only snapshot of a game for one viewer.

    Attributes:
        game_id: ID of the game
        viewer_id: ID of the player this view was built for
        phase: Current phase of the game
        players: Players in join order
        table: Attack slots in laying order (public)
        trump_suit: The trump suit
        trump_card: The bottom card that fixed the trump suit
        deck_count: Cards left in the deck
        discard_count: Cards discarded so far
        current_turn_player_id: Player whose move is awaited
        all_defended: Whether every slot on a non-empty table is beaten
        winner_id: Winner once the game is finished
        is_draw: Whether the game finished as a draw
        current_round: Round number
    """

    game_id: str
    viewer_id: Optional[str]
    phase: GamePhase
    players: List[PlayerView] = field(default_factory=list)
    table: List[TableSlot] = field(default_factory=list)
    trump_suit: Optional[Suit] = None
    trump_card: Optional[Card] = None
    deck_count: int = 0
    discard_count: int = 0
    current_turn_player_id: Optional[str] = None
    all_defended: bool = False
    winner_id: Optional[str] = None
    is_draw: bool = False
    current_round: int = 0

    @classmethod
    def from_state(cls, state: GameState, viewer_id: Optional[str]) -> "StateView":
        """Project `state` for `viewer_id`, hiding every other player's cards."""
        players = [
            PlayerView(
                id=p.id,
                name=p.name,
                role=p.role,
                card_count=p.card_count,
                hand=list(p.hand) if p.id == viewer_id else None,
            )
            for p in state.players
        ]
        return cls(
            game_id=state.id,
            viewer_id=viewer_id,
            phase=state.phase,
            players=players,
            table=list(state.table),
            trump_suit=state.trump_suit,
            trump_card=state.trump_card,
            deck_count=state.deck_size,
            discard_count=len(state.discard_pile),
            current_turn_player_id=state.current_turn_player_id,
            all_defended=state.all_defended,
            winner_id=state.winner_id,
            is_draw=state.is_draw,
            current_round=state.current_round,
        )

    def get_player(self, player_id: str) -> Optional[PlayerView]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the view to the JSON payload of a `stateView` message."""
        return {
            "gameId": self.game_id,
            "viewerId": self.viewer_id,
            "phase": self.phase.name.lower(),
            "players": [p.to_dict() for p in self.players],
            "table": [slot.to_dict() for slot in self.table],
            "trumpSuit": self.trump_suit.value if self.trump_suit else None,
            "trumpCard": self.trump_card.to_dict() if self.trump_card else None,
            "deckCount": self.deck_count,
            "discardCount": self.discard_count,
            "currentTurnPlayerId": self.current_turn_player_id,
            "allDefended": self.all_defended,
            "winnerId": self.winner_id,
            "isDraw": self.is_draw,
            "round": self.current_round,
        }
