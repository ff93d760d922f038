"""
Immutable state models for the two-player Durak card game.

This module provides dataclasses for representing the state of a Durak game
in an immutable manner. These classes are designed to be used with pure
transition functions that create new state instances rather than modifying
existing ones, so a rejected move can never leave a half-applied change behind.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from enum import Enum, auto
import uuid
import time

from durak_online.common.card import Card, Suit
from durak_online.common.deck import Deck
from durak_online.durak.constants import HAND_SIZE, MAX_TABLE_SLOTS


class GamePhase(Enum):
    """Possible phases of a Durak game."""

    WAITING = auto()
    PLAYING = auto()
    FINISHED = auto()


class Role(Enum):
    """Role a player holds in the current round."""

    NONE = "none"
    ATTACKER = "attacker"
    DEFENDER = "defender"


@dataclass(frozen=True)
class GameRules:
    """
    Immutable representation of the rules for a Durak game.

    Attributes:
        hand_size: Number of cards hands are dealt and refilled up to
        max_table_slots: Maximum number of attack cards on the table per round
    """

    hand_size: int = HAND_SIZE
    max_table_slots: int = MAX_TABLE_SLOTS


@dataclass(frozen=True)
class TableSlot:
    """
    One attack card and its optional defending card.

    Attributes:
        attack_card: Card laid by the attacker
        attacker_id: ID of the player who laid the attack card
        defend_card: Card that beat the attack card, if any
        defender_id: ID of the player who laid the defending card, if any
    """

    attack_card: Card
    attacker_id: str
    defend_card: Optional[Card] = None
    defender_id: Optional[str] = None

    @property
    def is_defended(self) -> bool:
        return self.defend_card is not None

    @property
    def cards(self) -> List[Card]:
        """The cards in this slot, attack card first."""
        if self.defend_card is None:
            return [self.attack_card]
        return [self.attack_card, self.defend_card]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attackCard": self.attack_card.to_dict(),
            "attackerId": self.attacker_id,
            "defendCard": self.defend_card.to_dict() if self.defend_card else None,
            "defenderId": self.defender_id,
        }


@dataclass(frozen=True)
class PlayerState:
    """
    Immutable representation of a player's state in Durak.

    Attributes:
        id: Opaque identifier for this player, stable for the connection's lifetime
        name: Display name of the player
        hand: Cards in the player's hand
        role: The player's role in the current round
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Player"
    hand: List[Card] = field(default_factory=list)
    role: Role = Role.NONE

    @property
    def card_count(self) -> int:
        """Get the number of cards in the player's hand."""
        return len(self.hand)


@dataclass(frozen=True)
class GameState:
    """
    Immutable representation of the Durak game state.

    Attributes:
        id: Unique identifier for this game
        players: Players in join order (at most two)
        phase: Current phase of the game
        deck: Cards remaining in the deck
        discard_pile: Cards removed from play after fully defended rounds
        table: Attack slots of the current round, in the order they were laid
        trump_suit: The trump suit for this game
        trump_card: The bottom card of the deck that fixed the trump suit
        attacker_id: ID of the current attacker
        defender_id: ID of the current defender
        current_turn_player_id: ID of the player whose move is awaited
        winner_id: ID of the player who emptied their hand first
        is_draw: Whether both hands emptied at the same time
        current_round: Number of the round in progress (1-based once playing)
        rules: Rules for this game
        timestamp: Time when this state was created
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    players: List[PlayerState] = field(default_factory=list)
    phase: GamePhase = GamePhase.WAITING
    deck: Deck = field(default_factory=lambda: Deck(cards=[]))
    discard_pile: List[Card] = field(default_factory=list)
    table: List[TableSlot] = field(default_factory=list)
    trump_suit: Optional[Suit] = None
    trump_card: Optional[Card] = None
    attacker_id: Optional[str] = None
    defender_id: Optional[str] = None
    current_turn_player_id: Optional[str] = None
    winner_id: Optional[str] = None
    is_draw: bool = False
    current_round: int = 0
    rules: GameRules = field(default_factory=GameRules)
    timestamp: float = field(default_factory=lambda: time.time())

    @property
    def deck_size(self) -> int:
        """Get the number of cards left in the deck."""
        return self.deck.remaining()

    def get_player(self, player_id: str) -> Optional[PlayerState]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: str) -> Optional[int]:
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        return None

    @property
    def all_defended(self) -> bool:
        """True when the table is non-empty and every slot has been beaten."""
        return bool(self.table) and all(slot.is_defended for slot in self.table)

    @property
    def table_cards(self) -> List[Card]:
        """All cards currently on the table, slot by slot."""
        return [card for slot in self.table for card in slot.cards]

    @property
    def total_cards(self) -> int:
        """Cards in the deck, in hands, on the table and discarded."""
        return (
            self.deck.remaining()
            + sum(len(p.hand) for p in self.players)
            + len(self.table_cards)
            + len(self.discard_pile)
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the full game state to a dictionary for logging and debugging.

        This includes every hand; use the engine's per-viewer projection for
        anything sent to a client.

        Returns:
            Dictionary representation of the game state
        """
        return {
            "id": self.id,
            "phase": self.phase.name,
            "trump_suit": self.trump_suit.value if self.trump_suit else None,
            "trump_card": str(self.trump_card) if self.trump_card else None,
            "attacker_id": self.attacker_id,
            "defender_id": self.defender_id,
            "current_turn_player_id": self.current_turn_player_id,
            "deck_remaining": self.deck.remaining(),
            "discard_pile_size": len(self.discard_pile),
            "current_round": self.current_round,
            "winner_id": self.winner_id,
            "is_draw": self.is_draw,
            "timestamp": self.timestamp,
            "table": [
                {
                    "attack_card": str(slot.attack_card),
                    "defend_card": str(slot.defend_card) if slot.defend_card else None,
                }
                for slot in self.table
            ],
            "players": [
                {
                    "id": player.id,
                    "name": player.name,
                    "role": player.role.value,
                    "cards": [str(card) for card in player.hand],
                }
                for player in self.players
            ],
            "rules": {
                "hand_size": self.rules.hand_size,
                "max_table_slots": self.rules.max_table_slots,
            },
        }
