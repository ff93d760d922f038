"""
Durak card game engine implementation.

This module provides the DurakEngine class, the authoritative owner of one
game's state. Every public operation is total: it returns a `MoveResult` and
leaves the state untouched when the move is rejected. The engine performs no
I/O and knows players only by their opaque ids.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import logging
import random

from durak_online.common.deck import Deck
from durak_online.durak.constants import RejectReason
from durak_online.durak.rules import attack_card_indices, defense_moves
from durak_online.durak.state import GamePhase, GameRules, GameState, Role
from durak_online.durak.transitions import MoveRejected, StateTransitionEngine
from durak_online.engine.view import StateView

logger = logging.getLogger("durak_online.engine")


@dataclass(frozen=True)
class MoveResult:
    """Outcome of an engine operation: accepted, or rejected with a reason."""

    ok: bool
    reason: Optional[RejectReason] = None

    @classmethod
    def accepted(cls) -> "MoveResult":
        return cls(ok=True)

    @classmethod
    def rejected(cls, reason: RejectReason) -> "MoveResult":
        return cls(ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok


class DurakEngine:
    """
    Engine for a two-player game of Durak.

    Example:
        ```python
        engine = DurakEngine(config={"seed": 42})
        engine.join("p1", "Alice")
        engine.join("p2", "Bob")
        result = engine.attack("p1", 0)
        if not result:
            print(result.reason)
        view = engine.project_state("p2")
        ```
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        game_id: Optional[str] = None,
        deck: Optional[Deck] = None,
    ):
        """
        Initialize the Durak engine.

        Args:
            config: Configuration options for the game
            game_id: ID for the game (generated if None)
            deck: Pre-built deck for the first game (shuffled if None)
        """
        # Apply default configuration
        default_config = {
            "hand_size": 6,
            "max_table_slots": 6,
            "seed": None,  # None seeds from the OS
        }

        # Merge with provided config
        if config:
            default_config.update(config)

        self.config = default_config

        self.rules = GameRules(
            hand_size=self.config["hand_size"],
            max_table_slots=self.config["max_table_slots"],
        )
        self._rng = random.Random(self.config["seed"])

        initial = GameState(rules=self.rules)
        if game_id is not None:
            initial = GameState(id=game_id, rules=self.rules)

        self.state = StateTransitionEngine.initialize_game(
            initial, self.rules, rng=self._rng, deck=deck
        )
        logger.info(f"Game {self.state.id} created, trump {self.state.trump_suit}")

    @property
    def game_id(self) -> str:
        return self.state.id

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    @property
    def player_ids(self) -> List[str]:
        return [p.id for p in self.state.players]

    def join(self, player_id: str, name: str) -> MoveResult:
        """
        Register a player; the second join deals and starts the game.

        Rejected with FULL when two players are already registered.
        """
        return self._apply("join", StateTransitionEngine.add_player, player_id, name)

    def leave(self, player_id: str) -> MoveResult:
        """Remove a player; the game falls back to WAITING with a fresh deck."""
        return self._apply(
            "leave", StateTransitionEngine.remove_player, player_id, rng=self._rng
        )

    def attack(self, player_id: str, card_index: int) -> MoveResult:
        """Lay the card at `card_index` of the attacker's hand on the table."""
        return self._apply(
            "attack", StateTransitionEngine.play_attack_card, player_id, card_index
        )

    def defend(
        self, player_id: str, card_index: int, target_slot_index: int
    ) -> MoveResult:
        """Beat the table slot at `target_slot_index` with a card from hand."""
        return self._apply(
            "defend",
            StateTransitionEngine.play_defense_card,
            player_id,
            card_index,
            target_slot_index,
        )

    def pick_up(self, player_id: str) -> MoveResult:
        """Defender takes every card on the table."""
        return self._apply("pick_up", StateTransitionEngine.take_cards, player_id)

    def is_finished(self) -> bool:
        """True once a player has emptied their hand with the deck exhausted."""
        return self.state.phase == GamePhase.FINISHED

    def winner(self) -> Optional[str]:
        """ID of the winning player, or None while playing or on a draw."""
        if not self.is_finished():
            return None
        return self.state.winner_id

    @property
    def is_draw(self) -> bool:
        return self.is_finished() and self.state.is_draw

    def project_state(self, for_player_id: Optional[str]) -> StateView:
        """Build the read-only view of the game for one player."""
        return StateView.from_state(self.state, for_player_id)

    def valid_actions(self, player_id: str) -> Dict[str, List[Any]]:
        """
        Get the moves a player could make right now.

        Returns:
            Dictionary mapping action names to lists of valid parameters:
            "attack" to card indices, "defend" to [card_index, slot_index]
            pairs, "pick_up" to an empty list. Empty when it is not the
            player's turn.
        """
        state = self.state
        if state.phase != GamePhase.PLAYING:
            return {}
        if state.current_turn_player_id != player_id:
            return {}

        player = state.get_player(player_id)
        if player is None:
            return {}

        valid_actions: Dict[str, List[Any]] = {}

        if player.role is Role.ATTACKER:
            indices = attack_card_indices(
                player.hand, state.table, state.rules.max_table_slots
            )
            if indices:
                valid_actions["attack"] = indices

        elif player.role is Role.DEFENDER:
            moves = defense_moves(player.hand, state.table, state.trump_suit)
            if moves:
                valid_actions["defend"] = [list(m) for m in moves]
            valid_actions["pick_up"] = []

        return valid_actions

    def _apply(self, action: str, transition: Callable, *args, **kwargs) -> MoveResult:
        """Run a transition, keeping the new state only if it was accepted."""
        try:
            new_state = transition(self.state, *args, **kwargs)
        except MoveRejected as e:
            logger.debug(f"Game {self.state.id}: {action}{args} rejected: {e.reason}")
            return MoveResult.rejected(e.reason)

        self.state = new_state
        logger.debug(f"Game {self.state.id}: {action}{args} accepted")
        if action in ("join", "leave"):
            logger.info(
                f"Game {self.state.id}: {action} by {args[0]}, "
                f"{len(self.state.players)} player(s), phase {self.state.phase.name}"
            )
        return MoveResult.accepted()
