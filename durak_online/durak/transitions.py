"""
State transition functions for the Durak card game.

This module provides pure functions for transitioning between game states,
without modifying the original state objects. An illegal move raises
`MoveRejected` carrying the reason code; because no state object is ever
mutated, the caller's state is untouched when that happens.
"""

from dataclasses import replace
from enum import Enum
from typing import Any, List, Optional, Tuple
import random
import time

from durak_online.common.deck import Deck
from durak_online.events import EventBus, EngineEventType
from durak_online.durak.constants import MAX_PLAYERS, RejectReason
from durak_online.durak.rules import (
    can_beat,
    can_throw_in,
    is_valid_index,
)
from durak_online.durak.state import (
    GamePhase,
    GameRules,
    GameState,
    PlayerState,
    Role,
    TableSlot,
)


class MoveRejected(Exception):
    """Raised by a transition when the requested operation is not legal now."""

    def __init__(self, reason: RejectReason, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message or reason.value)


def _emit(state: GameState, event_type: Enum, **data: Any) -> None:
    payload = {"game_id": state.id, "timestamp": time.time()}
    payload.update(data)
    EventBus.get_instance().emit(event_type, payload)


class StateTransitionEngine:
    """
    Pure functions for state transitions in Durak.

    This class contains static methods that implement game state transitions.
    Each method takes a state and returns a new state, without modifying the
    original.
    """

    @staticmethod
    def initialize_game(
        state: Optional[GameState] = None,
        rules: Optional[GameRules] = None,
        rng: Optional[random.Random] = None,
        deck: Optional[Deck] = None,
    ) -> GameState:
        """
        Prepare a game with a freshly shuffled deck.

        Registered players are kept but their hands are emptied and their roles
        cleared, so the next second join starts a complete game.

        Args:
            state: Current game state (or a new one if None)
            rules: Rules for the game (or the state's rules if None)
            rng: Random source for the shuffle
            deck: Pre-built deck to use instead of shuffling a new one

        Returns:
            New game state in the WAITING phase
        """
        state = state or GameState()
        game_rules = rules or state.rules
        new_deck = deck if deck is not None else Deck(rng=rng)

        players = [replace(p, hand=[], role=Role.NONE) for p in state.players]

        new_state = replace(
            state,
            players=players,
            phase=GamePhase.WAITING,
            deck=new_deck,
            discard_pile=[],
            table=[],
            trump_suit=new_deck.trump_suit,
            trump_card=new_deck.trump_card,
            attacker_id=None,
            defender_id=None,
            current_turn_player_id=None,
            winner_id=None,
            is_draw=False,
            current_round=0,
            rules=game_rules,
            timestamp=time.time(),
        )

        _emit(
            new_state,
            EngineEventType.GAME_CREATED,
            trump_suit=new_state.trump_suit.value if new_state.trump_suit else None,
            deck_size=new_deck.remaining(),
        )

        return new_state

    @staticmethod
    def add_player(state: GameState, player_id: str, name: str) -> GameState:
        """
        Add a player to the game, starting it when the second player arrives.

        Raises:
            MoveRejected: FULL if two players are already registered
        """
        if len(state.players) >= MAX_PLAYERS:
            raise MoveRejected(RejectReason.FULL)

        new_player = PlayerState(id=player_id, name=name)
        new_players = list(state.players)
        new_players.append(new_player)

        new_state = replace(state, players=new_players)

        _emit(
            new_state,
            EngineEventType.PLAYER_JOINED,
            player_id=player_id,
            player_name=name,
        )

        if len(new_players) == MAX_PLAYERS:
            return StateTransitionEngine.start_game(new_state)
        return new_state

    @staticmethod
    def remove_player(
        state: GameState, player_id: str, rng: Optional[random.Random] = None
    ) -> GameState:
        """
        Remove a player from the game.

        With fewer than two players left the game goes back to WAITING and a
        new deck is prepared; no winner is declared here.

        Raises:
            MoveRejected: PLAYER_NOT_FOUND for an unknown id
        """
        player_index = state.player_index(player_id)
        if player_index is None:
            raise MoveRejected(RejectReason.PLAYER_NOT_FOUND)

        new_players = list(state.players)
        removed_player = new_players.pop(player_index)
        new_state = replace(state, players=new_players)

        _emit(
            new_state,
            EngineEventType.PLAYER_LEFT,
            player_id=removed_player.id,
            player_name=removed_player.name,
        )

        if len(new_players) < MAX_PLAYERS:
            new_state = StateTransitionEngine.initialize_game(new_state, rng=rng)

        return new_state

    @staticmethod
    def start_game(state: GameState) -> GameState:
        """
        Deal the opening hands and assign roles by join order.

        The first-joined player is dealt first and attacks first.
        """
        attacker, defender = state.players[0], state.players[1]

        deck = state.deck.copy()
        new_players = StateTransitionEngine._refill_hands(
            state, list(state.players), deck, [attacker.id, defender.id]
        )
        new_players = [
            replace(p, role=Role.ATTACKER if p.id == attacker.id else Role.DEFENDER)
            for p in new_players
        ]

        new_state = replace(
            state,
            players=new_players,
            deck=deck,
            phase=GamePhase.PLAYING,
            attacker_id=attacker.id,
            defender_id=defender.id,
            current_turn_player_id=attacker.id,
            current_round=1,
        )

        _emit(
            new_state,
            EngineEventType.GAME_STARTED,
            attacker_id=attacker.id,
            defender_id=defender.id,
            trump_suit=new_state.trump_suit.value if new_state.trump_suit else None,
        )
        _emit(
            new_state,
            EngineEventType.ROUND_STARTED,
            round_number=new_state.current_round,
            attacker=attacker.name,
            defender=defender.name,
        )

        return new_state

    @staticmethod
    def play_attack_card(
        state: GameState, player_id: str, card_index: int
    ) -> GameState:
        """
        Lay an attack card.

        Any card opens an empty table; further cards must match a rank already
        on the table and the table holds at most `max_table_slots` slots.

        Args:
            state: Current game state
            player_id: ID of the attacker
            card_index: Index of the card in the attacker's hand

        Returns:
            New game state with the card on the table and the defender to move
        """
        player_idx, player = StateTransitionEngine._require_turn(
            state, player_id, Role.ATTACKER
        )

        if not is_valid_index(card_index, len(player.hand)):
            raise MoveRejected(RejectReason.INVALID_CARD_INDEX)

        card = player.hand[card_index]

        if state.table:
            if len(state.table) >= state.rules.max_table_slots:
                raise MoveRejected(RejectReason.TABLE_FULL)
            if not can_throw_in(card, state.table):
                raise MoveRejected(RejectReason.RANK_MISMATCH)

        new_hand = list(player.hand)
        new_hand.pop(card_index)
        new_players = list(state.players)
        new_players[player_idx] = replace(player, hand=new_hand)

        new_table = list(state.table)
        new_table.append(TableSlot(attack_card=card, attacker_id=player_id))

        new_state = replace(
            state,
            players=new_players,
            table=new_table,
            current_turn_player_id=state.defender_id,
        )

        _emit(
            new_state,
            EngineEventType.PLAYER_ACTION,
            action="attack",
            player_id=player_id,
            player_name=player.name,
            card=str(card),
            slot_index=len(new_table) - 1,
            remaining_hand_size=len(new_hand),
        )

        return StateTransitionEngine.check_game_end(new_state)

    @staticmethod
    def play_defense_card(
        state: GameState, player_id: str, card_index: int, target_slot_index: int
    ) -> GameState:
        """
        Beat an open attack slot.

        When every slot is beaten the round closes: the table is discarded,
        roles swap and both hands are refilled. Otherwise the attacker gets the
        move back to add a card; an attacker with nothing to add is simply
        rejected on further attacks.

        Args:
            state: Current game state
            player_id: ID of the defender
            card_index: Index of the card in the defender's hand
            target_slot_index: Index of the table slot to beat

        Returns:
            New game state after the defence
        """
        player_idx, player = StateTransitionEngine._require_turn(
            state, player_id, Role.DEFENDER
        )

        if not is_valid_index(card_index, len(player.hand)):
            raise MoveRejected(RejectReason.INVALID_CARD_INDEX)
        if not is_valid_index(target_slot_index, len(state.table)):
            raise MoveRejected(RejectReason.INVALID_TARGET_INDEX)

        slot = state.table[target_slot_index]
        if slot.is_defended:
            raise MoveRejected(RejectReason.ALREADY_DEFENDED)

        card = player.hand[card_index]
        if not can_beat(slot.attack_card, card, state.trump_suit):
            raise MoveRejected(RejectReason.CANNOT_BEAT)

        new_hand = list(player.hand)
        new_hand.pop(card_index)
        new_players = list(state.players)
        new_players[player_idx] = replace(player, hand=new_hand)

        new_table = list(state.table)
        new_table[target_slot_index] = replace(
            slot, defend_card=card, defender_id=player_id
        )

        new_state = replace(state, players=new_players, table=new_table)

        _emit(
            new_state,
            EngineEventType.PLAYER_ACTION,
            action="defend",
            player_id=player_id,
            player_name=player.name,
            card=str(card),
            against_card=str(slot.attack_card),
            slot_index=target_slot_index,
            remaining_hand_size=len(new_hand),
        )

        if new_state.all_defended:
            new_state = StateTransitionEngine.end_round(new_state, defender_won=True)
        else:
            new_state = replace(new_state, current_turn_player_id=state.attacker_id)

        return StateTransitionEngine.check_game_end(new_state)

    @staticmethod
    def take_cards(state: GameState, player_id: str) -> GameState:
        """
        Defender takes every card on the table.

        Roles stay as they are: the attacker attacks again next round.

        Args:
            state: Current game state
            player_id: ID of the defender

        Returns:
            New game state after the pick-up and refill
        """
        player_idx, player = StateTransitionEngine._require_turn(
            state, player_id, Role.DEFENDER
        )

        taken = state.table_cards
        new_hand = list(player.hand) + taken
        new_players = list(state.players)
        new_players[player_idx] = replace(player, hand=new_hand)

        new_state = replace(state, players=new_players, table=[])

        _emit(
            new_state,
            EngineEventType.PLAYER_ACTION,
            action="pick_up",
            player_id=player_id,
            player_name=player.name,
            card_count=len(taken),
            new_hand_size=len(new_hand),
        )

        new_state = StateTransitionEngine.end_round(new_state, defender_won=False)
        return StateTransitionEngine.check_game_end(new_state)

    @staticmethod
    def end_round(state: GameState, defender_won: bool) -> GameState:
        """
        Close the current round.

        Args:
            state: Current game state
            defender_won: Whether the defender beat every slot

        Returns:
            New game state with a clear table, the next roles and refilled hands
        """
        new_discard_pile = list(state.discard_pile)
        if defender_won:
            new_discard_pile.extend(state.table_cards)
            next_attacker_id, next_defender_id = state.defender_id, state.attacker_id
        else:
            next_attacker_id, next_defender_id = state.attacker_id, state.defender_id

        new_players = [
            replace(
                p,
                role=Role.ATTACKER if p.id == next_attacker_id else Role.DEFENDER,
            )
            for p in state.players
        ]

        # Attacker refills first
        deck = state.deck.copy()
        new_players = StateTransitionEngine._refill_hands(
            state, new_players, deck, [next_attacker_id, next_defender_id]
        )

        new_state = replace(
            state,
            players=new_players,
            deck=deck,
            discard_pile=new_discard_pile,
            table=[],
            attacker_id=next_attacker_id,
            defender_id=next_defender_id,
            current_turn_player_id=next_attacker_id,
            current_round=state.current_round + 1,
        )

        _emit(
            new_state,
            EngineEventType.ROUND_ENDED,
            round_number=state.current_round,
            defender_won=defender_won,
            next_attacker_id=next_attacker_id,
            next_defender_id=next_defender_id,
            deck_remaining=deck.remaining(),
        )

        return new_state

    @staticmethod
    def check_game_end(state: GameState) -> GameState:
        """
        Finish the game once the deck is empty and a hand is empty.

        The empty-handed player wins; if both hands are empty it is a draw.
        """
        if state.phase != GamePhase.PLAYING or not state.deck.is_empty():
            return state

        empty_handed = [p for p in state.players if not p.hand]
        if not empty_handed:
            return state

        is_draw = len(empty_handed) > 1
        winner = None if is_draw else empty_handed[0]

        new_state = replace(
            state,
            phase=GamePhase.FINISHED,
            winner_id=winner.id if winner else None,
            is_draw=is_draw,
            current_turn_player_id=None,
        )

        _emit(
            new_state,
            EngineEventType.GAME_ENDED,
            winner_id=new_state.winner_id,
            winner_name=winner.name if winner else None,
            is_draw=is_draw,
            round_count=state.current_round,
        )

        return new_state

    @staticmethod
    def _require_turn(
        state: GameState, player_id: str, role: Role
    ) -> Tuple[int, PlayerState]:
        """Find the acting player and check phase, turn and role, in that order."""
        if state.phase != GamePhase.PLAYING:
            raise MoveRejected(RejectReason.GAME_NOT_IN_PROGRESS)

        player_idx = state.player_index(player_id)
        if player_idx is None:
            raise MoveRejected(RejectReason.PLAYER_NOT_FOUND)

        if state.current_turn_player_id != player_id:
            raise MoveRejected(RejectReason.NOT_YOUR_TURN)

        player = state.players[player_idx]
        if player.role is not role:
            raise MoveRejected(RejectReason.WRONG_ROLE)

        return player_idx, player

    @staticmethod
    def _refill_hands(
        state: GameState, players: List[PlayerState], deck: Deck, order: List[str]
    ) -> List[PlayerState]:
        """Deal each player in `order` back up to the hand size. Mutates `deck`."""
        new_players = list(players)
        for player_id in order:
            for i, player in enumerate(new_players):
                if player.id != player_id:
                    continue
                dealt = deck.deal(state.rules.hand_size - len(player.hand))
                if dealt:
                    new_players[i] = replace(player, hand=list(player.hand) + dealt)
                    _emit(
                        state,
                        EngineEventType.CARD_DEALT,
                        player_id=player_id,
                        count=len(dealt),
                        deck_remaining=deck.remaining(),
                    )
        return new_players
