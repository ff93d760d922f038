"""
Move legality rules for Durak.

These are plain functions over cards and table slots so they can be shared by
the state transitions and by the engine's valid-action listing.
"""

from typing import List, Optional, Tuple

from durak_online.common.card import Card, Suit
from durak_online.durak.state import TableSlot


def can_beat(attack_card: Card, defense_card: Card, trump_suit: Optional[Suit]) -> bool:
    """
    Check whether `defense_card` beats `attack_card`.

    A card beats another of the same suit with a strictly higher rank, and a
    trump beats any non-trump card regardless of rank.
    """
    if attack_card.suit == defense_card.suit:
        return defense_card.rank.rank_value > attack_card.rank.rank_value
    return defense_card.suit == trump_suit and attack_card.suit != trump_suit


def can_throw_in(card: Card, table: List[TableSlot]) -> bool:
    """Check whether `card` may be added to a non-empty table (rank already present)."""
    ranks = {c.rank for slot in table for c in slot.cards}
    return card.rank in ranks


def attack_card_indices(
    hand: List[Card], table: List[TableSlot], max_table_slots: int
) -> List[int]:
    """Indices of the cards in `hand` that may be laid as an attack right now."""
    if not table:
        return list(range(len(hand)))
    if len(table) >= max_table_slots:
        return []
    return [i for i, card in enumerate(hand) if can_throw_in(card, table)]


def defense_moves(
    hand: List[Card], table: List[TableSlot], trump_suit: Optional[Suit]
) -> List[Tuple[int, int]]:
    """All (card_index, slot_index) pairs that would beat an open slot."""
    moves = []
    for slot_index, slot in enumerate(table):
        if slot.is_defended:
            continue
        for card_index, card in enumerate(hand):
            if can_beat(slot.attack_card, card, trump_suit):
                moves.append((card_index, slot_index))
    return moves


def is_valid_index(index, length: int) -> bool:
    """True when `index` is a plain int in range(length)."""
    if isinstance(index, bool) or not isinstance(index, int):
        return False
    return 0 <= index < length
