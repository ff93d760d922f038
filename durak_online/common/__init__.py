"""
Card primitives shared by the Durak engine: suits, ranks, cards and the deck.
"""

from durak_online.common.card import Card, Rank, Suit
from durak_online.common.deck import Deck

__all__ = ["Card", "Rank", "Suit", "Deck"]
