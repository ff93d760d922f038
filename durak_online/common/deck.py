"""
This module contains the Deck class, which represents the 36-card Durak pack.

The bottom of the pack is index 0 and the top is the end of the list. Cards are
dealt from the top; the bottom card fixes the trump suit for the whole game.

>>> deck = Deck(rng=random.Random(7))
>>> deck.size
36
>>> len(deck.deal(6))
6
>>> deck.remaining()
30
"""

import random
from typing import List, Optional

from durak_online.common.card import Card, Rank, Suit


class Deck:
    """
    A class representing a shuffled Durak pack with a fixed trump suit.
    """

    # Precompute the default deck
    _default_deck = [Card(suit, rank) for suit in Suit for rank in Rank]

    def __init__(
        self,
        cards: Optional[List[Card]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize a Deck instance.

        :param cards: Cards to use, bottom first (optional). They are taken in the
                      given order and not shuffled. If not provided, the full pack
                      is built and shuffled.
        :param rng: Random source for the shuffle (optional).
        """
        self._rng = rng or random.Random()
        if cards is None:
            self.cards: List[Card] = self.initialize_default_deck()
            self.shuffle()
        else:
            self.cards = list(cards)
        self.trump_card: Optional[Card] = self.cards[0] if self.cards else None

    def initialize_default_deck(self) -> List[Card]:
        """
        Construct the cross product of all suits and ranks.

        :return: A list of the 36 cards in suit-major order.
        """
        return self._default_deck.copy()

    def shuffle(self) -> "Deck":
        """
        Apply a Fisher-Yates permutation to the remaining cards.

        Walks from the last index down to 1, swapping each position with a
        uniformly chosen index in [0, i].
        """
        cards = self.cards
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]
        return self

    @property
    def trump_suit(self) -> Optional[Suit]:
        return self.trump_card.suit if self.trump_card else None

    def deal(self, num_cards: int = 1) -> List[Card]:
        """
        Remove up to `num_cards` cards from the top of the deck.

        Returns fewer cards (possibly none) once the deck runs out; it never raises.
        """
        dealt = []
        while len(dealt) < num_cards and self.cards:
            dealt.append(self.cards.pop())
        return dealt

    def remaining(self) -> int:
        """Return the number of cards left in the deck."""
        return len(self.cards)

    @property
    def size(self) -> int:
        return len(self.cards)

    def is_empty(self) -> bool:
        return len(self.cards) == 0

    def copy(self) -> "Deck":
        """Return an independent deck with the same cards, trump and random source."""
        clone = Deck(self.cards, rng=self._rng)
        clone.trump_card = self.trump_card
        return clone

    def __eq__(self, other):
        if isinstance(other, Deck):
            return self.cards == other.cards and self.trump_card == other.trump_card
        return NotImplemented

    def __len__(self) -> int:
        return len(self.cards)

    def __repr__(self) -> str:
        return f"Deck({[repr(card) for card in self.cards]})"

    def __str__(self) -> str:
        return f"Deck of {len(self.cards)} cards"
