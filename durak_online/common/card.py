"""
This module defines the `Suit`, `Rank`, and `Card` classes, which are used to represent
the cards of a 36-card Durak pack.

- `Suit`: An enum representing the four suits: Hearts, Diamonds, Clubs, and Spades.

- `Rank`: An enum representing the nine ranks of the short pack, Six through Ace.
The enum values follow the strict rank order used for same-suit beat comparisons.

- `Card`: An immutable value representing a playing card. A card has a suit and a
rank, and converts to and from the JSON-friendly form sent over the wire.

This module is part of the `durak_online` package.
"""

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Dict


@unique
class Suit(Enum):
    """
    Enum for suits in a card deck.
    """

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]

    def __str__(self) -> str:
        return self.symbol


_SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}


@unique
class Rank(Enum):
    """
    Enum for ranks in a Durak deck, lowest first.
    """

    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def rank_value(self) -> int:
        """The position of the rank in the beat order (Six lowest, Ace highest)."""
        return self.value

    @property
    def rank_str(self) -> str:
        """A string representation of the rank, as used on the wire."""
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING, Rank.ACE):
            return self.name[0]
        return str(self.value)

    @classmethod
    def from_str(cls, value: str) -> "Rank":
        """
        Look up a rank by its short string form.

        >>> Rank.from_str("Q")
        <Rank.QUEEN: 12>
        """
        for rank in cls:
            if rank.rank_str == str(value).strip().upper():
                return rank
        raise ValueError(f"Invalid rank: {value!r}")

    def __str__(self) -> str:
        return self.rank_str


@dataclass(frozen=True)
class Card:
    """
    Class representing a playing card.

    >>> card = Card(Suit.HEARTS, Rank.TEN)
    >>> print(card)
    10 of ♥
    >>> card.to_dict()
    {'suit': 'hearts', 'rank': '10'}
    """

    suit: Suit
    rank: Rank

    def __post_init__(self):
        if not isinstance(self.suit, Suit):
            raise TypeError(f"Invalid suit: {self.suit}")
        if not isinstance(self.rank, Rank):
            raise TypeError(f"Invalid rank: {self.rank}")

    def to_dict(self) -> Dict[str, str]:
        """Convert the card to its wire representation."""
        return {"suit": self.suit.value, "rank": self.rank.rank_str}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        """
        Build a card from its wire representation.

        :raises ValueError: if the suit or rank is unknown.
        """
        return cls(Suit(data["suit"]), Rank.from_str(data["rank"]))

    def __repr__(self) -> str:
        return f"Card(Suit.{self.suit.name}, Rank.{self.rank.name})"

    def __str__(self) -> str:
        return f"{self.rank.rank_str} of {self.suit}"
