"""
Tests for the Durak game state models.
"""

from durak_online.common.card import Card, Rank, Suit
from durak_online.common.deck import Deck
from durak_online.durak.state import (
    GamePhase,
    GameRules,
    GameState,
    PlayerState,
    Role,
    TableSlot,
)


class TestDurakState:
    """Tests for the immutable state dataclasses."""

    def test_game_state_initialization(self):
        """Test that GameState initializes with the correct default values."""
        state = GameState()

        assert state.id is not None
        assert state.players == []
        assert state.phase == GamePhase.WAITING
        assert state.trump_suit is None
        assert state.trump_card is None
        assert state.attacker_id is None
        assert state.defender_id is None
        assert state.current_turn_player_id is None
        assert state.table == []
        assert state.deck_size == 0
        assert state.discard_pile == []
        assert state.rules == GameRules(hand_size=6, max_table_slots=6)
        assert state.current_round == 0
        assert state.winner_id is None
        assert state.is_draw is False
        assert state.timestamp > 0

    def test_player_state_initialization(self):
        """Test that PlayerState initializes with the correct default values."""
        player = PlayerState()

        assert player.id is not None
        assert player.name == "Player"
        assert player.hand == []
        assert player.role is Role.NONE
        assert player.card_count == 0

    def test_table_slot(self):
        """Test the defended flag and card list of a table slot."""
        attack = Card(Suit.HEARTS, Rank.SIX)
        defend = Card(Suit.HEARTS, Rank.NINE)

        slot = TableSlot(attack_card=attack, attacker_id="a")
        assert not slot.is_defended
        assert slot.cards == [attack]

        beaten = TableSlot(attack, "a", defend, "d")
        assert beaten.is_defended
        assert beaten.cards == [attack, defend]
        assert beaten.to_dict() == {
            "attackCard": {"suit": "hearts", "rank": "6"},
            "attackerId": "a",
            "defendCard": {"suit": "hearts", "rank": "9"},
            "defenderId": "d",
        }

    def test_all_defended(self):
        """An empty table is never 'all defended'."""
        six = Card(Suit.HEARTS, Rank.SIX)
        nine = Card(Suit.HEARTS, Rank.NINE)

        assert not GameState().all_defended
        assert not GameState(table=[TableSlot(six, "a")]).all_defended
        assert GameState(table=[TableSlot(six, "a", nine, "d")]).all_defended

    def test_lookup_helpers(self):
        """Test player lookup by id."""
        alice = PlayerState(id="a", name="Alice", role=Role.ATTACKER)
        bob = PlayerState(id="b", name="Bob", role=Role.DEFENDER)
        state = GameState(
            players=[alice, bob],
            attacker_id="a",
            defender_id="b",
            current_turn_player_id="b",
        )

        assert state.get_player("b") is bob
        assert state.get_player("zzz") is None
        assert state.player_index("b") == 1
        assert state.player_index("zzz") is None

    def test_total_cards(self):
        """Cards are counted across deck, hands, table and discard pile."""
        deck = Deck(cards=[Card(Suit.CLUBS, Rank.SIX), Card(Suit.CLUBS, Rank.SEVEN)])
        state = GameState(
            deck=deck,
            players=[PlayerState(id="a", hand=[Card(Suit.SPADES, Rank.ACE)])],
            table=[
                TableSlot(
                    Card(Suit.HEARTS, Rank.SIX), "a", Card(Suit.HEARTS, Rank.TEN), "b"
                )
            ],
            discard_pile=[Card(Suit.DIAMONDS, Rank.KING)],
        )

        assert state.total_cards == 6
        assert state.table_cards == [
            Card(Suit.HEARTS, Rank.SIX),
            Card(Suit.HEARTS, Rank.TEN),
        ]

    def test_to_dict(self):
        """The debug dictionary includes every hand."""
        state = GameState(
            players=[PlayerState(id="a", name="Alice", hand=[Card(Suit.SPADES, Rank.ACE)])]
        )
        data = state.to_dict()

        assert data["phase"] == "WAITING"
        assert data["players"][0]["cards"] == ["A of ♠"]
