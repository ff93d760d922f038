"""Durak-specific constants and rejection reason codes."""

from enum import Enum

# Cards each player is dealt up to at the start and after every round
HAND_SIZE = 6

# Maximum number of attack slots on the table in one round
MAX_TABLE_SLOTS = 6

# Two-player game only
MAX_PLAYERS = 2


class RejectReason(Enum):
    """
    Reason codes for operations the engine refuses.

    The values are the strings sent to the client in a `rejected` message.
    """

    NOT_YOUR_TURN = "NotYourTurn"
    WRONG_ROLE = "WrongRole"
    INVALID_CARD_INDEX = "InvalidCardIndex"
    INVALID_TARGET_INDEX = "InvalidTargetIndex"
    RANK_MISMATCH = "RankMismatch"
    CANNOT_BEAT = "CannotBeat"
    ALREADY_DEFENDED = "AlreadyDefended"
    TABLE_FULL = "TableFull"
    GAME_NOT_IN_PROGRESS = "GameNotInProgress"
    PLAYER_NOT_FOUND = "PlayerNotFound"
    FULL = "Full"

    def __str__(self) -> str:
        return self.value
