"""Errors raised by the lobby layer. The session hub reports them as `lobbyError`."""


class LobbyError(Exception):
    """Base class for lobby problems the requesting client should be told about."""

    default_message = "Lobby error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidName(LobbyError):
    default_message = "Enter a name"


class InvalidLobbyCode(LobbyError):
    default_message = "Enter a lobby code"


class LobbyNotFound(LobbyError):
    default_message = "No lobby with that code"


class LobbyFull(LobbyError):
    default_message = "The lobby already has two players"


class NotInLobby(LobbyError):
    default_message = "You are not in a game"


class AlreadyInLobby(LobbyError):
    default_message = "You are already in a lobby"
