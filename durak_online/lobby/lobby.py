"""
A lobby: one Durak engine plus the participants connected to it.

All operations on a lobby's engine go through a single asyncio queue consumed
by one task, so two intents never touch the engine at the same time. After
each intent the lobby pushes the resulting messages to its participants
through their send callbacks.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from durak_online.durak.constants import RejectReason
from durak_online.engine import DurakEngine, MoveResult
from durak_online.protocol import ServerMessage

logger = logging.getLogger("durak_online.lobby")

# Callback used to push a message to one participant: fn(message_type, data)
Sink = Callable[[str, Dict[str, Any]], None]


def _discard(message_type: str, data: Dict[str, Any]) -> None:
    pass


class LobbyClosed(RuntimeError):
    """Raised for intents submitted to, or still queued in, a stopped lobby."""


class IntentType(Enum):
    """Operations a participant can ask of the engine."""

    JOIN = "join"
    ATTACK = "attack"
    DEFEND = "defend"
    PICK_UP = "pickUp"
    LEAVE = "leave"


@dataclass(frozen=True)
class Intent:
    """
    One participant's requested operation.

    Indices are kept as received; the engine rejects anything that is not a
    valid int index.
    """

    type: IntentType
    player_id: str
    name: str = ""
    card_index: Any = None
    target_slot_index: Any = None


class Lobby:
    """
    Owns one engine and serializes every operation on it.

    Attributes:
        code: Join code of the lobby
        engine: The game engine
        created_at: Time the lobby was created
    """

    def __init__(
        self,
        code: str,
        engine: Optional[DurakEngine] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.engine = engine or DurakEngine(config)
        self.created_at = time.time()
        self._participants: Dict[str, Sink] = {}
        self._queue: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None
        self._finish_announced = False

    @property
    def participants(self) -> List[str]:
        return list(self._participants)

    @property
    def is_empty(self) -> bool:
        return not self._participants

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the task that consumes intents."""
        if self.running:
            return
        if self._queue is None:
            self._queue = asyncio.Queue()
        self._task = asyncio.create_task(self._run(), name=f"lobby-{self.code}")
        logger.debug(f"Lobby {self.code} started")

    async def stop(self) -> None:
        """Stop the consumer task and fail intents still waiting in the queue."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        while self._queue is not None and not self._queue.empty():
            _, _, future = self._queue.get_nowait()
            if not future.done():
                future.set_exception(LobbyClosed(f"Lobby {self.code} closed"))

        logger.debug(f"Lobby {self.code} stopped")

    async def submit(self, intent: Intent, sink: Optional[Sink] = None) -> MoveResult:
        """
        Queue an intent and wait for the engine's answer.

        Args:
            intent: The requested operation
            sink: Send callback of the joining participant (JOIN only)

        Returns:
            The engine's result for this intent

        Raises:
            LobbyClosed: if the lobby is not running or stops before answering
        """
        if not self.running:
            raise LobbyClosed(f"Lobby {self.code} is not running")
        future = asyncio.get_running_loop().create_future()
        await self._queue.put((intent, sink, future))
        return await future

    async def _run(self) -> None:
        while True:
            intent, sink, future = await self._queue.get()
            try:
                result = self.handle(intent, sink)
            except Exception as e:
                logger.error(
                    f"Lobby {self.code}: error handling {intent.type.value}: {e}",
                    exc_info=True,
                )
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)
            finally:
                self._queue.task_done()

    def handle(self, intent: Intent, sink: Optional[Sink] = None) -> MoveResult:
        """
        Apply one intent to the engine and push the resulting messages.

        Only the lobby's consumer task calls this.
        """
        if intent.type is IntentType.JOIN:
            return self._handle_join(intent, sink)
        if intent.type is IntentType.LEAVE:
            return self._handle_leave(intent)

        engine = self.engine
        if intent.type is IntentType.ATTACK:
            result = engine.attack(intent.player_id, intent.card_index)
        elif intent.type is IntentType.DEFEND:
            result = engine.defend(
                intent.player_id, intent.card_index, intent.target_slot_index
            )
        else:
            result = engine.pick_up(intent.player_id)

        if result.ok:
            self._broadcast_state()
            self._announce_finish()
        else:
            self._send(
                intent.player_id,
                ServerMessage.REJECTED,
                {"action": intent.type.value, "reason": result.reason.value},
            )
        return result

    def _handle_join(self, intent: Intent, sink: Optional[Sink]) -> MoveResult:
        if intent.player_id in self._participants:
            return MoveResult.rejected(RejectReason.FULL)

        result = self.engine.join(intent.player_id, intent.name)
        if not result.ok:
            return result

        self._participants[intent.player_id] = sink or _discard
        message_type = (
            ServerMessage.LOBBY_CREATED
            if len(self._participants) == 1
            else ServerMessage.LOBBY_JOINED
        )
        self._send(
            intent.player_id,
            message_type,
            {"code": self.code, "playerId": intent.player_id},
        )
        self._broadcast_state()
        return result

    def _handle_leave(self, intent: Intent) -> MoveResult:
        player = self.engine.state.get_player(intent.player_id)
        result = self.engine.leave(intent.player_id)
        self._participants.pop(intent.player_id, None)
        if not result.ok:
            return result

        self._finish_announced = False
        for player_id in self.participants:
            self._send(
                player_id,
                ServerMessage.PLAYER_LEFT,
                {
                    "playerId": intent.player_id,
                    "name": player.name if player else None,
                    "message": "The other player left the game",
                },
            )
        self._broadcast_state()
        return result

    def _broadcast_state(self) -> None:
        """Send every participant their own projection of the game."""
        for player_id in self.participants:
            view = self.engine.project_state(player_id)
            self._send(player_id, ServerMessage.STATE_VIEW, view.to_dict())

    def _announce_finish(self) -> None:
        if self._finish_announced or not self.engine.is_finished():
            return
        self._finish_announced = True

        winner_id = self.engine.winner()
        winner = self.engine.state.get_player(winner_id) if winner_id else None
        data = {
            "winnerId": winner_id,
            "winnerName": winner.name if winner else None,
            "draw": self.engine.is_draw,
        }
        logger.info(f"Lobby {self.code}: game finished {data}")
        for player_id in self.participants:
            self._send(player_id, ServerMessage.FINISHED, data)

    def _send(self, player_id: str, message_type: str, data: Dict[str, Any]) -> None:
        sink = self._participants.get(player_id)
        if sink is None:
            return
        try:
            sink(message_type, data)
        except Exception as e:
            logger.warning(
                f"Lobby {self.code}: error sending {message_type} to {player_id}: {e}"
            )
