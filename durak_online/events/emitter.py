"""
Event system for the Durak engine.

This module provides the event bus that state transitions and the lobby layer
publish game events on. Listeners subscribe by event type, and the server
layer can listen to everything for logging.
"""

from collections import defaultdict
from typing import Any, Dict, Callable, Union
import threading
import logging
from enum import Enum

# Create a logger for the event system
logger = logging.getLogger("durak_online.events")


class EventEmitter:
    """
    Event emitter for the Durak engine.

    Features:
    - Subscription per event type, by name or by `EngineEventType`
    - Subscription to all events with the event type passed to the handler
    - Thread-safe listener registry; a failing handler never breaks emission
    """

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners = defaultdict(list)
        self._global_listeners = []
        self._listener_lock = threading.RLock()

    def on(self, event_type: Union[str, Enum], callback: Callable) -> Callable:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to subscribe to (string or enum)
            callback: Function to call when event occurs, signature: fn(event_data)

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        if isinstance(event_type, Enum):
            event_type = event_type.name

        with self._listener_lock:
            self._listeners[event_type].append(callback)

        def unsubscribe():
            with self._listener_lock:
                handlers = self._listeners[event_type]
                if callback in handlers:
                    handlers.remove(callback)

        return unsubscribe

    def on_any(self, callback: Callable) -> Callable:
        """
        Subscribe to all events.

        Args:
            callback: Function to call for any event, signature: fn((event_type, event_data))

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        with self._listener_lock:
            self._global_listeners.append(callback)

        def unsubscribe():
            with self._listener_lock:
                if callback in self._global_listeners:
                    self._global_listeners.remove(callback)

        return unsubscribe

    def emit(self, event_type: Union[str, Enum], data: Dict[str, Any]) -> None:
        """
        Emit an event to all registered listeners.

        Args:
            event_type: The type of event to emit
            data: The data to include with the event
        """
        if isinstance(event_type, Enum):
            event_type = event_type.name

        with self._listener_lock:
            handlers_to_call = [
                (callback, data) for callback in self._listeners.get(event_type, [])
            ]
            handlers_to_call.extend(
                (callback, (event_type, data)) for callback in self._global_listeners
            )

        # Call handlers outside of the lock to avoid deadlocks
        for callback, args in handlers_to_call:
            try:
                callback(args)
            except Exception as e:
                logger.error(
                    f"Error in event handler for {event_type}: {e}", exc_info=True
                )


class EventBus:
    """
    Global event bus for the application.

    This singleton class provides a centralized event bus that can be accessed
    from anywhere in the application.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        """
        Get the singleton instance of the EventBus.

        Returns:
            EventEmitter instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class EngineEventType(Enum):
    """
    Event types published by the Durak engine and lobby layer.
    """

    # Game lifecycle
    GAME_CREATED = "game_created"
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"
    ROUND_STARTED = "round_started"
    ROUND_ENDED = "round_ended"

    # Player events
    PLAYER_JOINED = "player_joined"
    PLAYER_LEFT = "player_left"
    PLAYER_ACTION = "player_action"

    # Card events
    CARD_DEALT = "card_dealt"

    # Lobby events
    LOBBY_CREATED = "lobby_created"
    LOBBY_CLOSED = "lobby_closed"
