"""
Event system for the Durak engine.

This package provides the event bus the game transitions and the lobby layer
publish on.
"""

from durak_online.events.emitter import (
    EventEmitter,
    EventBus,
    EngineEventType,
)

__all__ = ["EventEmitter", "EventBus", "EngineEventType"]
