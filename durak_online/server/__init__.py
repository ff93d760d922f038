"""
Network layer: the session hub and its WebSocket transport.
"""

from durak_online.server.hub import ConnectedClient, SessionHub
from durak_online.server.websocket import WebSocketServer

__all__ = ["ConnectedClient", "SessionHub", "WebSocketServer"]
