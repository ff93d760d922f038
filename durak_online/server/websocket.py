"""
WebSocket transport for the Durak server.

Each connection is a client of the session hub. Outbound messages are put on
a per-connection queue and written by a dedicated task, so the lobby layer
never waits on a socket.
"""

import asyncio
import json
import logging
import signal
from typing import Any, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from durak_online.config import ServerConfig
from durak_online.events import EventBus
from durak_online.lobby import LobbyManager
from durak_online.server.hub import SessionHub

logger = logging.getLogger("durak_online.server")


class WebSocketServer:
    """
    WebSocket server in front of a session hub.

    Example:
        ```python
        server = WebSocketServer(load_config())
        await server.run()
        ```
    """

    def __init__(self, config: Optional[ServerConfig] = None, hub: Optional[SessionHub] = None):
        """
        Initialize the WebSocket server.

        Args:
            config: Server settings
            hub: Session hub to route messages to (built from config if None)
        """
        self.config = config or ServerConfig()
        self.hub = hub or SessionHub(LobbyManager(self.config.engine_config()))
        self.server = None
        self.running = False
        self._stopped: Optional[asyncio.Event] = None
        self._event_subscription = None

    @property
    def port(self) -> Optional[int]:
        """Port actually bound, useful when configured with port 0."""
        if self.server is None or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        """Start listening for connections."""
        if self.running:
            return

        self._stopped = asyncio.Event()
        self._event_subscription = EventBus.get_instance().on_any(self._log_event)
        self.server = await websockets.serve(
            self.handle_client, self.config.host, self.config.port
        )
        self.running = True
        logger.info(f"WebSocket server started on ws://{self.config.host}:{self.port}")

    async def run(self) -> None:
        """Start the server and serve until SIGINT or SIGTERM."""
        await self.start()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda: asyncio.create_task(self.shutdown()))

        await self._stopped.wait()

    async def shutdown(self) -> None:
        """Close every connection, every lobby and the listening socket."""
        if not self.running:
            return

        logger.info("Shutting down WebSocket server...")
        self.running = False

        self.server.close()
        await self.server.wait_closed()

        for client_id in list(self.hub.clients):
            await self.hub.disconnect_client(client_id)
        await self.hub.manager.shutdown()

        if self._event_subscription:
            self._event_subscription()
            self._event_subscription = None

        self._stopped.set()
        logger.info("WebSocket server stopped")

    async def handle_client(self, websocket) -> None:
        """
        Serve one connection until it closes.

        Args:
            websocket: WebSocket connection
        """
        outbound: asyncio.Queue = asyncio.Queue()
        writer = asyncio.create_task(self._write_loop(websocket, outbound))
        client_id = await self.hub.connect_client(send_callback=outbound.put_nowait)

        try:
            async for message in websocket:
                await self.hub.handle_client_message(client_id, message)
        except ConnectionClosed:
            pass
        except Exception as e:
            logger.warning(f"Error handling client {client_id}: {e}")
        finally:
            await self.hub.disconnect_client(client_id)
            writer.cancel()
            try:
                await writer
            except asyncio.CancelledError:
                pass

    async def _write_loop(self, websocket, outbound: asyncio.Queue) -> None:
        while True:
            message = await outbound.get()
            try:
                await websocket.send(json.dumps(message))
            except ConnectionClosed:
                return
            except Exception as e:
                logger.warning(f"Error sending message: {e}")

    @staticmethod
    def _log_event(event: Any) -> None:
        event_type, data = event
        logger.debug(f"Event {event_type}: {_summarize(data)}")


def _summarize(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k != "timestamp"}
