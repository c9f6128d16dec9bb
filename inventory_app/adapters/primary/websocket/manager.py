"""
WebSocket connection manager for realtime change notifications.

Keeps every connected client and fans out change and toast messages to all
of them. Services run in FastAPI's thread pool, so messages published from
a worker thread are handed to the event loop with
``asyncio.run_coroutine_threadsafe``.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Registry of open websocket connections.

    A client may connect more than once (several browser tabs); each
    connection receives every broadcast.
    """

    def __init__(self):
        self.connections: List[WebSocket] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def connect(self, websocket: WebSocket):
        """
        Accept the connection and remember the running loop.

        Args:
            websocket: Incoming WebSocket
        """
        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        self.connections.append(websocket)
        logger.info(f"Realtime client connected ({len(self.connections)} open)")

    def disconnect(self, websocket: WebSocket):
        if websocket in self.connections:
            self.connections.remove(websocket)
            logger.info(f"Realtime client disconnected ({len(self.connections)} open)")

    async def broadcast(self, message: Dict[str, Any]):
        """
        Send a JSON message to every client. Clients that fail are dropped.

        Args:
            message: Dictionary with the message to send
        """
        payload = jsonable_encoder(message)
        for websocket in list(self.connections):
            try:
                await websocket.send_json(payload)
            except Exception as e:
                logger.warning(f"Error sending realtime message: {e}")
                self.disconnect(websocket)

    def publish_threadsafe(self, message: Dict[str, Any]):
        """Schedule a broadcast from any thread. A no-op until a client has connected."""
        loop = self._loop
        if loop is None or loop.is_closed() or not self.connections:
            return
        asyncio.run_coroutine_threadsafe(self.broadcast(message), loop)


# Global manager instance
manager = ConnectionManager()
