"""
WebSocket endpoint for realtime change notifications.

Clients receive ``{"type": "change", ...}`` whenever a table changes and
``{"type": "toast", ...}`` when an operation fails, and re-fetch as needed.
"""
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from .manager import manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/changes")
async def changes_websocket_endpoint(websocket: WebSocket):
    """
    Expected client messages:
        {"action": "ping"}  ->  {"action": "pong"}

    Anything else is ignored.
    """
    await manager.connect(websocket)
    await websocket.send_json({"action": "connected", "data": {"message": "Subscribed to changes"}})

    try:
        while True:
            data = await websocket.receive_json()
            if isinstance(data, dict) and data.get("action") == "ping":
                await websocket.send_json({"action": "pong"})
    except WebSocketDisconnect:
        manager.disconnect(websocket)
