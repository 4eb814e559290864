"""WebSocket endpoint for the demo live price feed."""

import logging
from typing import Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/ws", tags=["websocket"])


class ConnectionManager:
    """Tracks open price-feed connections."""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.add(websocket)
        logger.info(f"WebSocket connected ({len(self.active_connections)} open)")

    def disconnect(self, websocket: WebSocket):
        self.active_connections.discard(websocket)
        logger.info(f"WebSocket disconnected ({len(self.active_connections)} open)")

    async def broadcast(self, message: dict) -> int:
        """Send to every connection, dropping any that fail. Returns the number reached."""
        disconnected = []
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.debug(f"Dropping WebSocket after failed send: {e}")
                disconnected.append(connection)

        for connection in disconnected:
            self.active_connections.discard(connection)

        return len(self.active_connections)


manager = ConnectionManager()


@router.websocket("/prices")
async def price_feed(websocket: WebSocket):
    await manager.connect(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket)
