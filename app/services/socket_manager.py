"""
WebSocket connection registry for discussion events.

Every connected client receives broadcasts; clients that joined a discussion
room also receive events scoped to that discussion. A send failure drops the
dead connection and is logged; it never propagates to the HTTP request that
triggered the event.
"""
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self.rooms: dict[int, set[WebSocket]] = defaultdict(set)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.debug(f"Socket connected ({len(self.active_connections)} active)")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        for room_id in list(self.rooms):
            self.rooms[room_id].discard(websocket)
            if not self.rooms[room_id]:
                del self.rooms[room_id]
        logger.debug(f"Socket disconnected ({len(self.active_connections)} active)")

    def join(self, websocket: WebSocket, discussion_id: int) -> None:
        self.rooms[discussion_id].add(websocket)

    def leave(self, websocket: WebSocket, discussion_id: int) -> None:
        members = self.rooms.get(discussion_id)
        if members is None:
            return
        members.discard(websocket)
        if not members:
            del self.rooms[discussion_id]

    async def _send(self, targets: list[WebSocket], event: str, payload: Any) -> None:
        message = {"event": event, "data": jsonable_encoder(payload)}
        for connection in targets:
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f"Dropping socket after failed '{event}' send: {e}")
                self.disconnect(connection)

    async def broadcast(self, event: str, payload: Any) -> None:
        """Send an event to every connected client."""
        await self._send(list(self.active_connections), event, payload)

    async def broadcast_to_room(self, discussion_id: int, event: str, payload: Any) -> None:
        """Send an event to the clients that joined a discussion."""
        await self._send(list(self.rooms.get(discussion_id, ())), event, payload)


manager = ConnectionManager()
