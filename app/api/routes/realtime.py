"""
WebSocket channel for live discussion updates.

Clients connect to /ws/discussions and send
{"action": "join" | "leave", "discussionId": <id>} to follow a thread.
Every client receives newDiscussion; messageReceived only reaches clients
that joined the thread.
"""
import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.socket_manager import manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])

ACK_EVENTS = {"join": "joined", "leave": "left"}


@router.websocket("/ws/discussions")
async def discussions_socket(websocket: WebSocket):
    await manager.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                data = None
            action = data.get("action") if isinstance(data, dict) else None
            discussion_id = data.get("discussionId") if isinstance(data, dict) else None

            if action not in ("join", "leave") or not isinstance(discussion_id, int) or isinstance(discussion_id, bool):
                await websocket.send_json({"event": "error", "data": {"message": "Invalid socket message"}})
                continue

            if action == "join":
                manager.join(websocket, discussion_id)
            else:
                manager.leave(websocket, discussion_id)
            await websocket.send_json({"event": ACK_EVENTS[action], "data": {"discussionId": discussion_id}})

    except WebSocketDisconnect:
        logger.debug("Discussion socket closed by client")
    finally:
        manager.disconnect(websocket)
