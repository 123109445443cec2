# app/routers/realtime.py
"""
WebSocket /ws — real-time channel for dashboards.
Server pushes access_log / access_granted / access_denied / new_alert events;
clients may send {"type": "ping"} and get {"type": "pong"} back.
When API_KEY is set, clients must pass it as ?api_key=... or an X-API-Key header.
"""

from fastapi import APIRouter, WebSocket, status

from app.config import settings
from app.services.broadcaster import Broadcaster
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.websocket("/ws")
async def realtime_channel(websocket: WebSocket):
    if settings.API_KEY:
        api_key = websocket.headers.get("X-API-Key") or websocket.query_params.get("api_key")
        if api_key != settings.API_KEY:
            logger.warning("[WS] Rejected connection with invalid or missing API key")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

    broadcaster: Broadcaster = websocket.app.state.broadcaster
    await broadcaster.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            text = message.get("text")
            if text is None:
                logger.debug("[WS] Ignoring non-text frame")
                continue
            await broadcaster.handle_message(websocket, text)
    finally:
        broadcaster.disconnect(websocket)
