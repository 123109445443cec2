# app/services/broadcaster.py
"""
Real-time fan-out to connected dashboards over WebSocket.

One Broadcaster is created at startup and stored on app.state. It owns the
set of connected observers: sockets register on connect and are removed on
disconnect, on failed delivery (the socket is then closed so the client
reconnects), or at shutdown.

Events are sent as {"type": <event_type>, "data": <payload>}. Delivery is
best effort: closed sockets are skipped, failures are logged and never reach
the caller, and a missed event is not retried (dashboards re-pull stats).
"""

import asyncio
import json
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from app.exceptions import BroadcastFailure
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Server → observer event types
ACCESS_LOG = "access_log"
ACCESS_GRANTED = "access_granted"
ACCESS_DENIED = "access_denied"
NEW_ALERT = "new_alert"
STUDENT_ADDED = "student_added"
STUDENT_DELETED = "student_deleted"


def _is_open(ws: WebSocket) -> bool:
    return (ws.client_state == WebSocketState.CONNECTED
            and ws.application_state == WebSocketState.CONNECTED)


class Broadcaster:
    def __init__(self, send_timeout: float = 2.0):
        self.send_timeout = send_timeout
        self._connections: set[WebSocket] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, ws: WebSocket):
        await ws.accept()
        self._connections.add(ws)
        logger.info(f"🔌 Dashboard connected ({self.connection_count} open)")
        await ws.send_text(json.dumps({"type": "connected"}))

    def disconnect(self, ws: WebSocket):
        if ws in self._connections:
            self._connections.discard(ws)
            logger.info(f"🔌 Dashboard disconnected ({self.connection_count} open)")

    async def handle_message(self, ws: WebSocket, raw: str):
        """Answer keep-alive pings. Nothing else from observers is acted on."""
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed WebSocket message: {raw[:100]!r}")
            return
        if isinstance(message, dict) and message.get("type") == "ping":
            await ws.send_text(json.dumps({"type": "pong"}))
        else:
            logger.debug(f"Ignoring WebSocket message: {message}")

    async def broadcast(self, event_type: str, payload: Any) -> int:
        """
        Send one event to every open observer. Never raises.
        Returns the number of observers the event was delivered to.
        """
        message = json.dumps({"type": event_type, "data": payload})
        targets = [ws for ws in list(self._connections) if _is_open(ws)]
        if not targets:
            return 0

        results = await asyncio.gather(
            *(self._deliver(ws, message) for ws in targets),
            return_exceptions=True,
        )
        delivered = 0
        for ws, result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.warning(f"[WS] Dropping observer after failed {event_type} delivery: {result}")
                await self._drop(ws)
            else:
                delivered += 1
        logger.debug(f"[WS] {event_type} → {delivered}/{len(targets)} observers")
        return delivered

    async def _deliver(self, ws: WebSocket, message: str):
        try:
            await asyncio.wait_for(ws.send_text(message), timeout=self.send_timeout)
        except Exception as e:
            raise BroadcastFailure(str(e) or type(e).__name__) from e

    async def _drop(self, ws: WebSocket):
        """Unregister and close, so the client sees the drop and reconnects."""
        self.disconnect(ws)
        try:
            await ws.close(code=1011)
        except Exception as e:
            logger.debug(f"[WS] Close after failed delivery failed: {e}")

    async def close_all(self):
        """Close every remaining socket. Called at shutdown."""
        for ws in list(self._connections):
            self.disconnect(ws)
            if _is_open(ws):
                try:
                    await ws.close()
                except RuntimeError as e:
                    logger.debug(f"[WS] Close on shutdown failed: {e}")
