"""Websocket fan-out for push updates to dashboard clients."""
from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from observatory.date_utils import utc_now_iso

logger = logging.getLogger("observatory.realtime")

BROADCAST_TYPES = {
    "session_started",
    "session_ended",
    "execution_started",
    "execution_completed",
    "token_usage",
}


class TextSocket(Protocol):
    async def send_text(self, data: str) -> None: ...


def make_message(message_type: str, data: Any = None) -> dict[str, Any]:
    return {"type": message_type, "data": data, "timestamp": utc_now_iso()}


def parse_client_message(text: str) -> dict[str, Any] | None:
    """Decode a frame sent by a dashboard client; None unless it is a JSON object."""
    try:
        message = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return message if isinstance(message, dict) else None


class ConnectionRegistry:
    """Set of connected clients, owned by the transport layer."""

    def __init__(self) -> None:
        self._clients: set[TextSocket] = set()

    def __len__(self) -> int:
        return len(self._clients)

    def add(self, client: TextSocket) -> None:
        self._clients.add(client)
        logger.info(f"WebSocket client connected. Total clients: {len(self._clients)}")

    def remove(self, client: TextSocket) -> None:
        self._clients.discard(client)
        logger.info(f"WebSocket client disconnected. Total clients: {len(self._clients)}")

    async def broadcast(self, message: dict[str, Any]) -> int:
        """Send to every client; clients whose send fails are dropped.

        Returns the number of clients that received the message.
        """
        payload = json.dumps(message, default=str)
        delivered = 0
        for client in list(self._clients):
            try:
                await client.send_text(payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"Failed to send to client: {e}")
                self._clients.discard(client)
        return delivered
