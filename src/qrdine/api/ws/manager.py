from __future__ import annotations

import asyncio
import json
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)

CASHIER_CHANNEL = "cashier"


class ConnectionManager:
    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = defaultdict(set)
        self._socket_to_channel: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def register(self, websocket: WebSocket, channel: str) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections[channel].add(websocket)
            self._socket_to_channel[websocket] = channel
        logger.info("ws_client_connected", extra={"channel": channel})

    async def unregister(self, websocket: WebSocket) -> None:
        async with self._lock:
            channel = self._socket_to_channel.pop(websocket, None)
            if channel is None:
                return
            sockets = self._connections.get(channel)
            if not sockets:
                return
            sockets.discard(websocket)
            if not sockets:
                self._connections.pop(channel, None)
        logger.info("ws_client_disconnected", extra={"channel": channel})

    def connection_count(self, channel: str) -> int:
        return len(self._connections.get(channel, ()))

    async def broadcast(self, channel: str, message_json_str: str) -> None:
        async with self._lock:
            targets = list(self._connections.get(channel, set()))

        stale: list[WebSocket] = []
        for websocket in targets:
            try:
                await websocket.send_text(message_json_str)
            except Exception:
                stale.append(websocket)

        for websocket in stale:
            await self.unregister(websocket)

    async def broadcast_json(self, channel: str, payload: dict[str, Any]) -> None:
        await self.broadcast(channel, json.dumps(payload, default=str))
