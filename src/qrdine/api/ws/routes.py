from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from qrdine.api.ws.manager import CASHIER_CHANNEL, ConnectionManager

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws/cashier")
async def cashier_websocket(websocket: WebSocket) -> None:
    manager: ConnectionManager = websocket.app.state.ws_manager
    await manager.register(websocket=websocket, channel=CASHIER_CHANNEL)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.unregister(websocket)
    except Exception:
        logger.exception("ws_connection_error", extra={"channel": CASHIER_CHANNEL})
        await manager.unregister(websocket)
