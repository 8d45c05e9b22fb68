"""WebSocket endpoint: the relay channel itself."""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from neurelay.relay import Relay
from neurelay.transport import WebSocketConnection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/")
async def ws_relay(ws: WebSocket) -> None:
    """Join the relay.

    Connect: ws://host:port/
    Receives a welcome frame, then the log backlog, then every broadcast.
    Frames sent by the client are dispatched by their ``action`` field.
    """
    relay: Relay = ws.app.state.relay

    await ws.accept()
    conn = WebSocketConnection(ws)
    conn.start()
    relay.connect(conn)

    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            relay.handle_frame(conn, raw)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.debug("WebSocket error", exc_info=True)
    finally:
        relay.disconnect(conn)
        await conn.close()
