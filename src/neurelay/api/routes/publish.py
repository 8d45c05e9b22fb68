"""HTTP publishing endpoints for producers that do not hold a WebSocket."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from neurelay.envelope import CHAT_MESSAGE_TYPE, DEFAULT_LOG_TYPE, ChatEnvelope

router = APIRouter(tags=["publish"])


class LogIn(BaseModel):
    # Any JSON value, same as a WebSocket "broadcast" frame.
    message: Any
    type: str = DEFAULT_LOG_TYPE


class ChatIn(BaseModel):
    id: Any = None
    username: Any = None
    message: Any = None
    timestamp: Any = None
    color: Any = None
    messageType: Any = None
    type: Any = CHAT_MESSAGE_TYPE


@router.post("/broadcast")
async def broadcast(body: LogIn, request: Request) -> dict:
    """Broadcast a log line to every connected client."""
    try:
        envelope = request.app.state.relay.broadcast_log(body.message, body.type)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return envelope.to_dict()


@router.post("/broadcast_chat")
async def broadcast_chat(body: ChatIn, request: Request) -> dict:
    """Broadcast a chat entry to every connected client."""
    envelope = ChatEnvelope.from_frame(body.model_dump(exclude_unset=True))
    try:
        return request.app.state.relay.broadcast_chat(envelope).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
