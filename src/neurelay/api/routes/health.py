"""Health and status endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(request: Request) -> dict:
    """Relay health: connected clients and history sizes."""
    return request.app.state.relay.status()
