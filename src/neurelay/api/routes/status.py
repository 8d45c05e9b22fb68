"""Human-readable status page."""

from __future__ import annotations

import html
from datetime import datetime

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from neurelay.relay import Relay

router = APIRouter(tags=["status"])

# Log entries shown under "Recent Logs".
RECENT_LOGS = 10


def _clock(timestamp: str) -> str:
    """HH:MM:SS part of an ISO timestamp, or the raw value if unparseable."""
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%H:%M:%S")
    except (AttributeError, ValueError):
        return str(timestamp)


def render_status_page(relay: Relay) -> str:
    status = relay.status()
    lines = "".join(
        f"<div>[{html.escape(_clock(entry.timestamp))}] {html.escape(str(entry.message))}</div>"
        for entry in relay.log_history.recent(RECENT_LOGS)
    )
    return f"""<html>
  <head><title>Neural Terminal Relay</title></head>
  <body>
    <h1>Neural Terminal Relay</h1>
    <p>Status: Running</p>
    <p>Connected clients: {status["clients"]}</p>
    <p>Log history: {status["logHistory"]} logs</p>
    <p>Chat history: {status["chatHistory"]} messages</p>
    <h2>Recent Logs:</h2>
    <div style="background: #000; color: #0f0; padding: 10px; font-family: monospace; max-height: 300px; overflow-y: auto;">
      {lines}
    </div>
  </body>
</html>
"""


@router.get("/", response_class=HTMLResponse)
async def status_page(request: Request) -> HTMLResponse:
    """Status page with counts and the most recent log lines."""
    return HTMLResponse(render_status_page(request.app.state.relay))
