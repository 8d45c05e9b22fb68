"""Neurelay — real-time log and chat broadcast relay over WebSockets.

Library API::

    from neurelay import NeuralRelay

    relay = NeuralRelay(port=3000)
    relay.run()

In-process publishers can broadcast directly::

    relay.relay.broadcast_log("build started")
"""

from __future__ import annotations

import asyncio
import logging

from neurelay.config import Config
from neurelay.envelope import ChatEnvelope, LogEnvelope
from neurelay.relay import Relay

__all__ = ["NeuralRelay", "Relay", "Config", "LogEnvelope", "ChatEnvelope"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging the same way for the CLI and the library runner."""
    logging.basicConfig(format=LOG_FORMAT, level=level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class NeuralRelay:
    """High-level API for running the relay server as a library.

    Args:
        port: Listening port. Defaults to ``PORT`` from env/.env, else 3000.
        host: Bind address.
        history_size: Capacity of each history buffer.
    """

    def __init__(
        self,
        port: int | None = None,
        host: str | None = None,
        history_size: int | None = None,
    ):
        self.config = Config.from_args(port=port, host=host, history_size=history_size)
        errors = self.config.validate()
        if errors:
            raise ValueError("; ".join(errors))
        self.relay = Relay(
            history_size=self.config.history_size,
            replay_delay=self.config.replay_delay,
            welcome_message=self.config.welcome_message,
        )

    def run(self) -> None:
        """Start the server (blocking) until interrupted."""
        from neurelay.api.app import create_api, serve

        configure_logging(self.config.log_level)
        logger = logging.getLogger(__name__)

        logger.info("Starting Neural Terminal relay with log history...")
        app = create_api(self.relay)
        asyncio.run(serve(app, host=self.config.host, port=self.config.port))
