"""Entry point for the relay server."""

import argparse
import asyncio
import logging
import sys

from neurelay import configure_logging
from neurelay.api.app import create_api, serve
from neurelay.config import Config
from neurelay.relay import Relay


def main():
    """Parse arguments, validate config and run the relay."""
    parser = argparse.ArgumentParser(
        description="Neurelay — real-time log and chat broadcast relay",
    )
    parser.add_argument("--port", type=int, help="Listening port (env: PORT)")
    parser.add_argument("--host", help="Bind address (env: HOST)")
    parser.add_argument(
        "--history-size",
        type=int,
        help="Entries kept per history buffer (env: HISTORY_SIZE)",
    )
    parser.add_argument(
        "--replay-delay-ms",
        type=int,
        help="Delay before replaying history to a new client (env: REPLAY_DELAY_MS)",
    )
    args = parser.parse_args()

    config = Config.from_args(
        port=args.port,
        host=args.host,
        history_size=args.history_size,
        replay_delay_ms=args.replay_delay_ms,
    )

    configure_logging(config.log_level)
    logger = logging.getLogger(__name__)

    errors = config.validate()
    if errors:
        for err in errors:
            logger.error(err)
        sys.exit(1)

    logger.info("Starting Neural Terminal relay with log history...")
    relay = Relay(
        history_size=config.history_size,
        replay_delay=config.replay_delay,
        welcome_message=config.welcome_message,
    )
    app = create_api(relay)
    try:
        asyncio.run(serve(app, host=config.host, port=config.port))
    except KeyboardInterrupt:
        pass
    logger.info("Relay stopped")


if __name__ == "__main__":
    main()
