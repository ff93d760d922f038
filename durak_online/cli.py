"""
Command-line entry point for the Durak server.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from durak_online.config import ConfigError, ServerConfig, load_config
from durak_online.server import WebSocketServer

logger = logging.getLogger("durak_online")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Two-player Durak server")
    parser.add_argument("--host", type=str, default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for reproducible deals"
    )
    return parser


async def serve(config: ServerConfig) -> None:
    """Build the server inside the running loop and serve until stopped."""
    server = WebSocketServer(config)
    await server.run()


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, configure logging and serve until interrupted."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(
            {
                "host": args.host,
                "port": args.port,
                "log_level": args.log_level,
                "seed": args.seed,
            }
        )
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.log_level_number,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except OSError as e:
        logger.error(f"Could not start server: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
