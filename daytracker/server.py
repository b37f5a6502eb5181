"""
Process entry point: pick and initialize storage, then serve the API.
"""

from __future__ import annotations

import argparse
import logging
import socket

import uvicorn

from daytracker.app import create_app
from daytracker.config import get_settings
from daytracker.dependencies import build_day_store, describe_store
from daytracker.service import DayRecordService

logger = logging.getLogger(__name__)


def get_local_ip() -> str:
    """Best-effort LAN address so the tracker can be opened from a phone."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            # No packets are sent; connect only selects the outbound interface.
            sock.connect(("192.0.2.1", 80))
            return sock.getsockname()[0]
    except OSError:
        return "localhost"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Day tracker server")
    parser.add_argument("--host", type=str, default=None, help="Bind address")
    parser.add_argument("--port", type=int, default=None, help="Listen port")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    try:
        settings = get_settings()
        host = args.host or settings.host
        port = args.port or settings.port
        store = build_day_store(settings)
        store.initialize()
        app = create_app(DayRecordService(store), settings)
    except Exception:
        logger.exception("Failed to start server")
        return 1

    logger.info("Day tracker running on port %d using %s", port, describe_store(store))
    if not settings.use_turso:
        logger.info("Local:   http://localhost:%d", port)
        logger.info("Network: http://%s:%d", get_local_ip(), port)

    try:
        uvicorn.run(app, host=host, port=port)
    except Exception:
        logger.exception("Server stopped unexpectedly")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
