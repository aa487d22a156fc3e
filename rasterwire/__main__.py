"""Entry point for running the rasterwire service via `python -m rasterwire`."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from .config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve images as raw RGB pixel arrays")
    parser.add_argument(
        "--ipaddr",
        dest="host",
        default=settings.host,
        help="The address the http server should bind to",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=settings.port,
        help="The port the http server should listen on",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "rasterwire.main:app",
        host=args.host,
        port=args.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
