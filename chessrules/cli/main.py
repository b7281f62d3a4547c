from __future__ import annotations

import argparse
import os
from typing import List, Optional

import uvicorn

from ..protocol.http.app import create_app


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the chess rules HTTP API")
    parser.add_argument(
        "--host",
        default=os.environ.get("CHESSRULES_HOST", DEFAULT_HOST),
        help=f"Bind address (env CHESSRULES_HOST, default: {DEFAULT_HOST})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("CHESSRULES_PORT", DEFAULT_PORT)),
        help=f"Bind port (env CHESSRULES_PORT, default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("CHESSRULES_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging level (env CHESSRULES_LOG_LEVEL, default: INFO)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    uvicorn.run(
        create_app(log_level=args.log_level),
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
