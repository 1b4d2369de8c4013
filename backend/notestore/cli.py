"""
NoteStore command line entry point.

    notestore -h 127.0.0.1 -p 3000 -c ./cache

-h/--host, -p/--port and -c/--cache are required; -h is taken by the host
option, so usage is printed with --help only.
"""

import argparse
import sys
from typing import List, Optional

import uvicorn
from pydantic import ValidationError

from notestore import __version__
from notestore.config import Settings
from notestore.main import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notestore",
        description="Serve plain-text notes stored as files in a directory.",
        add_help=False,
    )
    parser.add_argument("-h", "--host", required=True, help="Server host")
    parser.add_argument("-p", "--port", required=True, type=int, help="Server port")
    parser.add_argument("-c", "--cache", required=True, help="Path to the notes directory")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)",
    )
    parser.add_argument("--help", action="help", help="Show this message and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    return Settings(
        host=args.host,
        port=args.port,
        storage_root=args.cache,
        log_level=args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        parser.error(f"invalid configuration:\n{e}")

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main(sys.argv[1:])
