from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .config import get_settings
from .logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings().server
    parser = argparse.ArgumentParser(description="caldav-bridge command line interface.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    mcp_parser = subparsers.add_parser("mcp", help="Start the FastMCP server exposing caldav:// tools.")
    mcp_parser.add_argument("--host", default=settings.host)
    mcp_parser.add_argument("--port", type=int, default=settings.mcp_port)

    api_parser = subparsers.add_parser("api", help="Start the FastAPI server exposing the same tools over HTTP.")
    api_parser.add_argument("--host", default=settings.host)
    api_parser.add_argument("--port", type=int, default=settings.api_port)

    read_parser = subparsers.add_parser("read", help="Fetch a single caldav:// resource and print it.")
    read_parser.add_argument("uri")
    read_parser.add_argument("--timeout-ms", type=int, default=None)

    subparsers.add_parser("templates", help="Print the caldav:// URI templates as JSON.")

    return parser


async def _read(uri: str, timeout_ms: Optional[int]) -> int:
    from .api import api_state

    try:
        response = await api_state.resources.read(uri, timeout_ms=timeout_ms)
    finally:
        await api_state.context.aclose()
    print(response.content)
    return 0 if response.status == 200 else 1


def main(argv: Optional[List[str]] = None) -> None:
    configure_logging()
    logger = logging.getLogger(__name__)
    parser = build_parser()
    args = parser.parse_args(argv)
    logger.debug("caldav-bridge CLI command: %s", args.command)

    if args.command == "mcp":
        from .services.mcp import run_mcp_server

        run_mcp_server(host=args.host, port=args.port)
    elif args.command == "api":
        from .services.http import run_local_server

        run_local_server(host=args.host, port=args.port)
    elif args.command == "read":
        sys.exit(asyncio.run(_read(args.uri, args.timeout_ms)))
    elif args.command == "templates":
        from .api import call_api

        print(json.dumps(asyncio.run(call_api("list_resource_templates")), indent=2))
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()
