from __future__ import annotations

import logging

from fastmcp import FastMCP

INSTRUCTIONS = (
    "caldav-bridge exposes read-only CalDAV calendars through caldav:// URIs. "
    "Call list_resource_templates to see the URI shapes, then read_caldav_resource to fetch "
    "iCalendar data or the calendar listing at caldav://{principal}/_meta/calendars."
)

logger = logging.getLogger(__name__)


def build_mcp_server() -> FastMCP:
    from ..api import get_api_functions

    server = FastMCP(name="caldav-bridge", instructions=INSTRUCTIONS)
    # Every registered API function becomes an MCP tool.
    for api_function in get_api_functions():
        logger.debug("Registering MCP tool: %s", api_function.name)
        server.tool(
            api_function.func,
            name=api_function.name,
            description=api_function.description,
            tags=set(api_function.tags),
        )
    return server


def run_mcp_server(host: str = "127.0.0.1", port: int = 8765) -> None:
    server = build_mcp_server()
    logger.info("Starting MCP server on %s:%s", host, port)
    server.run("streamable-http", host=host, port=port)
