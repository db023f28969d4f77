"""
Microsoft Search Connector - Main Entry Point

FastMCP server with STDIO and SSE transport support.
"""

import argparse
import logging
from fastmcp import FastMCP

from graph_search.config import get_settings
from graph_search.tools import search_microsoft


def create_app() -> FastMCP:
    """Create and configure the MCP application."""
    mcp = FastMCP(
        name="microsoft-search",
        instructions="Search Microsoft 365 content through Microsoft Search",
    )

    mcp.mount(search_microsoft.router)

    return mcp


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Microsoft Search MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default=None,
        help="Transport protocol (default: from env)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for SSE transport (default: from env)"
    )
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(level=settings.log.level)

    transport = args.transport or settings.mcp.transport
    port = args.port or settings.mcp.port

    mcp = create_app()

    if transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(transport="sse", host=settings.mcp.host, port=port)


if __name__ == "__main__":
    main()
