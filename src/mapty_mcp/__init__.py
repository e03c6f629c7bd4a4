"""
MCP Server for a map-based workout log

Provides tools to log running and cycling workouts by picking a spot on
a map, via the Model Context Protocol (MCP). Workouts persist in a local
JSON store and are listed again in later sessions.

Supports two transport modes:
- stdio: For single-user local usage (default)
- http: For HTTP server deployment
"""

import os

from fastmcp import FastMCP

from mapty_mcp import map_tool
from mapty_mcp import workouts


def create_app() -> FastMCP:
    """Create and configure the MCP app with all tools registered."""
    app = FastMCP("Map Workout Log v1.0")

    # Register map tools (load, view, focus)
    app = map_tool.register_tools(app)

    # Register workout tools (pick, submit, list, reset)
    app = workouts.register_tools(app)

    return app


def main():
    """Initialize the MCP server and run with configured transport.

    Environment variables:
    - MCP_TRANSPORT: 'stdio' (default) or 'http'
    - MCP_HOST: Host to bind to (default: '0.0.0.0')
    - MCP_PORT: Port for HTTP transport (default: 8081)
    - MAPTY_STORE_PATH: Workout store file (default: ~/.mapty/storage.json)
    """
    app = create_app()

    transport = os.environ.get("MCP_TRANSPORT", "stdio")

    if transport == "http":
        host = os.environ.get("MCP_HOST", "0.0.0.0")
        port = int(os.environ.get("MCP_PORT", "8081"))
        app.run(transport="http", host=host, port=port)
    else:
        app.run()


if __name__ == "__main__":
    main()
