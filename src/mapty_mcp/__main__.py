"""
Entry point for running mapty_mcp as a module.

Usage:
    python -m mapty_mcp                    # Run with stdio transport
    python -m mapty_mcp --http             # Run with HTTP transport
    python -m mapty_mcp --http --port 9000 # Run HTTP on custom port
"""

import argparse
import os
from pathlib import Path

from mapty_mcp import create_app, session_factory


def main():
    parser = argparse.ArgumentParser(
        description="Map Workout Log MCP Server - log runs and rides on a map"
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Use http transport instead of stdio"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8081,
        help="Port for HTTP transport (default: 8081)"
    )
    parser.add_argument(
        "--store",
        default=None,
        help="Workout store file (default: $MAPTY_STORE_PATH or ~/.mapty/storage.json)"
    )

    args = parser.parse_args()

    if args.store:
        # session_factory reads the path at import time
        os.environ["MAPTY_STORE_PATH"] = args.store
        session_factory.STORE_PATH = Path(args.store).expanduser()

    if args.http:
        os.environ["MCP_TRANSPORT"] = "http"
        os.environ["MCP_HOST"] = args.host
        os.environ["MCP_PORT"] = str(args.port)
    else:
        os.environ["MCP_TRANSPORT"] = "stdio"

    app = create_app()

    if args.http:
        print(f"Starting map workout MCP server on http://{args.host}:{args.port}/mcp")
        app.run(transport="http", host=args.host, port=args.port)
    else:
        app.run()


if __name__ == "__main__":
    main()
