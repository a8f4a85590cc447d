#!/usr/bin/env python3
"""Main server entry point for the Real Browser MCP Server."""

import argparse
import sys

from real_browser_mcp.config import load_config
from real_browser_mcp.core.server import start_server
from real_browser_mcp.exceptions import ConfigurationError


def main():
    """
    Run the Real Browser MCP Server over streamable HTTP.

    Command-line arguments override the configuration file and environment;
    the SERVER_PORT environment variable overrides the configured port.

    Examples:
        # Start on the default port (7777)
        $ real-browser-mcp

        # Bind to localhost on another port with verbose logging
        $ real-browser-mcp --host 127.0.0.1 --port 8080 --log-level debug
    """
    parser = argparse.ArgumentParser(description="Start the Real Browser MCP Server (streamable HTTP)")
    parser.add_argument("--host", type=str, default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    parser.add_argument("--config", type=str, default=None, help="Path to a YAML or JSON config file")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["debug", "info", "warning", "error", "critical"],
        help="Logging level",
    )
    args = parser.parse_args()

    try:
        config = load_config(config_file_path=args.config)
    except ConfigurationError as e:
        print(f"Failed to start MCP server: {e.message}", file=sys.stderr)
        sys.exit(1)

    start_server(config=config, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
