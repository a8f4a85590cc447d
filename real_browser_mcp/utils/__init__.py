"""Utility functions for the Real Browser MCP Server."""
from real_browser_mcp.utils.logging import (
    BrowserLogger,
    build_logging_config,
    configure_loggers,
    console,
    get_logger,
)

__all__ = [
    "BrowserLogger",
    "build_logging_config",
    "configure_loggers",
    "console",
    "get_logger",
]
