"""Browser tools: descriptors, handlers and their routing table."""
from real_browser_mcp.tools.browser_manager import BrowserManager
from real_browser_mcp.tools.definitions import CAPABILITIES, SERVER_INFO, TOOLS, TOOLS_BY_NAME
from real_browser_mcp.tools.routes import build_routing_table

__all__ = [
    "BrowserManager",
    "CAPABILITIES",
    "SERVER_INFO",
    "TOOLS",
    "TOOLS_BY_NAME",
    "build_routing_table",
]
