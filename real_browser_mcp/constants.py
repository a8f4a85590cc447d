"""
Global constants and enumerations for the Real Browser MCP Server.

This module defines the closed set of tool identifiers, the protocol message
kinds the dispatcher understands, and the fixed strings that appear on the
wire (health body, failure prefix, session header). Keeping them here means
the registry, the routing table and the HTTP layer can never disagree on a
spelling.

Example usage:
    ```python
    from real_browser_mcp.constants import ToolName, EMOJI_MAP

    if ToolName(name) is ToolName.NAVIGATE:
        ...
    ```
"""
from enum import Enum
from typing import Dict


class ToolName(str, Enum):
    """
    Enumeration of every tool the server can execute.

    The string values are the stable identifiers clients use in
    `tools/call` requests. Every member must have exactly one descriptor in
    `tools.definitions` and exactly one route in `tools.routes`; the
    dispatcher refuses to start otherwise.
    """
    BROWSER_INIT = "browser_init"
    NAVIGATE = "navigate"
    GET_CONTENT = "get_content"
    CLICK = "click"
    TYPE = "type"
    WAIT = "wait"
    BROWSER_CLOSE = "browser_close"
    SOLVE_CAPTCHA = "solve_captcha"
    RANDOM_SCROLL = "random_scroll"
    FIND_SELECTOR = "find_selector"
    SAVE_CONTENT_AS_MARKDOWN = "save_content_as_markdown"


class MessageKind(str, Enum):
    """JSON-RPC methods answered by the request dispatcher."""
    INITIALIZE = "initialize"
    PING = "ping"
    LIST_TOOLS = "tools/list"
    LIST_RESOURCES = "resources/list"
    LIST_PROMPTS = "prompts/list"
    CALL_TOOL = "tools/call"


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


SERVER_NAME = "real-browser-mcp-server"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7777
PORT_ENV_VAR = "SERVER_PORT"

MCP_ENDPOINT = "/mcp"
HEALTH_ENDPOINT = "/health"
HEALTH_MESSAGE = "Server is healthy"
SESSION_HEADER = "Mcp-Session-Id"

TOOL_FAILURE_PREFIX = "❌ Tool execution failed: "
INTERNAL_SERVER_ERROR = "Internal Server Error"


# Emoji mapping by log type and action
EMOJI_MAP: Dict[str, str] = {
    "start": "🚀",
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "debug": "🔍",
    "critical": "🔥",

    # Component-specific emojis
    "server": "🖥️",
    "session": "🔑",
    "request": "📤",
    "response": "📥",
    "tool": "🛠️",
    "config": "🔧",
    "browser": "🌐",
    "shutdown": "🛑",
    "tools": "📋",
    "content": "💡",
}
