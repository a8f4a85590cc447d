"""Exception hierarchy for the Real Browser MCP Server.

Tool-level failures (`ToolError` and its subclasses) are always converted to
an `isError` envelope by the dispatcher. Transport-level failures
(`TransportError`) carry the HTTP status the boundary answers with.
"""
from typing import Any, Dict, Optional


class RealBrowserError(Exception):
    """Base exception for all server errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize the error.

        Args:
            message: Human-readable description of the failure
            details: Additional structured context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(RealBrowserError):
    """Raised when configuration cannot be loaded or validated."""


class ToolError(RealBrowserError):
    """Raised by a tool handler when its operation fails."""

    def __init__(self, message: str, tool_name: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.tool_name = tool_name


class ToolInputError(ToolError):
    """Raised when the arguments passed to a tool fail validation."""

    def __init__(
        self,
        message: str,
        param_name: Optional[str] = None,
        tool_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, tool_name=tool_name, details=details)
        self.param_name = param_name


class ToolNotFoundError(ToolError):
    """Raised when a call names a tool that is not in the routing table."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", tool_name=tool_name)


class RoutingTableError(RealBrowserError):
    """Raised at startup when the registry and the routing table diverge."""


class BrowserError(RealBrowserError):
    """Raised by the browser manager when the browser cannot be driven."""


class BrowserNotInitializedError(BrowserError):
    """Raised when a tool needs a page but no browser has been started."""

    def __init__(self):
        super().__init__("Browser not initialized. Call browser_init first.")


class TransportError(RealBrowserError):
    """Raised when an HTTP exchange cannot be bound, decoded or answered."""

    status_code: int = 500
    jsonrpc_code: int = -32603

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class MessageDecodeError(TransportError):
    """Raised when the request body is not a decodable protocol message."""

    status_code = 500
    jsonrpc_code = -32700


class SessionRequiredError(TransportError):
    """Raised when a non-initialize message arrives without a session id."""

    status_code = 400
    jsonrpc_code = -32000

    def __init__(self):
        super().__init__("Bad Request: Mcp-Session-Id header is required")


class SessionNotFoundError(TransportError):
    """Raised when a message references a session this server never issued."""

    status_code = 404
    jsonrpc_code = -32001

    def __init__(self, session_id: str):
        super().__init__("Session not found", details={"session_id": session_id})
        self.session_id = session_id


class InvalidParamsError(RealBrowserError):
    """Raised when a protocol message carries unusable `params`."""
