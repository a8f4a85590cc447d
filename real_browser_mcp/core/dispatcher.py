"""JSON-RPC request dispatcher for the MCP protocol.

The dispatcher is stateless per message. Handshake and catalog queries are
answered from static data; `tools/call` is routed by exact name to one
handler and its outcome is always shaped into the tool envelope.
"""
import json
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

from mcp.types import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    Implementation,
    ServerCapabilities,
    Tool,
)
from rich.markup import escape

from real_browser_mcp.constants import MessageKind, ToolName
from real_browser_mcp.core.envelope import failure_message, failure_response, normalize_result
from real_browser_mcp.core.routing import ToolRoute, validate_routing_table
from real_browser_mcp.exceptions import InvalidParamsError, ToolNotFoundError
from real_browser_mcp.tools.definitions import CAPABILITIES, SERVER_INFO, TOOLS
from real_browser_mcp.utils import get_logger

logger = get_logger("real_browser_mcp.dispatcher")

JSONRPC_VERSION = "2.0"


def jsonrpc_result(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def jsonrpc_error(request_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json", exclude_none=True)


class RequestDispatcher:
    """Routes decoded protocol messages to their answers."""

    def __init__(
        self,
        routes: Mapping[ToolName, ToolRoute],
        tools: Iterable[Tool] = TOOLS,
        server_info: Implementation = SERVER_INFO,
        capabilities: ServerCapabilities = CAPABILITIES,
    ):
        """Initialize the dispatcher.

        Args:
            routes: Handler binding for every `ToolName`
            tools: Descriptors advertised by `tools/list`
            server_info: Identity returned in the handshake
            capabilities: Capability set returned in the handshake

        Raises:
            RoutingTableError: If `routes` and `tools` do not cover `ToolName` exactly
        """
        self.tools: List[Tool] = list(tools)
        self.routes = validate_routing_table(routes, self.tools)
        self.server_info = server_info
        self.capabilities = capabilities
        self._tool_list = [_dump(tool) for tool in self.tools]
        self._methods: Dict[MessageKind, Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]] = {
            MessageKind.INITIALIZE: self.initialize,
            MessageKind.PING: self.ping,
            MessageKind.LIST_TOOLS: self.list_tools,
            MessageKind.LIST_RESOURCES: self.list_resources,
            MessageKind.LIST_PROMPTS: self.list_prompts,
            MessageKind.CALL_TOOL: self.call_tool,
        }
        logger.debug(f"Dispatcher ready with {len(self.routes)} routes")

    async def dispatch(self, message: Any) -> Optional[Dict[str, Any]]:
        """Answer one JSON-RPC message.

        Args:
            message: Decoded JSON value

        Returns:
            A JSON-RPC response, or None for notifications and client responses
        """
        if not isinstance(message, dict) or message.get("jsonrpc") != JSONRPC_VERSION:
            request_id = message.get("id") if isinstance(message, dict) else None
            return jsonrpc_error(request_id, INVALID_REQUEST, "Invalid Request")

        method = message.get("method")
        if method is None and ("result" in message or "error" in message):
            return None
        if not isinstance(method, str):
            return jsonrpc_error(message.get("id"), INVALID_REQUEST, "Invalid Request")

        if "id" not in message:
            logger.debug(f"Notification received: {method}")
            return None

        request_id = message["id"]
        try:
            kind = MessageKind(method)
        except ValueError:
            return jsonrpc_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        params = message.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return jsonrpc_error(request_id, INVALID_PARAMS, "Invalid params: expected an object")

        try:
            result = await self._methods[kind](params)
        except InvalidParamsError as e:
            return jsonrpc_error(request_id, INVALID_PARAMS, e.message)
        return jsonrpc_result(request_id, result)

    async def initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Echo the caller's protocol version with our identity and capabilities."""
        logger.info(f"Initialize request received: {escape(json.dumps(params, default=str))}", emoji_key="session")
        if "protocolVersion" not in params:
            raise InvalidParamsError("Invalid params: protocolVersion is required")
        return {
            "protocolVersion": params["protocolVersion"],
            "capabilities": _dump(self.capabilities),
            "serverInfo": _dump(self.server_info),
        }

    async def ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    async def list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        logger.debug("Tools list requested", emoji_key="tools")
        return {"tools": list(self._tool_list)}

    async def list_resources(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"resources": []}

    async def list_prompts(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"prompts": []}

    async def call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Route a tool invocation and normalize its outcome.

        Never raises for tool-level problems: unknown names and handler
        failures both come back as an ``isError`` envelope.
        """
        name = params.get("name")
        arguments = params.get("arguments")
        logger.info(
            f"Tool call received: {escape(str(name))} with args: {escape(json.dumps(arguments, default=str))}",
            emoji_key="request",
        )

        start_time = time.time()
        try:
            route = self._lookup(name)
            result = await route.invoke(arguments)
        except Exception as e:
            logger.error(f"Tool {escape(str(name))} failed: {escape(failure_message(e))}", tool=name)
            return failure_response(e)

        logger.success(f"Tool {escape(str(name))} completed", tool=name, time=time.time() - start_time)
        return normalize_result(result)

    def _lookup(self, name: Any) -> ToolRoute:
        try:
            tool_name = ToolName(name)
        except (ValueError, TypeError) as e:
            raise ToolNotFoundError(str(name)) from e
        return self.routes[tool_name]
