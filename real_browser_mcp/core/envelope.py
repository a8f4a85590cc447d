"""Uniform tool response envelope.

Every `tools/call` answer leaves the dispatcher as
``{"content": [{"type": "text", "text": ...}, ...], "isError": bool}``.
"""
from typing import Any, Dict

from pydantic import BaseModel

from real_browser_mcp.constants import TOOL_FAILURE_PREFIX


def text_response(text: str) -> Dict[str, Any]:
    """Build a successful envelope holding one text block."""
    return {"content": [{"type": "text", "text": text}]}


def failure_message(error: BaseException) -> str:
    """Describe a failure for humans.

    Uses the exception's ``message`` attribute when it carries one, then its
    string form, then its class name.
    """
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    text = str(error)
    return text if text else error.__class__.__name__


def failure_response(error: BaseException) -> Dict[str, Any]:
    """Build the error envelope for a failed lookup or handler execution."""
    return {
        "content": [{"type": "text", "text": f"{TOOL_FAILURE_PREFIX}{failure_message(error)}"}],
        "isError": True,
    }


def normalize_result(result: Any) -> Dict[str, Any]:
    """Pass a handler's envelope through.

    Handlers are trusted to return the envelope shape; pydantic results such
    as `mcp.types.CallToolResult` are dumped to the same wire form.
    """
    if isinstance(result, BaseModel):
        return result.model_dump(by_alias=True, mode="json", exclude_none=True)
    return result
