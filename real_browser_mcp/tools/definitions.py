"""Static catalog of the tools this server advertises.

Descriptors are built once at import time and never mutated. The order of
`TOOLS` is the order clients see in `tools/list`.
"""
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from mcp.types import (
    Implementation,
    PromptsCapability,
    ResourcesCapability,
    ServerCapabilities,
    Tool,
    ToolsCapability,
)

from real_browser_mcp import __version__
from real_browser_mcp.constants import SERVER_NAME, ToolName

SERVER_INFO = Implementation(name=SERVER_NAME, version=__version__)

# Resources and prompts are declared so clients may ask; both lists stay empty.
CAPABILITIES = ServerCapabilities(
    tools=ToolsCapability(listChanged=False),
    resources=ResourcesCapability(subscribe=False, listChanged=False),
    prompts=PromptsCapability(listChanged=False),
)


def _schema(properties: Dict[str, Any], required: List[str] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


_SELECTOR = {"type": "string", "description": "CSS selector of the target element"}

TOOLS: List[Tool] = [
    Tool(
        name=ToolName.BROWSER_INIT.value,
        description=(
            "Initialize a new Chromium instance with anti-detection defaults. "
            "Must be called before any other browser tool."
        ),
        inputSchema=_schema({
            "headless": {"type": "boolean", "description": "Run without a visible window", "default": False},
            "proxy": {"type": "string", "description": "Proxy server URL, e.g. http://host:port"},
            "executablePath": {"type": "string", "description": "Custom Chrome/Chromium binary"},
            "userAgent": {"type": "string", "description": "Override the browser user agent"},
            "viewport": {
                "type": "object",
                "properties": {"width": {"type": "integer"}, "height": {"type": "integer"}},
                "description": "Viewport size in CSS pixels",
            },
            "contentPriority": {
                "type": "boolean",
                "description": "Prefer get_content over screenshots for page inspection",
                "default": True,
            },
        }),
    ),
    Tool(
        name=ToolName.NAVIGATE.value,
        description="Navigate the current page to a URL.",
        inputSchema=_schema({
            "url": {"type": "string", "description": "Absolute http(s) URL to open"},
            "waitUntil": {
                "type": "string",
                "enum": ["load", "domcontentloaded", "networkidle", "commit"],
                "description": "When to consider navigation finished",
                "default": "domcontentloaded",
            },
        }, ["url"]),
    ),
    Tool(
        name=ToolName.GET_CONTENT.value,
        description="Get the HTML or visible text of the page or of one element. Preferred over screenshots.",
        inputSchema=_schema({
            "type": {"type": "string", "enum": ["html", "text"], "default": "html"},
            "selector": {"type": "string", "description": "Restrict to the first element matching this selector"},
        }),
    ),
    Tool(
        name=ToolName.CLICK.value,
        description="Click an element on the page.",
        inputSchema=_schema({
            "selector": _SELECTOR,
            "waitForNavigation": {"type": "boolean", "description": "Wait for a navigation after clicking", "default": False},
        }, ["selector"]),
    ),
    Tool(
        name=ToolName.TYPE.value,
        description="Type text into an input field with human-like key delays.",
        inputSchema=_schema({
            "selector": _SELECTOR,
            "text": {"type": "string", "description": "Text to type"},
            "delay": {"type": "integer", "description": "Delay between key presses in milliseconds", "default": 100},
        }, ["selector", "text"]),
    ),
    Tool(
        name=ToolName.WAIT.value,
        description="Wait for a selector to appear, a navigation to finish, or a fixed timeout.",
        inputSchema=_schema({
            "type": {"type": "string", "enum": ["selector", "navigation", "timeout"]},
            "value": {"type": "string", "description": "Selector, or milliseconds for type=timeout"},
            "timeout": {"type": "integer", "description": "Maximum wait in milliseconds", "default": 30000},
        }, ["type", "value"]),
    ),
    Tool(
        name=ToolName.BROWSER_CLOSE.value,
        description="Close the browser instance and release its resources.",
        inputSchema=_schema({}),
    ),
    Tool(
        name=ToolName.SOLVE_CAPTCHA.value,
        description="Attempt to pass a checkbox captcha challenge on the current page.",
        inputSchema=_schema({
            "type": {"type": "string", "enum": ["recaptcha", "hCaptcha", "turnstile"]},
        }, ["type"]),
    ),
    Tool(
        name=ToolName.RANDOM_SCROLL.value,
        description="Scroll the page by a random amount to mimic a human reader.",
        inputSchema=_schema({}),
    ),
    Tool(
        name=ToolName.FIND_SELECTOR.value,
        description="Find a CSS selector for an element containing the given text.",
        inputSchema=_schema({
            "text": {"type": "string", "description": "Text content to search for"},
            "elementType": {"type": "string", "description": "Restrict to this tag name", "default": "*"},
            "exact": {"type": "boolean", "description": "Require an exact text match", "default": False},
        }, ["text"]),
    ),
    Tool(
        name=ToolName.SAVE_CONTENT_AS_MARKDOWN.value,
        description="Save the page (or one element) as a markdown file.",
        inputSchema=_schema({
            "filePath": {"type": "string", "description": "Destination path ending in .md"},
            "contentType": {"type": "string", "enum": ["text", "html"], "default": "text"},
            "selector": {"type": "string", "description": "Restrict to the first element matching this selector"},
            "formatOptions": {
                "type": "object",
                "properties": {
                    "includeMetadata": {"type": "boolean", "default": True},
                    "cleanupWhitespace": {"type": "boolean", "default": True},
                },
            },
        }, ["filePath"]),
    ),
]

TOOLS_BY_NAME: Mapping[ToolName, Tool] = MappingProxyType({ToolName(tool.name): tool for tool in TOOLS})
