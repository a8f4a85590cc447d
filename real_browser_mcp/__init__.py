"""Real Browser MCP Server: browser automation tools over streamable HTTP."""

# Package metadata and version
__version__ = "1.4.0"
