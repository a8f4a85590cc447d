"""Browser lifecycle tools."""
from typing import Any, Dict

from real_browser_mcp.constants import ToolName
from real_browser_mcp.core.envelope import text_response
from real_browser_mcp.tools.browser_manager import BrowserManager
from real_browser_mcp.tools.models import BrowserInitArgs, parse_arguments


async def handle_browser_init(browser: BrowserManager, args: Dict[str, Any]) -> Dict[str, Any]:
    options = parse_arguments(BrowserInitArgs, args, ToolName.BROWSER_INIT.value)
    await browser.init_browser(options)

    message = "Browser initialized successfully with anti-detection features."
    if options.content_priority:
        message += (
            "\n\n💡 Content priority mode is enabled: use get_content to read the page "
            "instead of relying on screenshots."
        )
    return text_response(message)


async def handle_browser_close(browser: BrowserManager) -> Dict[str, Any]:
    await browser.close_browser()
    return text_response("Browser closed successfully.")
