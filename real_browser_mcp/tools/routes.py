"""Binding of every `ToolName` to its browser handler."""
from functools import partial
from typing import Dict

from real_browser_mcp.constants import ToolName
from real_browser_mcp.core.routing import ArgumentPolicy, ToolRoute
from real_browser_mcp.tools.browser_handlers import handle_browser_close, handle_browser_init
from real_browser_mcp.tools.browser_manager import BrowserManager
from real_browser_mcp.tools.content_handlers import handle_find_selector, handle_get_content
from real_browser_mcp.tools.file_handlers import handle_save_content_as_markdown
from real_browser_mcp.tools.interaction_handlers import (
    handle_click,
    handle_random_scroll,
    handle_solve_captcha,
    handle_type,
)
from real_browser_mcp.tools.navigation_handlers import handle_navigate, handle_wait


def build_routing_table(browser: BrowserManager) -> Dict[ToolName, ToolRoute]:
    """Bind each tool to its handler and the shared browser."""
    return {
        ToolName.BROWSER_INIT: ToolRoute(partial(handle_browser_init, browser), ArgumentPolicy.DEFAULT_EMPTY),
        ToolName.NAVIGATE: ToolRoute(partial(handle_navigate, browser)),
        ToolName.GET_CONTENT: ToolRoute(partial(handle_get_content, browser), ArgumentPolicy.DEFAULT_EMPTY),
        ToolName.CLICK: ToolRoute(partial(handle_click, browser)),
        ToolName.TYPE: ToolRoute(partial(handle_type, browser)),
        ToolName.WAIT: ToolRoute(partial(handle_wait, browser)),
        ToolName.BROWSER_CLOSE: ToolRoute(partial(handle_browser_close, browser), ArgumentPolicy.NONE),
        ToolName.SOLVE_CAPTCHA: ToolRoute(partial(handle_solve_captcha, browser)),
        ToolName.RANDOM_SCROLL: ToolRoute(partial(handle_random_scroll, browser), ArgumentPolicy.NONE),
        ToolName.FIND_SELECTOR: ToolRoute(partial(handle_find_selector, browser)),
        ToolName.SAVE_CONTENT_AS_MARKDOWN: ToolRoute(partial(handle_save_content_as_markdown, browser)),
    }
