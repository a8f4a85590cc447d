"""Application context: the explicitly owned process-wide singletons."""
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from mcp.types import Implementation

from real_browser_mcp.config import ServerSettings, get_config
from real_browser_mcp.constants import ToolName
from real_browser_mcp.core.dispatcher import RequestDispatcher
from real_browser_mcp.core.routing import ToolRoute
from real_browser_mcp.core.session import SessionTransport
from real_browser_mcp.graceful_shutdown import LifecycleGuard
from real_browser_mcp.tools import BrowserManager, build_routing_table


@dataclass
class AppContext:
    """Everything a running server shares between requests."""
    config: ServerSettings
    browser: Any
    dispatcher: RequestDispatcher
    transport: SessionTransport
    guard: LifecycleGuard


def build_context(
    config: Optional[ServerSettings] = None,
    browser: Any = None,
    routes: Optional[Mapping[ToolName, ToolRoute]] = None,
) -> AppContext:
    """Wire the browser, dispatcher, transport and lifecycle guard together.

    Args:
        config: Settings, defaults to the process-wide configuration
        browser: Object exposing ``close_browser()`` and
            ``force_kill_all_chrome_processes()``; defaults to a `BrowserManager`
        routes: Routing table, defaults to the browser tool handlers bound to `browser`

    Raises:
        RoutingTableError: If the routing table does not match the tool registry
    """
    config = config or get_config()
    if browser is None:
        browser = BrowserManager(config.browser)
    if routes is None:
        routes = build_routing_table(browser)

    dispatcher = RequestDispatcher(
        routes,
        server_info=Implementation(name=config.server.name, version=config.server.version),
    )
    transport = SessionTransport(dispatcher)

    guard = LifecycleGuard(handler_timeout=config.shutdown.handler_timeout)
    guard.register_shutdown_handler(browser.close_browser)
    guard.register_shutdown_handler(browser.force_kill_all_chrome_processes)

    return AppContext(config=config, browser=browser, dispatcher=dispatcher, transport=transport, guard=guard)
