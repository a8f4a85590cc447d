"""Shared fixtures: fake browser collaborators and a recording routing table."""
from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from real_browser_mcp.config import ServerSettings
from real_browser_mcp.constants import ToolName
from real_browser_mcp.core.context import AppContext, build_context
from real_browser_mcp.core.dispatcher import RequestDispatcher
from real_browser_mcp.core.envelope import text_response
from real_browser_mcp.core.routing import ArgumentPolicy, ToolRoute
from real_browser_mcp.core.server import create_app
from real_browser_mcp.core.session import SessionTransport
from real_browser_mcp.exceptions import ToolInputError

ZERO_ARGUMENT_TOOLS = {ToolName.BROWSER_CLOSE, ToolName.RANDOM_SCROLL}
DEFAULT_EMPTY_TOOLS = {ToolName.BROWSER_INIT, ToolName.GET_CONTENT}

Call = Tuple[ToolName, Optional[Any]]


class FakeBrowser:
    """Stands in for `BrowserManager` at the lifecycle boundary."""

    def __init__(self):
        self.events: List[str] = []

    async def close_browser(self) -> None:
        self.events.append("close_browser")

    async def force_kill_all_chrome_processes(self) -> None:
        self.events.append("force_kill_all_chrome_processes")


def _recording_handler(name: ToolName, calls: List[Call], policy: ArgumentPolicy):
    if policy is ArgumentPolicy.NONE:
        async def handler():
            calls.append((name, None))
            return text_response(f"{name.value} done")
        return handler

    async def handler(arguments):
        calls.append((name, arguments))
        if name is ToolName.NAVIGATE:
            url = (arguments or {}).get("url", "")
            if not url.startswith(("http://", "https://")):
                raise ToolInputError(f"Invalid URL: {url!r}")
            return text_response(f"Successfully navigated to {url}")
        return text_response(f"{name.value} done")
    return handler


def make_routes(calls: List[Call], overrides: Optional[Dict[ToolName, ToolRoute]] = None) -> Dict[ToolName, ToolRoute]:
    """Build a complete routing table whose handlers record their arguments."""
    routes = {}
    for name in ToolName:
        if name in ZERO_ARGUMENT_TOOLS:
            policy = ArgumentPolicy.NONE
        elif name in DEFAULT_EMPTY_TOOLS:
            policy = ArgumentPolicy.DEFAULT_EMPTY
        else:
            policy = ArgumentPolicy.RAW
        routes[name] = ToolRoute(_recording_handler(name, calls, policy), policy)
    routes.update(overrides or {})
    return routes


@pytest.fixture
def calls() -> List[Call]:
    return []


@pytest.fixture
def routes(calls):
    return make_routes(calls)


@pytest.fixture
def dispatcher(routes) -> RequestDispatcher:
    return RequestDispatcher(routes)


@pytest.fixture
def transport(dispatcher) -> SessionTransport:
    return SessionTransport(dispatcher)


@pytest.fixture
def fake_browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings()


@pytest.fixture
def app_context(settings, fake_browser, routes) -> AppContext:
    return build_context(settings, browser=fake_browser, routes=routes)


@pytest.fixture
def client(app_context):
    with TestClient(create_app(app_context)) as test_client:
        yield test_client


def jsonrpc(method: str, params: Optional[Dict[str, Any]] = None, request_id: Any = 1) -> Dict[str, Any]:
    message: Dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return message
