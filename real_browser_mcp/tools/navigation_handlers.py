"""Navigation and waiting tools."""
import asyncio
from typing import Any, Dict

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from real_browser_mcp.constants import ToolName
from real_browser_mcp.core.envelope import text_response
from real_browser_mcp.exceptions import ToolError, ToolInputError
from real_browser_mcp.tools.browser_manager import BrowserManager
from real_browser_mcp.tools.models import NavigateArgs, WaitArgs, parse_arguments


async def handle_navigate(browser: BrowserManager, args: Dict[str, Any]) -> Dict[str, Any]:
    params = parse_arguments(NavigateArgs, args, ToolName.NAVIGATE.value)
    page = await browser.get_page()

    try:
        response = await page.goto(params.url, wait_until=params.wait_until)
    except PlaywrightTimeoutError as e:
        raise ToolError(f"Navigation to {params.url} timed out", tool_name=ToolName.NAVIGATE.value) from e

    title = await page.title()
    lines = [f"Successfully navigated to {params.url}"]
    if title:
        lines.append(f"Title: {title}")
    if response is not None:
        lines.append(f"Status: {response.status}")
    if browser.content_priority:
        lines.append("\n💡 Use get_content to read the page content.")
    return text_response("\n".join(lines))


async def handle_wait(browser: BrowserManager, args: Dict[str, Any]) -> Dict[str, Any]:
    params = parse_arguments(WaitArgs, args, ToolName.WAIT.value)

    if params.type == "timeout":
        try:
            milliseconds = int(params.value)
        except ValueError as e:
            raise ToolInputError(
                f"Wait value must be a number of milliseconds, got {params.value!r}",
                param_name="value",
                tool_name=ToolName.WAIT.value,
            ) from e
        if milliseconds < 0:
            raise ToolInputError("Wait value must not be negative", param_name="value", tool_name=ToolName.WAIT.value)
        await asyncio.sleep(milliseconds / 1000)
        return text_response(f"Waited {milliseconds}ms")

    page = await browser.get_page()
    try:
        if params.type == "selector":
            await page.wait_for_selector(params.value, timeout=params.timeout)
            return text_response(f"Element {params.value} appeared")
        await page.wait_for_load_state("load", timeout=params.timeout)
        return text_response("Navigation completed")
    except PlaywrightTimeoutError as e:
        raise ToolError(
            f"Timed out after {params.timeout}ms waiting for {params.type} {params.value}",
            tool_name=ToolName.WAIT.value,
        ) from e
