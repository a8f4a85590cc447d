"""Page interaction tools: clicking, typing, scrolling and captcha checkboxes."""
import random
from typing import Any, Dict, Tuple

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from real_browser_mcp.constants import ToolName
from real_browser_mcp.core.envelope import text_response
from real_browser_mcp.exceptions import ToolError
from real_browser_mcp.tools.browser_manager import BrowserManager
from real_browser_mcp.tools.models import ClickArgs, SolveCaptchaArgs, TypeArgs, parse_arguments

# captcha type -> (challenge iframe selector, checkbox selector inside it)
CAPTCHA_WIDGETS: Dict[str, Tuple[str, str]] = {
    "recaptcha": (
        "iframe[src*='recaptcha/api2/anchor'], iframe[src*='recaptcha/enterprise/anchor']",
        "#recaptcha-anchor",
    ),
    "hCaptcha": ("iframe[src*='hcaptcha.com'][src*='checkbox']", "#checkbox"),
    "turnstile": ("iframe[src*='challenges.cloudflare.com']", "input[type='checkbox']"),
}


async def handle_click(browser: BrowserManager, args: Dict[str, Any]) -> Dict[str, Any]:
    params = parse_arguments(ClickArgs, args, ToolName.CLICK.value)
    page = await browser.get_page()

    try:
        if params.wait_for_navigation:
            async with page.expect_navigation():
                await page.click(params.selector)
        else:
            await page.click(params.selector)
    except PlaywrightTimeoutError as e:
        raise ToolError(f"Element not clickable: {params.selector}", tool_name=ToolName.CLICK.value) from e

    return text_response(f"Clicked element: {params.selector}")


async def handle_type(browser: BrowserManager, args: Dict[str, Any]) -> Dict[str, Any]:
    params = parse_arguments(TypeArgs, args, ToolName.TYPE.value)
    page = await browser.get_page()

    try:
        await page.fill(params.selector, "")
        await page.type(params.selector, params.text, delay=params.delay)
    except PlaywrightTimeoutError as e:
        raise ToolError(f"Input not found: {params.selector}", tool_name=ToolName.TYPE.value) from e

    return text_response(f"Typed {len(params.text)} characters into {params.selector}")


async def handle_solve_captcha(browser: BrowserManager, args: Dict[str, Any]) -> Dict[str, Any]:
    params = parse_arguments(SolveCaptchaArgs, args, ToolName.SOLVE_CAPTCHA.value)
    page = await browser.get_page()
    frame_selector, checkbox_selector = CAPTCHA_WIDGETS[params.type]

    if await page.locator(frame_selector).count() == 0:
        raise ToolError(f"No {params.type} challenge found on the page", tool_name=ToolName.SOLVE_CAPTCHA.value)

    checkbox = page.frame_locator(frame_selector).first.locator(checkbox_selector)
    try:
        await checkbox.click(delay=random.randint(50, 150))
    except PlaywrightTimeoutError as e:
        raise ToolError(
            f"The {params.type} checkbox did not become clickable",
            tool_name=ToolName.SOLVE_CAPTCHA.value,
        ) from e

    return text_response(
        f"Clicked the {params.type} checkbox. If an image challenge appears it must be completed manually."
    )


async def handle_random_scroll(browser: BrowserManager) -> Dict[str, Any]:
    page = await browser.get_page()
    steps = random.randint(2, 5)
    total = 0
    for _ in range(steps):
        distance = random.randint(200, 800)
        await page.mouse.wheel(0, distance)
        total += distance
        await page.wait_for_timeout(random.randint(100, 400))
    return text_response(f"Scrolled {total}px in {steps} steps")
