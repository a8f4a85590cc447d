"""Content extraction tools."""
from typing import Any, Dict, Optional

from playwright.async_api import Page

from real_browser_mcp.constants import ToolName
from real_browser_mcp.core.envelope import text_response
from real_browser_mcp.exceptions import ToolError
from real_browser_mcp.tools.browser_manager import BrowserManager
from real_browser_mcp.tools.models import FindSelectorArgs, GetContentArgs, parse_arguments

# Returns a CSS path for the innermost element whose text matches, or null.
_FIND_SELECTOR_JS = """
({text, elementType, exact}) => {
  const needle = text.trim().toLowerCase();
  const matches = Array.from(document.querySelectorAll(elementType)).filter((el) => {
    const content = (el.textContent || '').trim().toLowerCase();
    return exact ? content === needle : content.includes(needle);
  });
  const target = matches.find((el) => !matches.some((other) => other !== el && el.contains(other)));
  if (!target) return null;
  const parts = [];
  let el = target;
  while (el && el.nodeType === Node.ELEMENT_NODE && el !== document.documentElement) {
    if (el.id) {
      parts.unshift('#' + CSS.escape(el.id));
      break;
    }
    let part = el.tagName.toLowerCase();
    const parent = el.parentElement;
    if (parent) {
      const siblings = Array.from(parent.children).filter((s) => s.tagName === el.tagName);
      if (siblings.length > 1) part += `:nth-of-type(${siblings.indexOf(el) + 1})`;
    }
    parts.unshift(part);
    el = parent;
  }
  return parts.join(' > ');
}
"""


async def extract_content(page: Page, content_type: str, selector: Optional[str] = None) -> str:
    """Read HTML or visible text from the page or from the first match of `selector`."""
    if selector:
        locator = page.locator(selector)
        if await locator.count() == 0:
            raise ToolError(f"Element not found: {selector}")
        element = locator.first
        if content_type == "text":
            return await element.inner_text()
        return await element.evaluate("el => el.outerHTML")

    if content_type == "text":
        return await page.inner_text("body")
    return await page.content()


async def handle_get_content(browser: BrowserManager, args: Dict[str, Any]) -> Dict[str, Any]:
    params = parse_arguments(GetContentArgs, args, ToolName.GET_CONTENT.value)
    page = await browser.get_page()
    content = await extract_content(page, params.type, params.selector)
    return text_response(content)


async def handle_find_selector(browser: BrowserManager, args: Dict[str, Any]) -> Dict[str, Any]:
    params = parse_arguments(FindSelectorArgs, args, ToolName.FIND_SELECTOR.value)
    page = await browser.get_page()
    selector = await page.evaluate(
        _FIND_SELECTOR_JS,
        {"text": params.text, "elementType": params.element_type, "exact": params.exact},
    )
    if not selector:
        raise ToolError(
            f"No {params.element_type} element found containing text: {params.text}",
            tool_name=ToolName.FIND_SELECTOR.value,
        )
    return text_response(f"Found selector: {selector}")
