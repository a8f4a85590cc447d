"""Export of page content to markdown files."""
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import aiofiles
from markdownify import markdownify

from real_browser_mcp.constants import ToolName
from real_browser_mcp.core.envelope import text_response
from real_browser_mcp.tools.browser_manager import BrowserManager
from real_browser_mcp.tools.content_handlers import extract_content
from real_browser_mcp.tools.models import SaveContentAsMarkdownArgs, parse_arguments


def cleanup_whitespace(markdown: str) -> str:
    """Strip trailing spaces and collapse runs of blank lines."""
    lines = [line.rstrip() for line in markdown.splitlines()]
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip() + "\n"


def metadata_header(title: str, url: str) -> str:
    saved_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    heading = title or url
    return f"# {heading}\n\n- URL: {url}\n- Saved: {saved_at}\n\n---\n\n"


async def handle_save_content_as_markdown(browser: BrowserManager, args: Dict[str, Any]) -> Dict[str, Any]:
    params = parse_arguments(SaveContentAsMarkdownArgs, args, ToolName.SAVE_CONTENT_AS_MARKDOWN.value)
    page = await browser.get_page()

    content = await extract_content(page, params.content_type, params.selector)
    markdown = markdownify(content, heading_style="ATX") if params.content_type == "html" else content

    if params.format_options.cleanup_whitespace:
        markdown = cleanup_whitespace(markdown)
    if params.format_options.include_metadata:
        markdown = metadata_header(await page.title(), page.url) + markdown

    path = Path(params.file_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(markdown)

    return text_response(f"Content saved to {path} ({len(markdown)} characters)")
