"""Owner of the single shared Chromium instance.

All tools act on one page. Launch and close are serialized by an internal
lock; concurrent tool calls that share the page are not otherwise ordered.
"""
import asyncio
import sys
from typing import Any, Dict, List, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from rich.markup import escape

from real_browser_mcp.config import BrowserConfig
from real_browser_mcp.exceptions import BrowserError, BrowserNotInitializedError
from real_browser_mcp.tools.models import BrowserInitArgs
from real_browser_mcp.utils import get_logger

logger = get_logger("real_browser_mcp.browser")


class BrowserManager:
    """Lazily launched Playwright browser with one active page."""

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self.content_priority = True
        self._lock = asyncio.Lock()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def is_initialized(self) -> bool:
        return self._page is not None and not self._page.is_closed()

    def _launch_args(self, options: BrowserInitArgs) -> Dict[str, Any]:
        launch: Dict[str, Any] = {
            "headless": self.config.headless if options.headless is None else options.headless,
            "args": list(self.config.launch_args),
        }
        executable_path = options.executable_path or self.config.executable_path
        if executable_path:
            launch["executable_path"] = executable_path
        if options.proxy:
            launch["proxy"] = {"server": options.proxy}
        return launch

    async def init_browser(self, options: Optional[BrowserInitArgs] = None) -> Page:
        """Launch Chromium and open a page, replacing any previous instance.

        Raises:
            BrowserError: If Playwright cannot start the browser
        """
        options = options or BrowserInitArgs()
        async with self._lock:
            await self._close_unlocked()
            launch = self._launch_args(options)
            context_args: Dict[str, Any] = {}
            if options.user_agent:
                context_args["user_agent"] = options.user_agent
            if options.viewport:
                context_args["viewport"] = options.viewport.model_dump()

            try:
                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(**launch)
                self._context = await self._browser.new_context(**context_args)
                self._context.set_default_timeout(self.config.default_timeout_ms)
                self._page = await self._context.new_page()
            except PlaywrightError as e:
                await self._close_unlocked()
                raise BrowserError(f"Failed to launch browser: {e}") from e

            self.content_priority = options.content_priority
            logger.info(f"Browser launched (Headless: {launch['headless']})", emoji_key="browser")
            return self._page

    async def get_page(self) -> Page:
        """Return the active page.

        Raises:
            BrowserNotInitializedError: If `init_browser` has not run or the page was closed
        """
        if not self.is_initialized:
            raise BrowserNotInitializedError()
        return self._page

    async def close_browser(self) -> None:
        """Close the browser if one is open. Safe to call repeatedly."""
        async with self._lock:
            await self._close_unlocked()

    async def _close_unlocked(self) -> None:
        context, browser, pw = self._context, self._browser, self._playwright
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

        if context is not None:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser context: {escape(str(e))}")
        if browser is not None:
            try:
                await browser.close()
                logger.info("Browser closed", emoji_key="browser")
            except PlaywrightError as e:
                logger.warning(f"Error closing browser: {escape(str(e))}")
        if pw is not None:
            try:
                await pw.stop()
            except PlaywrightError as e:
                logger.warning(f"Error stopping Playwright: {escape(str(e))}")

    def _kill_command(self) -> List[str]:
        if sys.platform == "win32":
            return ["taskkill", "/F", "/T", "/IM", "chrome.exe"]
        return ["pkill", "-9", "-f", self.config.kill_pattern]

    async def force_kill_all_chrome_processes(self) -> None:
        """Kill browser processes left behind by a crashed or abandoned session.

        Safe to call when nothing is running; failures are logged, not raised.
        """
        command = self._kill_command()
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            returncode = await proc.wait()
        except OSError as e:
            logger.warning(f"Could not run {command[0]} to kill browser processes: {escape(str(e))}")
            return
        # pkill exits 1 when nothing matched
        if returncode == 0:
            logger.info("Killed orphaned browser processes", emoji_key="browser")
        else:
            logger.debug(f"No orphaned browser processes ({command[0]} exit code {returncode})")
