"""
Graceful shutdown utilities for the Real Browser MCP Server.

This module owns the process-wide reaction to termination signals and to
failures nobody else handled. Whatever the trigger, the registered cleanup
handlers run once, in registration order, each bounded by a timeout, and
their errors are logged rather than raised.
"""
import asyncio
import inspect
import signal
import sys
from typing import Any, Callable, Dict, List, Optional

from rich.markup import escape

from real_browser_mcp.utils import get_logger

logger = get_logger("real_browser_mcp.shutdown")

_SIGNALS = [("SIGINT", signal.SIGINT), ("SIGTERM", signal.SIGTERM)]


class LifecycleGuard:
    """Run-once cleanup for signals, unhandled async failures and uncaught exceptions."""

    def __init__(self, handler_timeout: float = 5.0):
        """Initialize the guard.

        Args:
            handler_timeout: Seconds each cleanup handler may take before it is abandoned
        """
        self.handler_timeout = handler_timeout
        self._shutdown_handlers: List[Callable] = []
        self._exit_callbacks: List[Callable[[], None]] = []
        self._shutdown_in_progress = False
        self._shutdown_complete = False
        self._lock: Optional[asyncio.Lock] = None
        self._original_excepthook = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._installed_signals: List[int] = []

    @property
    def triggered(self) -> bool:
        return self._shutdown_in_progress

    @property
    def completed(self) -> bool:
        return self._shutdown_complete

    def register_shutdown_handler(self, handler: Callable) -> None:
        """Register a function to be called during shutdown.

        Args:
            handler: Async or sync callable taking no arguments
        """
        if handler not in self._shutdown_handlers:
            self._shutdown_handlers.append(handler)
            logger.debug(f"Registered shutdown handler: {getattr(handler, '__name__', repr(handler))}")

    def remove_shutdown_handler(self, handler: Callable) -> None:
        if handler in self._shutdown_handlers:
            self._shutdown_handlers.remove(handler)

    def register_exit_callback(self, callback: Callable[[], None]) -> None:
        """Register a callback asking the host server to stop once cleanup has run."""
        self._exit_callbacks.append(callback)

    async def _execute_shutdown_handlers(self) -> None:
        for handler in self._shutdown_handlers:
            name = escape(getattr(handler, "__name__", repr(handler)))
            try:
                if inspect.iscoroutinefunction(handler):
                    await asyncio.wait_for(handler(), timeout=self.handler_timeout)
                else:
                    handler()
            except asyncio.TimeoutError:
                logger.error(f"Shutdown handler {name} timed out after {self.handler_timeout}s")
            except Exception as e:
                logger.error(f"Error in shutdown handler {name}: {escape(str(e))}")

    async def shutdown(self, reason: str) -> bool:
        """Run the cleanup sequence unless it already ran.

        Args:
            reason: What triggered the shutdown, for the log

        Returns:
            True if this call performed the cleanup, False if it was a duplicate
        """
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._shutdown_in_progress:
                logger.debug(f"Shutdown already handled, ignoring {escape(reason)}")
                return False
            self._shutdown_in_progress = True

            logger.info(f"Process cleanup triggered ({escape(reason)})", emoji_key="shutdown")
            await self._execute_shutdown_handlers()
            self._shutdown_complete = True
            logger.info("Process cleanup completed", emoji_key="shutdown")

        for callback in self._exit_callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in exit callback: {escape(str(e))}")
        return True

    def trigger(self, reason: str) -> None:
        """Start the shutdown from synchronous code without blocking the caller."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            loop.create_task(self.shutdown(reason))
        elif self._loop is not None and self._loop.is_running():
            asyncio.run_coroutine_threadsafe(self.shutdown(reason), self._loop)
        else:
            asyncio.run(self.shutdown(reason))

    def _handle_loop_exception(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        exception = context.get("exception")
        message = context.get("message", "Unhandled exception in event loop")
        if exception is not None:
            logger.critical(f"Unhandled Rejection: {escape(str(message))}: {escape(repr(exception))}")
        else:
            logger.critical(f"Unhandled Rejection: {escape(str(message))}")
        if not self._shutdown_in_progress:
            loop.create_task(self.shutdown("unhandled async failure"))

    def _handle_uncaught_exception(self, exc_type, exc_value, exc_traceback) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            logger.critical(f"Uncaught Exception: {escape(repr(exc_value))}")
        if not self._shutdown_in_progress:
            try:
                self.trigger("uncaught exception")
            except Exception as e:
                logger.error(f"Cleanup after uncaught exception failed: {escape(str(e))}")
        if self._original_excepthook is not None:
            self._original_excepthook(exc_type, exc_value, exc_traceback)

    def _handle_signal(self, sig_name: str) -> None:
        if self._shutdown_in_progress:
            logger.warning(f"Received {sig_name} while shutdown in progress - forcing exit")
            sys.exit(1)
        logger.info(f"Received {sig_name} signal. Initiating graceful shutdown...", emoji_key="shutdown")
        self._loop.create_task(self.shutdown(sig_name))

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None, install_signals: bool = True) -> None:
        """Hook the guard into the running process.

        Args:
            loop: Event loop to watch, defaults to the running loop
            install_signals: Also take over SIGINT/SIGTERM on this loop
        """
        self._loop = loop or asyncio.get_running_loop()
        self._loop.set_exception_handler(self._handle_loop_exception)

        if self._original_excepthook is None:
            self._original_excepthook = sys.excepthook
            sys.excepthook = self._handle_uncaught_exception

        if not install_signals:
            return
        for sig_name, sig_num in _SIGNALS:
            try:
                self._loop.add_signal_handler(sig_num, self._handle_signal, sig_name)
                self._installed_signals.append(sig_num)
                logger.debug(f"Registered {sig_name} handler for graceful shutdown")
            except (NotImplementedError, RuntimeError, ValueError):
                # Windows and non-main threads cannot take signals on the loop
                logger.warning(f"Could not set up {sig_name} handler on the event loop")

    def uninstall(self) -> None:
        """Undo `install`."""
        if self._loop is not None:
            for sig_num in self._installed_signals:
                self._loop.remove_signal_handler(sig_num)
            if not self._loop.is_closed():
                self._loop.set_exception_handler(None)
        self._installed_signals = []
        if self._original_excepthook is not None:
            sys.excepthook = self._original_excepthook
            self._original_excepthook = None
