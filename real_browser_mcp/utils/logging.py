"""Enhanced logging using Rich."""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.theme import Theme

from real_browser_mcp.config import LoggingConfig, get_config
from real_browser_mcp.constants import EMOJI_MAP

RICH_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "critical": "red reverse",
    "debug": "dim",
    "success": "green",
    "tool": "blue",
    "session": "magenta",
    "time": "bright_black",
})

# Logs go to stderr; stdout stays clean for process supervisors
console = Console(theme=RICH_THEME, highlight=True, stderr=True)

FILE_LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_loggers: List["BrowserLogger"] = []


def create_rich_console_handler(show_time: Optional[bool] = None) -> RichHandler:
    """Create the console handler shared by application and uvicorn loggers."""
    if show_time is None:
        show_time = get_config().logging.show_timestamps
    return RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=True,
        show_time=show_time,
        show_path=False,
        enable_link_path=False,
    )


def build_logging_config(level: str = "INFO", log_file: Optional[str] = None) -> Dict[str, Any]:
    """Build a `logging.config.dictConfig` dictionary for the HTTP server.

    Args:
        level: Root and application log level
        log_file: Optional path of a rotating log file

    Returns:
        Logging configuration dictionary, also suitable for uvicorn's `log_config`
    """
    level = level.upper()
    handlers = ["rich_console"]
    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "file": {"format": FILE_LOG_FORMAT, "datefmt": FILE_DATE_FORMAT},
        },
        "handlers": {
            "rich_console": {
                "()": "real_browser_mcp.utils.logging.create_rich_console_handler",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": handlers, "level": "INFO" if level != "DEBUG" else "DEBUG", "propagate": False},
            "uvicorn.error": {"level": "INFO" if level != "DEBUG" else "DEBUG", "propagate": True},
            "uvicorn.access": {"handlers": handlers, "level": level, "propagate": False},
        },
        "root": {"level": level, "handlers": handlers},
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "formatter": "file",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 2 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }
        handlers.append("file")

    return config


class BrowserLogger:
    """Logger with Rich formatting, emojis and key=value context."""

    def __init__(self, name: str, level: Union[str, int, None] = None):
        """Initialize the logger.

        Args:
            name: Logger name
            level: Log level, defaults to the configured level
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.propagate = False
        self.configure(get_config().logging, level)
        _loggers.append(self)

    def configure(self, cfg: LoggingConfig, level: Union[str, int, None] = None) -> None:
        """Replace level, handlers and emoji setting with those from `cfg`.

        Args:
            cfg: Logging settings
            level: Overrides ``cfg.level`` when given
        """
        self.emoji_enabled = cfg.emoji_enabled

        handlers = [create_rich_console_handler(cfg.show_timestamps)]
        if cfg.file:
            log_path = Path(cfg.file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_DATE_FORMAT))
            handlers.append(file_handler)

        level = level or cfg.level
        if isinstance(level, str):
            level = getattr(logging, level.upper())
        self.logger.setLevel(level)

        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            self.logger.addHandler(handler)

    def _format_message(self, message: str, emoji_key: Optional[str] = None, **kwargs) -> str:
        """Format log message with emoji and optional metadata.

        Args:
            message: The log message
            emoji_key: Key for emoji lookup
            **kwargs: Additional context data to include

        Returns:
            Formatted message
        """
        emoji = ""
        if self.emoji_enabled and emoji_key and emoji_key in EMOJI_MAP:
            emoji = f"{EMOJI_MAP[emoji_key]} "

        formatted_message = f"{emoji}{message}"

        if kwargs:
            context_pairs = []
            for key, value in kwargs.items():
                if key == "time" and isinstance(value, (int, float)):
                    context_pairs.append(f"[time]{value:.2f}s[/time]")
                elif key == "tool":
                    context_pairs.append(f"[tool]{escape(str(value))}[/tool]")
                elif key == "session":
                    context_pairs.append(f"[session]{escape(str(value))}[/session]")
                else:
                    context_pairs.append(f"{key}={escape(str(value))}")
            formatted_message = f"{formatted_message} " + " ".join(context_pairs)

        return formatted_message

    def debug(self, message: str, emoji_key: Optional[str] = "debug", **kwargs):
        self.logger.debug(self._format_message(message, emoji_key, **kwargs))

    def info(self, message: str, emoji_key: Optional[str] = "info", **kwargs):
        self.logger.info(self._format_message(message, emoji_key, **kwargs))

    def warning(self, message: str, emoji_key: Optional[str] = "warning", **kwargs):
        self.logger.warning(self._format_message(message, emoji_key, **kwargs))

    def error(self, message: str, emoji_key: Optional[str] = "error", exc_info: bool = False, **kwargs):
        """Log an error message.

        Args:
            message: The log message
            emoji_key: Key for emoji lookup
            exc_info: Attach the active exception's traceback
            **kwargs: Additional context data to include
        """
        self.logger.error(self._format_message(message, emoji_key, **kwargs), exc_info=exc_info)

    def critical(self, message: str, emoji_key: Optional[str] = "critical", exc_info: bool = False, **kwargs):
        self.logger.critical(self._format_message(message, emoji_key, **kwargs), exc_info=exc_info)

    def success(self, message: str, emoji_key: Optional[str] = "success", **kwargs):
        """Log a success message (info with success styling)."""
        formatted = self._format_message(message, emoji_key, **kwargs)
        self.logger.info(f"[success]{formatted}[/success]")


@lru_cache(maxsize=32)
def get_logger(name: str) -> BrowserLogger:
    """Get a logger instance with caching.

    Args:
        name: Logger name

    Returns:
        BrowserLogger instance
    """
    return BrowserLogger(name)


def configure_loggers(cfg: LoggingConfig, level: Union[str, int, None] = None) -> None:
    """Apply logging settings to every logger handed out so far.

    Module loggers are created at import time, before any config file or
    command line has been read; call this once those are known.

    Args:
        cfg: Logging settings
        level: Overrides ``cfg.level`` when given
    """
    for browser_logger in _loggers:
        browser_logger.configure(cfg, level)
