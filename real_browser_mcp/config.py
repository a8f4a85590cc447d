"""
Configuration management for the Real Browser MCP Server.

Handles loading, validation, and access to configuration settings
from config files and environment variables.

Priority: SERVER_PORT > REAL_BROWSER_* env vars > config file > model defaults
"""
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from real_browser_mcp import __version__
from real_browser_mcp.constants import DEFAULT_HOST, DEFAULT_PORT, PORT_ENV_VAR, SERVER_NAME, LogLevel
from real_browser_mcp.exceptions import ConfigurationError

DEFAULT_CONFIG_PATHS = [
    "./real_browser_config.yaml",
    "./real_browser_config.yml",
    "./real_browser_config.json",
    "~/.config/real_browser_mcp/config.yaml",
]

ENV_PREFIX = "REAL_BROWSER_"

_config = None

# Basic logger for config loading issues before full logging is set up
config_logger = logging.getLogger("real_browser_mcp.config")
if not config_logger.hasHandlers():
    config_logger.addHandler(logging.StreamHandler(sys.stderr))
    config_logger.setLevel(logging.INFO)

_LOG_LEVELS = [level.value.lower() for level in LogLevel]


class ServerConfig(BaseModel):
    """HTTP server settings."""
    name: str = Field(SERVER_NAME, description="Server identity reported in the handshake")
    version: str = Field(__version__, description="Server version reported in the handshake")
    host: str = Field(DEFAULT_HOST, description="Host to bind the server to")
    port: int = Field(DEFAULT_PORT, description="Port to bind the server to")
    log_level: str = Field("info", description="Uvicorn log level")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="CORS allowed origins")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        level_lower = v.lower()
        if level_lower not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of {_LOG_LEVELS}")
        return level_lower

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        if not 0 < v < 65536:
            raise ValueError("Port must be between 1 and 65535")
        return v


class BrowserConfig(BaseModel):
    """Settings for the shared Chromium instance."""
    headless: bool = Field(False, description="Default headless mode for browser_init")
    executable_path: Optional[str] = Field(None, description="Custom Chrome/Chromium binary")
    launch_args: List[str] = Field(
        default_factory=lambda: [
            "--no-first-run",
            "--no-default-browser-check",
            "--disable-blink-features=AutomationControlled",
        ],
        description="Extra command line switches passed to Chromium",
    )
    default_timeout_ms: int = Field(30000, description="Default Playwright action timeout")
    kill_pattern: str = Field("ms-playwright", description="Command line pattern of orphaned browser processes")


class LoggingConfig(BaseModel):
    """Logging settings."""
    level: LogLevel = Field(LogLevel.INFO, description="Application log level")
    file: Optional[str] = Field(None, description="Optional log file path")
    emoji_enabled: bool = Field(True, description="Prefix log lines with emojis")
    show_timestamps: bool = Field(True, description="Show timestamps on console output")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class ShutdownConfig(BaseModel):
    """Lifecycle guard settings."""
    handler_timeout: float = Field(5.0, description="Seconds allowed per cleanup handler")


class ServerSettings(BaseSettings):
    """Main server configuration model."""
    model_config = SettingsConfigDict(
        env_nested_delimiter="__",  # REAL_BROWSER_SERVER__PORT
        env_prefix=ENV_PREFIX,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    shutdown: ShutdownConfig = Field(default_factory=ShutdownConfig)

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        # File values arrive as init kwargs; env vars must win over them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def expand_path(path: str) -> str:
    """Expand user and variables in path."""
    expanded = os.path.expandvars(os.path.expanduser(path))
    return os.path.abspath(expanded)


def find_config_file() -> Optional[str]:
    """Find the first available configuration file from default paths."""
    for path in DEFAULT_CONFIG_PATHS:
        expanded_path = expand_path(path)
        if os.path.isfile(expanded_path):
            config_logger.debug(f"Found config file: {expanded_path}")
            return expanded_path
    return None


def load_config_from_file(path: str) -> Dict[str, Any]:
    """Load configuration from a file (YAML or JSON)."""
    path = expand_path(path)
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")

    config_logger.debug(f"Loading configuration from file: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            if path.endswith((".yaml", ".yml")):
                config_data = yaml.safe_load(f)
            elif path.endswith(".json"):
                config_data = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration file format: {path}. Use .yaml or .json.")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ValueError(f"Invalid format in configuration file {path}: {e}") from e

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping at the top level")
    return config_data


def _port_override() -> Optional[int]:
    raw = os.environ.get(PORT_ENV_VAR)
    if raw is None or raw.strip() == "":
        return None
    try:
        port = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{PORT_ENV_VAR} must be an integer, got {raw!r}") from e
    if not 0 < port < 65536:
        raise ConfigurationError(f"{PORT_ENV_VAR} out of range: {port}")
    return port


def load_config(config_file_path: Optional[str] = None, load_default_files: bool = True) -> ServerSettings:
    """Load configuration from defaults, file, and environment variables.

    Args:
        config_file_path: Explicit path to a config file. Failing to load it is fatal.
        load_default_files: Whether to search the default config locations.

    Returns:
        Validated ServerSettings object.

    Raises:
        ConfigurationError: If the explicit file or the resulting settings are invalid.
    """
    global _config

    file_config_data: Dict[str, Any] = {}
    if config_file_path:
        try:
            file_config_data = load_config_from_file(config_file_path)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Failed to load specified config: {config_file_path}: {e}") from e
    elif load_default_files:
        default_path = find_config_file()
        if default_path:
            try:
                file_config_data = load_config_from_file(default_path)
            except (OSError, ValueError) as e:
                config_logger.warning(f"Could not load config file {default_path}: {e}")

    try:
        loaded_config = ServerSettings(**file_config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e

    port = _port_override()
    if port is not None:
        loaded_config.server.port = port

    if loaded_config.logging.file:
        loaded_config.logging.file = expand_path(loaded_config.logging.file)

    _config = loaded_config
    config_logger.debug("Configuration loaded successfully.")

    # Deferred: utils.logging reads this module at import time
    from real_browser_mcp.utils.logging import configure_loggers
    configure_loggers(loaded_config.logging)
    return _config


def get_config() -> ServerSettings:
    """Get the globally loaded configuration, loading it on first use."""
    global _config
    if _config is None:
        load_config()
    return _config


def reset_config() -> None:
    """Forget the loaded configuration so the next `get_config` reloads it."""
    global _config
    _config = None
