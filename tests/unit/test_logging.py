"""Tests for applying logging settings to module loggers."""
import logging

import pytest

from real_browser_mcp.config import LoggingConfig, load_config, reset_config
from real_browser_mcp.constants import LogLevel
from real_browser_mcp.utils import configure_loggers, get_logger


@pytest.fixture(autouse=True)
def default_logging(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    yield
    reset_config()
    configure_loggers(LoggingConfig())


def file_handlers(browser_logger):
    return [h for h in browser_logger.logger.handlers if isinstance(h, logging.FileHandler)]


class TestConfigureLoggers:

    def test_config_file_reaches_existing_loggers(self, tmp_path):
        dispatcher_logger = get_logger("real_browser_mcp.dispatcher")
        log_file = tmp_path / "logs" / "server.log"
        path = tmp_path / "custom.yaml"
        path.write_text(f"logging:\n  level: debug\n  file: {log_file}\n", encoding="utf-8")

        config = load_config(str(path))

        assert config.logging.level is LogLevel.DEBUG
        assert dispatcher_logger.logger.level == logging.DEBUG
        assert len(file_handlers(dispatcher_logger)) == 1

        dispatcher_logger.info("written to file")
        for handler in file_handlers(dispatcher_logger):
            handler.flush()
        assert "written to file" in log_file.read_text(encoding="utf-8")

    def test_explicit_level_overrides_config(self):
        session_logger = get_logger("real_browser_mcp.session")

        configure_loggers(LoggingConfig(level="ERROR"), "debug")

        assert session_logger.logger.level == logging.DEBUG
        assert session_logger.logger.propagate is False

    def test_reconfiguring_replaces_handlers(self):
        browser_logger = get_logger("real_browser_mcp.browser")

        configure_loggers(LoggingConfig(emoji_enabled=False))
        configure_loggers(LoggingConfig(emoji_enabled=False))

        assert len(browser_logger.logger.handlers) == 1
        assert browser_logger.emoji_enabled is False
        assert browser_logger._format_message("ready", emoji_key="browser") == "ready"

    def test_markup_in_context_is_escaped(self):
        browser_logger = get_logger("test.logging")

        assert "\\[/x]" in browser_logger._format_message("failed", error="[/x]")
