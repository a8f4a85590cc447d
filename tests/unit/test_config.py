"""Tests for configuration loading."""
import json

import pytest

from real_browser_mcp.config import ServerSettings, load_config, reset_config
from real_browser_mcp.constants import DEFAULT_PORT
from real_browser_mcp.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for var in ("SERVER_PORT", "REAL_BROWSER_SERVER__PORT", "REAL_BROWSER_BROWSER__HEADLESS"):
        monkeypatch.delenv(var, raising=False)
    yield
    reset_config()


class TestLoadConfig:

    def test_defaults(self):
        config = load_config(load_default_files=False)

        assert config.server.port == DEFAULT_PORT
        assert config.browser.headless is False
        assert config.shutdown.handler_timeout > 0

    def test_server_port_env_override(self, monkeypatch):
        monkeypatch.setenv("SERVER_PORT", "9123")

        assert load_config(load_default_files=False).server.port == 9123

    @pytest.mark.parametrize("value", ["abc", "0", "70000"])
    def test_invalid_server_port(self, monkeypatch, value):
        monkeypatch.setenv("SERVER_PORT", value)

        with pytest.raises(ConfigurationError):
            load_config(load_default_files=False)

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("server:\n  port: 8100\nbrowser:\n  headless: true\n", encoding="utf-8")

        config = load_config(str(path))

        assert config.server.port == 8100
        assert config.browser.headless is True

    def test_default_json_file_is_discovered(self, tmp_path):
        (tmp_path / "real_browser_config.json").write_text(json.dumps({"server": {"port": 8200}}))

        assert load_config().server.port == 8200

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("server:\n  port: 8100\n", encoding="utf-8")
        monkeypatch.setenv("REAL_BROWSER_SERVER__PORT", "8300")

        assert load_config(str(path)).server.port == 8300

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("server:\n  log_level: loud\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_broken_default_file_is_skipped(self, tmp_path):
        (tmp_path / "real_browser_config.yaml").write_text("server: [unclosed", encoding="utf-8")

        assert isinstance(load_config(), ServerSettings)
