"""
Configuration Tests
-------------------
YAML loading, environment overrides and ToolSettings coercion.
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from infra.config import ConfigManager, ToolSettings, load_settings


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "toolbridge.yaml"
    path.write_text(
        "registry:\n"
        "  validate_arguments: false\n"
        "tools:\n"
        "  http_timeout: 5\n"
        "  disabled_categories: [execution, ai]\n"
        "logging:\n"
        "  level: debug\n"
        "  dir: /tmp/toolbridge-logs\n"
    )
    return path


class TestConfigManager:

    def test_missing_file_is_empty(self, tmp_path):
        config = ConfigManager(str(tmp_path / "absent.yaml"))
        assert config.get("tools.http_timeout") is None
        assert config.get("tools.http_timeout", 30) == 30

    def test_dot_notation(self, config_file):
        config = ConfigManager(str(config_file))

        assert config.get("tools.http_timeout") == 5
        assert config.get_section("logging")["level"] == "debug"

    def test_env_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("TOOLBRIDGE_TOOLS_HTTP_TIMEOUT", "9")
        assert ConfigManager(str(config_file)).get("tools.http_timeout") == "9"

    def test_set_runtime(self):
        config = ConfigManager.from_dict({})
        config.set("a.b.c", 1)
        assert config.get("a.b.c") == 1

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ConfigManager(str(path)).get("anything") is None


class TestToolSettings:

    def test_defaults(self):
        settings = ToolSettings()

        assert settings.validate_arguments is True
        assert settings.http_timeout == 30.0
        assert settings.max_read_bytes == 10 * 1024 * 1024
        assert settings.disabled_categories == []

    def test_from_file(self, config_file):
        settings = load_settings(str(config_file))

        assert settings.validate_arguments is False
        assert settings.http_timeout == 5.0
        assert settings.shell_timeout == 30.0
        assert settings.disabled_categories == ["execution", "ai"]
        assert settings.log_level == "DEBUG"
        assert settings.log_dir == "/tmp/toolbridge-logs"

    def test_env_coercion(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TOOLBRIDGE_REGISTRY_VALIDATE_ARGUMENTS", "off")
        monkeypatch.setenv("TOOLBRIDGE_TOOLS_SHELL_TIMEOUT", "2.5")
        monkeypatch.setenv("TOOLBRIDGE_TOOLS_MAX_READ_BYTES", "1024")
        monkeypatch.setenv("TOOLBRIDGE_TOOLS_DISABLED_CATEGORIES", "execution, messaging")

        settings = load_settings(str(tmp_path / "absent.yaml"))

        assert settings.validate_arguments is False
        assert settings.shell_timeout == 2.5
        assert settings.max_read_bytes == 1024
        assert settings.disabled_categories == ["execution", "messaging"]

    def test_bad_boolean(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TOOLBRIDGE_REGISTRY_VALIDATE_ARGUMENTS", "maybe")
        with pytest.raises(ValueError):
            load_settings(str(tmp_path / "absent.yaml"))

    def test_from_dict(self):
        config = ConfigManager.from_dict({"tools": {"max_read_bytes": 10}})
        assert ToolSettings.from_config(config).max_read_bytes == 10
