"""
Test Configuration Module
========================

Unit tests for configuration loading and validation.
"""

import pytest
from pathlib import Path

# Add parent directory to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import (
    Config, ResponderConfig, TypingConfig, UIConfig,
    load_config, save_config, create_default_config
)
from core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Point config and data directories at a temporary location."""
    monkeypatch.setenv("COMPANION_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("COMPANION_DATA_DIR", str(tmp_path / "data"))
    for var in ("COMPANION_TYPING_MIN_DELAY_MS", "COMPANION_UI_WEB_PORT", "COMPANION_DEBUG"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


class TestResponderConfig:
    """Tests for ResponderConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = ResponderConfig()
        assert config.length_guard_threshold == 6
        assert config.gratitude_marker == "thank"
        assert config.length_guard_message.startswith("We've covered a bunch!")
        assert config.seed is None
        assert len(config.intro_messages) == 3

    def test_negative_threshold(self):
        """Test negative threshold raises error."""
        with pytest.raises(ConfigError):
            ResponderConfig(length_guard_threshold=-1).validate()

    def test_empty_fallback_reply(self):
        """Test blank fallback reply raises error."""
        with pytest.raises(ConfigError):
            ResponderConfig(fallback_reply="   ").validate()

    def test_string_threshold(self):
        with pytest.raises(ConfigError):
            ResponderConfig(length_guard_threshold="6").validate()


class TestTypingConfig:
    """Tests for TypingConfig."""

    def test_default_values(self):
        config = TypingConfig()
        assert config.ms_per_char == 45
        assert config.min_delay_ms == 800
        assert config.max_delay_ms == 2400

    def test_inverted_bounds(self):
        """Test max below min raises error."""
        with pytest.raises(ConfigError):
            TypingConfig(min_delay_ms=2000, max_delay_ms=1000).validate()


class TestUIConfig:
    """Tests for UIConfig."""

    def test_invalid_port(self):
        with pytest.raises(ConfigError):
            UIConfig(web_port=70000).validate()

    def test_invalid_theme(self):
        with pytest.raises(ConfigError):
            UIConfig(tui_theme="neon").validate()


class TestLoadConfig:
    """Tests for loading configuration."""

    def test_defaults_without_file(self, isolated_dirs):
        """Test loading with no config file uses defaults."""
        config = load_config()
        assert config.app_name == "Cozy Companion"
        assert config.config_dir == str(isolated_dirs / "config")
        assert config.log_dir == str(isolated_dirs / "data" / "logs")

    def test_yaml_values(self, tmp_path):
        """Test values from a YAML file override defaults."""
        path = tmp_path / "custom.yaml"
        path.write_text(
            "debug: true\n"
            "responder:\n"
            "  length_guard_threshold: 10\n"
            "  unknown_key: ignored\n"
            "typing:\n"
            "  min_delay_ms: 500\n"
        )

        config = load_config(str(path))

        assert config.debug is True
        assert config.responder.length_guard_threshold == 10
        assert config.typing.min_delay_ms == 500
        assert config.typing.max_delay_ms == 2400

    def test_invalid_yaml(self, tmp_path):
        """Test unparseable YAML raises ConfigError."""
        path = tmp_path / "broken.yaml"
        path.write_text("responder: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_invalid_values_rejected(self, tmp_path):
        """Test loaded values are validated."""
        path = tmp_path / "bad.yaml"
        path.write_text("typing:\n  min_delay_ms: 3000\n")

        with pytest.raises(ConfigError):
            load_config(str(path))

    @pytest.mark.parametrize("body", [
        "responder:\n  length_guard_threshold: \"6\"\n",
        "typing:\n  ms_per_char: 4.5\n",
        "ui:\n  web_port: true\n",
        "ui:\n  show_timestamps: \"no\"\n",
        "responder:\n  intro_messages: hello\n",
        "log_json: 1\n",
    ])
    def test_wrong_types_rejected(self, tmp_path, body):
        """Test mistyped YAML values raise ConfigError, not TypeError."""
        path = tmp_path / "typed.yaml"
        path.write_text(body)

        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_log_json_from_env(self, monkeypatch):
        monkeypatch.setenv("COMPANION_LOG_JSON", "true")
        assert load_config().log_json is True

    def test_env_overrides(self, monkeypatch):
        """Test environment variables override file and defaults."""
        monkeypatch.setenv("COMPANION_TYPING_MIN_DELAY_MS", "100")
        monkeypatch.setenv("COMPANION_UI_WEB_PORT", "9000")
        monkeypatch.setenv("COMPANION_DEBUG", "yes")

        config = load_config()

        assert config.typing.min_delay_ms == 100
        assert config.ui.web_port == 9000
        assert config.debug is True

    def test_env_override_bad_value(self, monkeypatch):
        monkeypatch.setenv("COMPANION_UI_WEB_PORT", "not-a-port")

        with pytest.raises(ConfigError):
            load_config()


class TestSaveConfig:
    """Tests for saving configuration."""

    def test_save_and_reload(self, tmp_path):
        config = Config()
        config.responder.length_guard_threshold = 12
        path = save_config(config, str(tmp_path / "saved.yaml"))

        reloaded = load_config(str(path), load_env=False)

        assert reloaded.responder.length_guard_threshold == 12
        assert reloaded.responder.intro_messages == config.responder.intro_messages

    def test_create_default_config(self, isolated_dirs):
        config = create_default_config()
        assert (Path(config.config_dir) / "config.yaml").exists()

    def test_to_dict(self):
        """Test conversion to dictionary."""
        d = Config().to_dict()
        assert "responder" in d
        assert "typing" in d
        assert "ui" in d
