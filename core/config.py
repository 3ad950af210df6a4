"""
Configuration Management - YAML-based configuration with environment overrides
=============================================================================

This module handles all configuration aspects including:
- Loading from YAML files
- Environment variable overrides
- Default values
- Configuration validation
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigError


DEFAULT_INTRO_MESSAGES = [
    "Hey there! I'm your cozy chat companion.",
    "Tell me what's on your mind or how your day's been going.",
    "I'm here to listen, celebrate the wins, and sit with the lows.",
]


def _require(name: str, value: Any, expected: type) -> None:
    """Raise ConfigError unless ``value`` is an instance of ``expected``."""
    # bool is an int subclass, but a YAML `true` is not a number
    if isinstance(value, expected) and not (expected is int and isinstance(value, bool)):
        return
    raise ConfigError(
        f"{name} must be of type {expected.__name__}, got {type(value).__name__}",
        {"value": value},
    )


@dataclass
class ResponderConfig:
    """
    Reply selection configuration.

    Controls the conversation length guard, the generic acknowledgment
    used when a rule has no replies, and where the rule bank comes from.
    """
    # Length guard
    length_guard_threshold: int = 6  # fires when history is longer than this
    gratitude_marker: str = "thank"
    length_guard_message: str = (
        "We've covered a bunch! Anything else you'd like to explore together?"
    )

    # Empty reply-set acknowledgment
    fallback_reply: str = "I'm here and listening. Tell me more about that."

    # Rule bank source; empty means the built-in bank
    rules_file: str = ""

    # Seed for the exhaustion tie-break; None draws from the OS
    seed: Optional[int] = None

    intro_messages: List[str] = field(default_factory=lambda: list(DEFAULT_INTRO_MESSAGES))

    def validate(self) -> None:
        """Validate responder configuration parameters."""
        _require("length_guard_threshold", self.length_guard_threshold, int)
        for name in ("gratitude_marker", "length_guard_message", "fallback_reply", "rules_file"):
            _require(name, getattr(self, name), str)
        if self.seed is not None:
            _require("seed", self.seed, int)
        _require("intro_messages", self.intro_messages, list)
        for line in self.intro_messages:
            _require("intro_messages entry", line, str)

        if self.length_guard_threshold < 0:
            raise ConfigError(
                f"length_guard_threshold cannot be negative, got {self.length_guard_threshold}"
            )

        if not self.gratitude_marker.strip():
            raise ConfigError("gratitude_marker cannot be empty")

        if not self.length_guard_message.strip():
            raise ConfigError("length_guard_message cannot be empty")

        if not self.fallback_reply.strip():
            raise ConfigError("fallback_reply cannot be empty")

        if any(not line.strip() for line in self.intro_messages):
            raise ConfigError("intro_messages cannot contain empty lines")


@dataclass
class TypingConfig:
    """
    Typing delay configuration.

    The delay before a reply becomes visible is
    clamp(len(utterance) * ms_per_char, min_delay_ms, max_delay_ms).
    """
    ms_per_char: int = 45
    min_delay_ms: int = 800
    max_delay_ms: int = 2400

    def validate(self) -> None:
        """Validate typing configuration."""
        for name in ("ms_per_char", "min_delay_ms", "max_delay_ms"):
            _require(name, getattr(self, name), int)

        if self.ms_per_char < 0:
            raise ConfigError(f"ms_per_char cannot be negative, got {self.ms_per_char}")

        if self.min_delay_ms < 0:
            raise ConfigError(f"min_delay_ms cannot be negative, got {self.min_delay_ms}")

        if self.max_delay_ms < self.min_delay_ms:
            raise ConfigError(
                f"max_delay_ms ({self.max_delay_ms}) must not be below "
                f"min_delay_ms ({self.min_delay_ms})"
            )


@dataclass
class UIConfig:
    """
    User interface configuration.

    Controls settings for the terminal UI and the web UI.
    """
    # Web UI settings
    web_host: str = "127.0.0.1"
    web_port: int = 8080
    web_debug: bool = False

    # Terminal UI settings
    tui_theme: str = "dark"

    # Display settings
    show_timestamps: bool = True
    companion_name: str = "Cozy Corner"

    def validate(self) -> None:
        """Validate UI configuration."""
        for name in ("web_host", "tui_theme", "companion_name"):
            _require(name, getattr(self, name), str)
        _require("web_port", self.web_port, int)
        for name in ("web_debug", "show_timestamps"):
            _require(name, getattr(self, name), bool)

        if self.web_port < 1 or self.web_port > 65535:
            raise ConfigError(f"Invalid web port: {self.web_port}")

        if self.tui_theme not in ("dark", "light"):
            raise ConfigError(f"Invalid TUI theme: {self.tui_theme}")


@dataclass
class Config:
    """
    Main configuration container.

    Aggregates all configuration sections into a single object
    and provides methods for validation and serialisation.
    """
    app_name: str = "Cozy Companion"
    version: str = "1.0.0"
    debug: bool = False
    # JSON lines for the main file log
    log_json: bool = False

    responder: ResponderConfig = field(default_factory=ResponderConfig)
    typing: TypingConfig = field(default_factory=TypingConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    # Paths (set at runtime)
    config_dir: str = ""
    data_dir: str = ""
    log_dir: str = ""

    def validate(self) -> None:
        """
        Validate all configuration sections.

        Raises:
            ConfigError: If any configuration section is invalid
        """
        for name in ("app_name", "version"):
            _require(name, getattr(self, name), str)
        for name in ("debug", "log_json"):
            _require(name, getattr(self, name), bool)

        self.responder.validate()
        self.typing.validate()
        self.ui.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "app_name": self.app_name,
            "version": self.version,
            "debug": self.debug,
            "log_json": self.log_json,
            "responder": asdict(self.responder),
            "typing": asdict(self.typing),
            "ui": asdict(self.ui),
        }


SECTIONS = ("responder", "typing", "ui")


def get_default_config_dir() -> Path:
    """
    Get the default configuration directory path.

    Returns:
        Path to the configuration directory
    """
    if "COMPANION_CONFIG_DIR" in os.environ:
        return Path(os.environ["COMPANION_CONFIG_DIR"])

    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "cozy-companion"

    return Path.home() / ".config" / "cozy-companion"


def get_default_data_dir() -> Path:
    """
    Get the default data directory path.

    Returns:
        Path to the data directory
    """
    if "COMPANION_DATA_DIR" in os.environ:
        return Path(os.environ["COMPANION_DATA_DIR"])

    if "XDG_DATA_HOME" in os.environ:
        return Path(os.environ["XDG_DATA_HOME"]) / "cozy-companion"

    return Path.home() / ".local" / "share" / "cozy-companion"


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    This function loads configuration in the following order:
    1. Default values from dataclass
    2. Values from YAML file
    3. Environment variable overrides

    Args:
        config_path: Path to configuration file (optional)
        load_env: Whether to load environment variable overrides

    Returns:
        Config object with loaded values

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    config = Config()

    config.config_dir = str(get_default_config_dir())
    config.data_dir = str(get_default_data_dir())
    config.log_dir = str(Path(config.data_dir) / "logs")

    if config_path:
        yaml_path = Path(config_path)
        if not yaml_path.exists():
            raise ConfigError("Config file not found", {"path": str(yaml_path)})
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    if yaml_path.exists():
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}", {"path": str(yaml_path)})
        except IOError as e:
            raise ConfigError(f"Failed to read config file: {e}", {"path": str(yaml_path)})

        if not isinstance(yaml_config, dict):
            raise ConfigError("Config file must contain a mapping", {"path": str(yaml_path)})

        _apply_yaml_config(config, yaml_config)

    if load_env:
        _apply_env_overrides(config)

    config.validate()

    return config


def _apply_yaml_config(config: Config, yaml_config: Dict[str, Any]) -> None:
    """
    Apply YAML configuration values to Config object.

    Unknown keys are ignored so older config files keep loading.

    Args:
        config: Config object to update
        yaml_config: Dictionary of configuration values from YAML
    """
    for key in ("app_name", "version", "debug", "log_json"):
        if key in yaml_config:
            setattr(config, key, yaml_config[key])

    for section in SECTIONS:
        section_cfg = yaml_config.get(section)
        if not section_cfg:
            continue
        if not isinstance(section_cfg, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")

        section_obj = getattr(config, section)
        for key, value in section_cfg.items():
            if hasattr(section_obj, key):
                setattr(section_obj, key, value)


def _to_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


def _apply_env_overrides(config: Config) -> None:
    """
    Apply environment variable overrides to Config object.

    Environment variables follow the pattern: COMPANION_SECTION_KEY
    For example: COMPANION_TYPING_MIN_DELAY_MS, COMPANION_UI_WEB_PORT

    Args:
        config: Config object to update

    Raises:
        ConfigError: If a value cannot be converted
    """
    env_mappings = {
        "COMPANION_DEBUG": (None, "debug", _to_bool),
        "COMPANION_LOG_JSON": (None, "log_json", _to_bool),

        # Responder settings
        "COMPANION_RESPONDER_LENGTH_GUARD_THRESHOLD": (
            "responder", "length_guard_threshold", int
        ),
        "COMPANION_RESPONDER_RULES_FILE": ("responder", "rules_file"),
        "COMPANION_RESPONDER_SEED": ("responder", "seed", int),

        # Typing settings
        "COMPANION_TYPING_MS_PER_CHAR": ("typing", "ms_per_char", int),
        "COMPANION_TYPING_MIN_DELAY_MS": ("typing", "min_delay_ms", int),
        "COMPANION_TYPING_MAX_DELAY_MS": ("typing", "max_delay_ms", int),

        # UI settings
        "COMPANION_UI_WEB_HOST": ("ui", "web_host"),
        "COMPANION_UI_WEB_PORT": ("ui", "web_port", int),
        "COMPANION_UI_WEB_DEBUG": ("ui", "web_debug", _to_bool),
        "COMPANION_UI_TUI_THEME": ("ui", "tui_theme"),
    }

    for env_var, mapping in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section, key = mapping[0], mapping[1]
        converter = mapping[2] if len(mapping) > 2 else str
        target = config if section is None else getattr(config, section)

        try:
            converted = converter(value)
        except ValueError as e:
            raise ConfigError(f"Invalid value for {env_var}: {e}", {"value": value})

        setattr(target, key, converted)


def save_config(config: Config, config_path: Optional[str] = None) -> Path:
    """
    Save configuration to YAML file.

    Args:
        config: Config object to save
        config_path: Path to save configuration (optional)

    Returns:
        Path the configuration was written to

    Raises:
        ConfigError: If configuration cannot be saved
    """
    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    try:
        yaml_path.parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    except IOError as e:
        raise ConfigError(f"Failed to save config file: {e}", {"path": str(yaml_path)})

    return yaml_path


def create_default_config(config_dir: Optional[str] = None) -> Config:
    """
    Create a default configuration file with sensible defaults.

    Args:
        config_dir: Directory to create configuration in (optional)

    Returns:
        Config object with default values
    """
    config = Config()
    config.config_dir = config_dir or str(get_default_config_dir())
    config.data_dir = str(get_default_data_dir())
    config.log_dir = str(Path(config.data_dir) / "logs")

    Path(config.config_dir).mkdir(parents=True, exist_ok=True)

    save_config(config)

    return config
