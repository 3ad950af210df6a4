"""
Core Module - Foundation components for Cozy Companion
======================================================

This module provides the foundational components including:
- Configuration management
- Logging setup
- Exception handling
"""

from .config import Config, load_config, save_config, create_default_config
from .exceptions import (
    CompanionError,
    ConfigError,
    RuleError,
    ConversationError,
)
from .logging import setup_logging, get_logger

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "create_default_config",
    "CompanionError",
    "ConfigError",
    "RuleError",
    "ConversationError",
    "setup_logging",
    "get_logger",
]
