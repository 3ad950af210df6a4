"""
Terminal UI Module - Textual-based TUI
=====================================

This module provides a terminal chat interface using Textual.
"""

from .app import CompanionApp, run_tui

__all__ = [
    "CompanionApp",
    "run_tui",
]
