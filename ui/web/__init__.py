"""
Web UI Module - FastAPI-based web interface
===========================================

This module provides a browser chat page backed by a JSON API:
- Chat page with typing indicator
- Message submission and polling
- Reply preview and rule bank listing
"""

from .app import create_app, run_app
from .routes import router

__all__ = [
    "create_app",
    "run_app",
    "router",
]
