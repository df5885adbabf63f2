"""
API Module for Prompt Desk Bot.

FastAPI application with routes for:
- Telegram webhook receipt
- Health checks
"""

from .main import create_app, app

__all__ = ["create_app", "app"]
