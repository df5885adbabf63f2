"""
API Routes for Prompt Desk Bot.
"""

from . import telegram

__all__ = ["telegram"]
