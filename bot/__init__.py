"""
Conversation engine for Prompt Desk Bot.

This module handles:
- Per-conversation sessions and mode dispatch
- Ephemeral selection lists resolved by stable id
- The current/archived prompt lifecycle
- Submission collection through the document store
"""

from .admins import AdminRegistry
from .models import IncomingMessage, Reply, Forward, Turn, Role
from .prompts import PromptLifecycle
from .router import Router, create_router
from .sessions import Mode, Session, SessionStore
from .store import DocumentStore, InMemoryDocumentStore

__all__ = [
    "AdminRegistry",
    "IncomingMessage",
    "Reply",
    "Forward",
    "Turn",
    "Role",
    "PromptLifecycle",
    "Router",
    "create_router",
    "Mode",
    "Session",
    "SessionStore",
    "DocumentStore",
    "InMemoryDocumentStore",
]
