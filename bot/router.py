"""
Top-level message router for Prompt Desk Bot.

Resolves the author's role, applies the universal back / start handling
and hands the message to the role's mode handler. Session state is
committed only after the handler has finished the turn.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from .admins import AdminRegistry
from .handlers import OperatorHandler, ParticipantHandler, RoleHandler
from .menus import is_back, is_start, operator_home, participant_home
from .models import IncomingMessage, Role, Turn, utcnow
from .prompts import PromptLifecycle
from .sessions import SessionStore
from .store import DocumentStore
from .submissions import SubmissionService

logger = logging.getLogger(__name__)

RoleLookup = Callable[[str], Role]


class Router:
    """Dispatches inbound messages to operator or participant handlers."""

    def __init__(
        self,
        handlers: Dict[Role, RoleHandler],
        role_of: RoleLookup,
        sessions: Optional[SessionStore] = None,
    ):
        self.handlers = handlers
        self.role_of = role_of
        self.sessions = sessions or SessionStore()

    async def route(self, message: IncomingMessage) -> Turn:
        conv = message.conversation_id
        role = self.role_of(message.author_id)
        handler = self.handlers[role]

        if is_back(message.text) or is_start(message.text):
            self.sessions.reset(conv)
            logger.info(f"{conv}: back to {role.value} home")
            _, turn = handler.home(self.sessions.get(conv))
            return turn

        session = self.sessions.get(conv)
        next_session, turn = await handler.handle(session, message)
        self.sessions.set(conv, next_session)
        return turn


def create_router(
    store: DocumentStore,
    registry: AdminRegistry,
    label_max_chars: int = 100,
    operator_width: int = 3,
    participant_width: int = 2,
    clock: Callable[[], datetime] = utcnow,
) -> Router:
    """Wire the conversation engine around a document store."""
    prompts = PromptLifecycle(store, clock=clock)
    submissions = SubmissionService(store, clock=clock)
    handlers = {
        Role.OPERATOR: OperatorHandler(
            prompts, submissions, operator_home(operator_width), label_max_chars
        ),
        Role.PARTICIPANT: ParticipantHandler(
            prompts, submissions, participant_home(participant_width), label_max_chars
        ),
    }
    return Router(handlers, registry.role_of)
