"""
Per-conversation session state.

A session records which mode a conversation is in and, for selection
modes, the ephemeral list of options it was last shown. Sessions live in
memory only and are keyed by conversation id.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


class Mode(Enum):
    """How the next freeform message of a conversation is interpreted."""
    IDLE = "idle"
    # Operator
    NEW_PROMPT = "new_prompt"
    ADD_INFO = "add_info"
    DELETE = "delete"
    # Participant
    ANSWER = "answer"
    COMMENT = "comment"
    ASK = "ask"
    # Both roles
    SELECT_ANSWERS_PROMPT = "select_answers_prompt"

    @property
    def is_selection(self) -> bool:
        return self in (Mode.DELETE, Mode.SELECT_ANSWERS_PROMPT)


@dataclass(frozen=True)
class SelectionEntry:
    label: str
    stable_id: str


@dataclass(frozen=True)
class Session:
    conversation_id: str
    mode: Mode = Mode.IDLE
    selection: Optional[Tuple[SelectionEntry, ...]] = None

    def enter(self, mode: Mode, selection: Optional[Iterable[SelectionEntry]] = None) -> "Session":
        """Switch mode. Any previous selection list is dropped."""
        return replace(
            self,
            mode=mode,
            selection=tuple(selection) if selection is not None else None,
        )

    def home(self) -> "Session":
        return Session(conversation_id=self.conversation_id)

    @property
    def is_idle(self) -> bool:
        return self.mode is Mode.IDLE and self.selection is None


class SessionStore:
    """In-memory sessions, one per conversation id."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def get(self, conversation_id: str) -> Session:
        session = self._sessions.get(conversation_id)
        if session is None:
            return Session(conversation_id=conversation_id)
        return session

    def set(self, conversation_id: str, session: Session):
        if session.conversation_id != conversation_id:
            raise ValueError(
                f"Session for {session.conversation_id} cannot be stored under {conversation_id}"
            )
        if session.is_idle:
            self._sessions.pop(conversation_id, None)
        else:
            self._sessions[conversation_id] = session
        logger.debug(f"Session {conversation_id} -> {session.mode.value}")

    def reset(self, conversation_id: str):
        self._sessions.pop(conversation_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
