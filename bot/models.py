"""
Domain records and message effects for the conversation engine.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Role(Enum):
    OPERATOR = "operator"
    PARTICIPANT = "participant"


class SubmissionKind(Enum):
    """Participant submission types and the collection each one lives in."""
    ANSWER = "answers"
    FREE_QUESTION = "free_questions"
    COMMENT = "comments"

    @property
    def collection(self) -> str:
        return self.value


@dataclass
class Prompt:
    """A question put to participants. end_time is None while current."""
    id: str
    text: str
    start_time: datetime
    end_time: Optional[datetime] = None

    @property
    def is_current(self) -> bool:
        return self.end_time is None

    def to_record(self) -> Dict[str, Any]:
        record = {
            "id": self.id,
            "text": self.text,
            "start_time": _iso(self.start_time),
        }
        if self.end_time is not None:
            record["end_time"] = _iso(self.end_time)
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Prompt":
        return cls(
            id=record["id"],
            text=record.get("text", ""),
            start_time=_parse(record.get("start_time")),
            end_time=_parse(record.get("end_time")),
        )


@dataclass
class Submission:
    """An answer, free question or comment sent by a participant."""
    author_id: str
    author_display_name: str
    conversation_id: str
    source_message_id: int
    text: str
    timestamp: datetime = field(default_factory=utcnow)
    prompt_id: Optional[str] = None
    id: str = field(default_factory=new_id)

    def to_record(self) -> Dict[str, Any]:
        record = {
            "id": self.id,
            "author_id": self.author_id,
            "author_display_name": self.author_display_name,
            "conversation_id": self.conversation_id,
            "source_message_id": self.source_message_id,
            "text": self.text,
            "timestamp": _iso(self.timestamp),
        }
        if self.prompt_id is not None:
            record["prompt_id"] = self.prompt_id
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Submission":
        return cls(
            id=record["id"],
            author_id=str(record.get("author_id", "")),
            author_display_name=record.get("author_display_name") or "",
            conversation_id=str(record.get("conversation_id", record.get("author_id", ""))),
            source_message_id=record.get("source_message_id"),
            text=record.get("text", ""),
            timestamp=_parse(record.get("timestamp")),
            prompt_id=record.get("prompt_id"),
        )


@dataclass
class InfoNote:
    text: str
    id: str = field(default_factory=new_id)

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "InfoNote":
        return cls(id=record.get("id") or new_id(), text=record.get("text", ""))


# ── Inbound / outbound ─────────────────────────────────

@dataclass
class IncomingMessage:
    """A text message received from the transport."""
    conversation_id: str
    author_id: str
    author_display_name: str
    source_message_id: int
    text: str


@dataclass
class Reply:
    """Send text to a conversation, optionally replacing its keyboard."""
    conversation_id: str
    text: str
    menu: Optional[List[List[str]]] = None


@dataclass
class Forward:
    """Forward an earlier message from another conversation."""
    conversation_id: str
    from_conversation_id: str
    source_message_id: int


Effect = Union[Reply, Forward]


@dataclass
class Turn:
    """Ordered outbound effects produced by one inbound message."""
    effects: List[Effect] = field(default_factory=list)

    def reply(self, conversation_id: str, text: str, menu: Optional[List[List[str]]] = None) -> "Turn":
        self.effects.append(Reply(conversation_id, text, menu))
        return self

    def forward(self, conversation_id: str, from_conversation_id: str, source_message_id: int) -> "Turn":
        self.effects.append(Forward(conversation_id, from_conversation_id, source_message_id))
        return self

    @property
    def replies(self) -> List[Reply]:
        return [e for e in self.effects if isinstance(e, Reply)]

    @property
    def forwards(self) -> List[Forward]:
        return [e for e in self.effects if isinstance(e, Forward)]

    @property
    def last_reply(self) -> Optional[Reply]:
        replies = self.replies
        return replies[-1] if replies else None
