"""
Participant submissions and operator info notes.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .models import IncomingMessage, InfoNote, Submission, SubmissionKind, utcnow
from .store import ANSWERS, INFO_NOTES, DocumentStore

logger = logging.getLogger(__name__)


class SubmissionService:
    """Records and lists answers, free questions, comments and info notes."""

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    async def record(
        self,
        kind: SubmissionKind,
        message: IncomingMessage,
        prompt_id: Optional[str] = None,
    ) -> Submission:
        """Store message text as a submission of the given kind. Text is kept as sent."""
        submission = Submission(
            author_id=message.author_id,
            author_display_name=message.author_display_name,
            conversation_id=message.conversation_id,
            source_message_id=message.source_message_id,
            text=message.text,
            timestamp=self.clock(),
            prompt_id=prompt_id if kind is SubmissionKind.ANSWER else None,
        )
        await self.store.insert(kind.collection, submission.to_record())
        logger.info(
            f"Inserted {kind.name.lower()}: id={submission.id}, "
            f"prompt_id={submission.prompt_id}, user={submission.author_display_name}"
        )
        return submission

    async def list(self, kind: SubmissionKind) -> List[Submission]:
        return [Submission.from_record(r) for r in await self.store.find_all(kind.collection)]

    async def answers_for(self, prompt_id: str) -> List[Submission]:
        records = await self.store.find_all(ANSWERS, {"prompt_id": prompt_id})
        return [Submission.from_record(r) for r in records]

    async def delete(self, kind: SubmissionKind, submission_id: str) -> bool:
        deleted = await self.store.delete_one(kind.collection, {"id": submission_id})
        if deleted:
            logger.info(f"Deleted {kind.name.lower()} {submission_id}")
        return deleted

    async def add_info(self, text: str) -> InfoNote:
        note = InfoNote(text=text)
        await self.store.insert(INFO_NOTES, note.to_record())
        logger.info(f"Inserted info note {note.id}")
        return note

    async def list_info(self) -> List[InfoNote]:
        return [InfoNote.from_record(r) for r in await self.store.find_all(INFO_NOTES)]
