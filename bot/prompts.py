"""
Prompt lifecycle for Prompt Desk Bot.

At most one prompt is current at a time. Replacing or stopping it moves
it to the archive with an end time; its id, text and start time are kept.

    NoCurrent --submit_new--> Current --submit_new/stop--> Archived

The archive-then-insert sequence spans several store calls and is not
atomic. When a later call fails, the earlier writes of the same rotation
are undone before the error propagates. Prompt mutations come from
operator conversations only, which are expected to act one at a time;
no locking is applied.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from .errors import StoreError
from .models import Prompt, new_id, utcnow
from .store import ARCHIVED_PROMPTS, CURRENT_PROMPT, DocumentStore

logger = logging.getLogger(__name__)

_MIN_DURATION = timedelta(microseconds=1)


class PromptLifecycle:
    """Owns the current prompt slot and the prompt archive."""

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    async def get_current(self) -> Optional[Prompt]:
        record = await self.store.find_one(CURRENT_PROMPT)
        return Prompt.from_record(record) if record else None

    async def list_archived(self) -> List[Prompt]:
        return [Prompt.from_record(r) for r in await self.store.find_all(ARCHIVED_PROMPTS)]

    async def get(self, prompt_id: str) -> Optional[Prompt]:
        """Look a prompt up by id in the current slot, then the archive."""
        record = await self.store.find_one(CURRENT_PROMPT, {"id": prompt_id})
        if record is None:
            record = await self.store.find_one(ARCHIVED_PROMPTS, {"id": prompt_id})
        return Prompt.from_record(record) if record else None

    async def submit_new(self, text: str) -> Tuple[Prompt, Optional[Prompt]]:
        """
        Make text the current prompt.

        Returns:
            (new prompt, prompt archived to make room or None)
        """
        archived = await self._archive_current()
        prompt = Prompt(id=new_id(), text=text, start_time=self.clock())
        try:
            await self.store.insert(CURRENT_PROMPT, prompt.to_record())
        except StoreError:
            if archived is not None:
                await self._restore(archived)
            raise
        logger.info(f"Added new prompt: id={prompt.id}, text={text!r}")
        return prompt, archived

    async def stop(self) -> Optional[Prompt]:
        """Archive the current prompt without a replacement. None if nothing was current."""
        archived = await self._archive_current()
        if archived is None:
            logger.info("Stop requested with no current prompt")
        return archived

    async def delete_current(self, prompt_id: Optional[str] = None) -> bool:
        """
        Remove the current prompt without archiving it.

        With prompt_id, only that prompt is removed; a newer current prompt
        is left alone.
        """
        filter = {"id": prompt_id} if prompt_id else None
        deleted = await self.store.delete_one(CURRENT_PROMPT, filter)
        if deleted:
            logger.info(f"Deleted current prompt {prompt_id or ''}".rstrip())
        return deleted

    async def delete_archived(self, prompt_id: str) -> bool:
        deleted = await self.store.delete_one(ARCHIVED_PROMPTS, {"id": prompt_id})
        if deleted:
            logger.info(f"Deleted archived prompt {prompt_id}")
        return deleted

    async def _archive_current(self) -> Optional[Prompt]:
        current = await self.get_current()
        if current is None:
            return None
        end_time = self.clock()
        if end_time <= current.start_time:
            end_time = current.start_time + _MIN_DURATION
        archived = Prompt(
            id=current.id,
            text=current.text,
            start_time=current.start_time,
            end_time=end_time,
        )
        await self.store.insert(ARCHIVED_PROMPTS, archived.to_record())
        try:
            await self.store.delete_one(CURRENT_PROMPT, {"id": current.id})
        except StoreError:
            logger.error(f"Archiving prompt {current.id} failed, dropping archived copy")
            await self.store.delete_one(ARCHIVED_PROMPTS, {"id": current.id})
            raise
        logger.info(f"Archived prompt: id={current.id}")
        return archived

    async def _restore(self, archived: Prompt):
        """Put an archived prompt back in the current slot."""
        logger.error(f"New prompt not saved, restoring prompt {archived.id}")
        current = Prompt(id=archived.id, text=archived.text, start_time=archived.start_time)
        await self.store.insert(CURRENT_PROMPT, current.to_record())
        await self.store.delete_one(ARCHIVED_PROMPTS, {"id": archived.id})
